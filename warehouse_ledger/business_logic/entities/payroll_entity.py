# warehouse_ledger/business_logic/entities/payroll_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from warehouse_ledger.constants import PayrollStatus

_zero = lambda: Decimal("0.00")

@dataclass
class PayrollEntity(BaseEntity):
    employee_id: int # Foreign Key to EmployeeEntity
    pay_period_start: date
    pay_period_end: date

    hours_worked: Decimal = field(default_factory=_zero)
    overtime_hours: Decimal = field(default_factory=_zero)
    hourly_rate: Decimal = field(default_factory=_zero)
    overtime_rate: Decimal = field(default_factory=_zero)
    bonus: Decimal = field(default_factory=_zero)
    gross_pay: Decimal = field(default_factory=_zero)

    federal_tax: Decimal = field(default_factory=_zero)
    state_tax: Decimal = field(default_factory=_zero)
    social_security: Decimal = field(default_factory=_zero)
    medicare: Decimal = field(default_factory=_zero)
    retirement_401k: Decimal = field(default_factory=_zero)
    health_insurance: Decimal = field(default_factory=_zero)
    dental_insurance: Decimal = field(default_factory=_zero)
    other_deductions: Decimal = field(default_factory=_zero)
    total_deductions: Decimal = field(default_factory=_zero)
    net_pay: Decimal = field(default_factory=_zero)

    status: PayrollStatus = field(default=PayrollStatus.DRAFT)
    pay_date: Optional[date] = field(default=None)
    notes: Optional[str] = field(default=None)
    journal_entry_id: Optional[int] = field(default=None) # set when the payment is posted

    @property
    def pay_period_key(self) -> str:
        return f"{self.pay_period_start.isoformat()}_{self.pay_period_end.isoformat()}"
