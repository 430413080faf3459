# warehouse_ledger/business_logic/entities/employee_entity.py
from dataclasses import dataclass, field
from typing import Optional, Dict
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from warehouse_ledger.constants import EmployeeRole, EmployeeStatus, PayType, DEFAULT_PAGE_PERMISSIONS

@dataclass
class EmployeeEntity(BaseEntity):
    name: str
    email: str
    position: str
    role: EmployeeRole = field(default=EmployeeRole.EMPLOYEE)
    status: EmployeeStatus = field(default=EmployeeStatus.ACTIVE)
    department: Optional[str] = field(default=None)
    phone: Optional[str] = field(default=None)
    hire_date: Optional[date] = field(default=None)
    assigned_warehouse_id: Optional[str] = field(default=None)

    # Compensation
    pay_type: PayType = field(default=PayType.HOURLY)
    hourly_rate: Decimal = field(default_factory=lambda: Decimal("0.00"))
    annual_salary: Decimal = field(default_factory=lambda: Decimal("0.00"))

    # Withholding, in percent of gross pay
    federal_withholding: Decimal = field(default_factory=lambda: Decimal("0.00"))
    state_withholding: Decimal = field(default_factory=lambda: Decimal("0.00"))
    social_security_rate: Decimal = field(default_factory=lambda: Decimal("0.00"))
    medicare_rate: Decimal = field(default_factory=lambda: Decimal("0.00"))
    retirement_401k_rate: Decimal = field(default_factory=lambda: Decimal("0.00"))

    # Flat per-period benefit deductions
    health_insurance_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    dental_insurance_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))

    page_permissions: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_PAGE_PERMISSIONS))

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
