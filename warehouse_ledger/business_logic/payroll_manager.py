# warehouse_ledger/business_logic/payroll_manager.py

import csv
import io
import logging
from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date
from decimal import Decimal

from warehouse_ledger.business_logic.entities.payroll_entity import PayrollEntity
from warehouse_ledger.business_logic.entities.employee_entity import EmployeeEntity
from warehouse_ledger.business_logic.employee_manager import EmployeeManager
from warehouse_ledger.business_logic.journal_manager import JournalManager
from warehouse_ledger.config import PAY_PERIODS_PER_YEAR, OVERTIME_MULTIPLIER
from warehouse_ledger.constants import (
    PayType, PayrollStatus, PAYROLL_TRANSITIONS, DEFAULT_ACCOUNTS_CONFIG_FOR_PAYROLL
)
from warehouse_ledger.utils.date_converter import to_date, to_display_str
from warehouse_ledger.utils.money import ZERO, to_money, percent_of

if TYPE_CHECKING:
    from warehouse_ledger.data_access.payrolls_repository import PayrollsRepository

logger = logging.getLogger(__name__)

PAYROLL_HISTORY_CSV_HEADER = ["Run Date", "Pay Period", "Employee Count", "Gross Pay", "Deductions", "Net Pay", "Status"]

_UNCHANGED = object()


def calculate_pay(employee: EmployeeEntity,
                  hours_worked: Any = ZERO,
                  overtime_hours: Any = ZERO,
                  bonus: Any = ZERO,
                  other_deductions: Any = ZERO) -> Dict[str, Decimal]:
    """
    Gross pay, each deduction and net pay for one pay period.

    Hourly: hours x rate + overtime x rate x 1.5 + bonus.
    Salary: annual salary / pay periods per year + bonus; hours are ignored.
    Withholdings are percentages of gross; insurance amounts are flat.
    """
    hours_worked = to_money(hours_worked, "hours_worked")
    overtime_hours = to_money(overtime_hours, "overtime_hours")
    bonus = to_money(bonus, "bonus")
    other_deductions = to_money(other_deductions, "other_deductions")
    for name, value in (("hours_worked", hours_worked), ("overtime_hours", overtime_hours),
                        ("bonus", bonus), ("other_deductions", other_deductions)):
        if value < 0:
            raise ValueError(f"{name} cannot be negative.")

    hourly_rate = to_money(employee.hourly_rate)
    overtime_rate = to_money(hourly_rate * OVERTIME_MULTIPLIER)
    if employee.pay_type == PayType.SALARY:
        base_pay = to_money(to_money(employee.annual_salary) / Decimal(PAY_PERIODS_PER_YEAR))
        overtime_hours = ZERO
    else:
        base_pay = to_money(hours_worked * hourly_rate) + to_money(overtime_hours * overtime_rate)
    gross_pay = base_pay + bonus
    if gross_pay <= ZERO:
        raise ValueError(f"Gross pay for employee '{employee.name}' must be greater than zero.")

    breakdown = {
        "federal_tax": percent_of(gross_pay, employee.federal_withholding),
        "state_tax": percent_of(gross_pay, employee.state_withholding),
        "social_security": percent_of(gross_pay, employee.social_security_rate),
        "medicare": percent_of(gross_pay, employee.medicare_rate),
        "retirement_401k": percent_of(gross_pay, employee.retirement_401k_rate),
        "health_insurance": to_money(employee.health_insurance_amount),
        "dental_insurance": to_money(employee.dental_insurance_amount),
        "other_deductions": other_deductions,
    }
    total_deductions = sum(breakdown.values(), ZERO)
    if total_deductions > gross_pay:
        raise ValueError(f"Deductions ({total_deductions}) exceed gross pay ({gross_pay}) for employee "
                         f"'{employee.name}'.")

    breakdown.update({
        "hours_worked": hours_worked,
        "overtime_hours": overtime_hours,
        "hourly_rate": hourly_rate,
        "overtime_rate": overtime_rate,
        "bonus": bonus,
        "gross_pay": gross_pay,
        "total_deductions": total_deductions,
        "net_pay": gross_pay - total_deductions,
    })
    return breakdown


class PayrollManager:
    def __init__(self,
                 payrolls_repository: 'PayrollsRepository',
                 employee_manager: EmployeeManager,
                 journal_manager: JournalManager,
                 accounts_config: Optional[Dict[str, str]] = None):

        if payrolls_repository is None: raise ValueError("payrolls_repository cannot be None")
        if employee_manager is None: raise ValueError("employee_manager cannot be None")
        if journal_manager is None: raise ValueError("journal_manager cannot be None")

        self.payrolls_repository = payrolls_repository
        self.employee_manager = employee_manager
        self.journal_manager = journal_manager
        self.accounts_config = accounts_config if accounts_config is not None else DEFAULT_ACCOUNTS_CONFIG_FOR_PAYROLL

    @staticmethod
    def _apply_pay(entry: PayrollEntity, pay: Dict[str, Decimal]) -> None:
        for key, value in pay.items():
            setattr(entry, key, value)

    @staticmethod
    def _check_period(pay_period_start: Optional[date], pay_period_end: Optional[date]) -> None:
        if pay_period_start is None or pay_period_end is None:
            raise ValueError("Pay period start and end are required.")
        if pay_period_end < pay_period_start:
            raise ValueError("Pay period end cannot be before its start.")

    def create_entry(self,
                     employee_id: int,
                     pay_period_start: Union[date, str],
                     pay_period_end: Union[date, str],
                     hours_worked: Any = ZERO,
                     overtime_hours: Any = ZERO,
                     bonus: Any = ZERO,
                     other_deductions: Any = ZERO,
                     notes: Optional[str] = None) -> PayrollEntity:
        """Creates a draft payroll entry with pay calculated from the employee's compensation."""
        pay_period_start = to_date(pay_period_start)
        pay_period_end = to_date(pay_period_end)
        self._check_period(pay_period_start, pay_period_end)

        employee = self.employee_manager.get_employee(employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {employee_id} not found.")
        if not employee.is_active:
            raise ValueError(f"Employee '{employee.name}' is inactive.")

        pay = calculate_pay(employee, hours_worked, overtime_hours, bonus, other_deductions)
        entry = PayrollEntity(
            employee_id=employee.id,
            pay_period_start=pay_period_start,
            pay_period_end=pay_period_end,
            notes=notes,
        )
        self._apply_pay(entry, pay)

        try:
            created = self.payrolls_repository.add(entry)
            logger.info(f"Payroll entry ID {created.id} drafted for employee ID {employee.id} for "
                        f"{pay_period_start} to {pay_period_end}. Net pay: {created.net_pay}")
            return created
        except Exception as e:
            logger.error(f"Error creating payroll entry for employee ID {employee_id}: {e}", exc_info=True)
            raise

    def bulk_create(self,
                    pay_period_start: Union[date, str],
                    pay_period_end: Union[date, str],
                    hours_by_employee: Optional[Dict[int, Dict[str, Any]]] = None) -> List[PayrollEntity]:
        """
        Drafts an entry for every active employee for one pay period.
        hours_by_employee maps employee ID to keyword values for create_entry
        (hours_worked, overtime_hours, bonus, other_deductions).
        Employees that already have an entry for the period are skipped, and so
        are hourly employees with no hours given.
        """
        hours_by_employee = hours_by_employee or {}
        start = to_date(pay_period_start)
        end = to_date(pay_period_end)
        self._check_period(start, end)
        existing = {e.employee_id for e in self.payrolls_repository.get_by_pay_period(start, end)}

        created: List[PayrollEntity] = []
        try:
            for employee in self.employee_manager.get_active_employees():
                if employee.id in existing:
                    logger.info(f"Employee ID {employee.id} already has payroll for {start} to {end}; skipped.")
                    continue
                if employee.pay_type == PayType.HOURLY and employee.id not in hours_by_employee:
                    logger.info(f"No hours given for hourly employee ID {employee.id} for {start} to {end}; skipped.")
                    continue
                created.append(self.create_entry(employee.id, start, end, **hours_by_employee.get(employee.id, {})))
        except Exception:
            logger.error(f"Bulk payroll for {start} to {end} failed. Rolling back {len(created)} drafts.", exc_info=True)
            for entry in created:
                self.payrolls_repository.delete(entry.id)
            raise
        logger.info(f"Bulk payroll created {len(created)} draft entries for {start} to {end}.")
        return created

    def get_entry(self, entry_id: int) -> Optional[PayrollEntity]:
        if not isinstance(entry_id, int) or entry_id <= 0:
            logger.error(f"Invalid payroll entry id: {entry_id}")
            return None
        return self.payrolls_repository.get_by_id(entry_id)

    def _get_existing(self, entry_id: int) -> PayrollEntity:
        entry = self.get_entry(entry_id)
        if not entry:
            raise ValueError(f"Payroll entry with ID {entry_id} not found.")
        return entry

    def update_entry(self,
                     entry_id: int,
                     hours_worked: Any = _UNCHANGED,
                     overtime_hours: Any = _UNCHANGED,
                     bonus: Any = _UNCHANGED,
                     other_deductions: Any = _UNCHANGED,
                     notes: Any = _UNCHANGED) -> PayrollEntity:
        entry = self._get_existing(entry_id)
        if entry.status != PayrollStatus.DRAFT:
            raise ValueError(f"Payroll entry {entry_id} is {entry.status.value} and can no longer be edited.")
        employee = self.employee_manager.get_employee(entry.employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {entry.employee_id} not found.")

        pay = calculate_pay(
            employee,
            entry.hours_worked if hours_worked is _UNCHANGED else hours_worked,
            entry.overtime_hours if overtime_hours is _UNCHANGED else overtime_hours,
            entry.bonus if bonus is _UNCHANGED else bonus,
            entry.other_deductions if other_deductions is _UNCHANGED else other_deductions,
        )
        self._apply_pay(entry, pay)
        if notes is not _UNCHANGED:
            entry.notes = notes
        self.payrolls_repository.update(entry)
        logger.info(f"Payroll entry ID {entry_id} recalculated. Net pay: {entry.net_pay}")
        return entry

    def _advance(self, entry: PayrollEntity, target: PayrollStatus) -> None:
        if PAYROLL_TRANSITIONS.get(entry.status) != target:
            raise ValueError(f"Payroll entry {entry.id} cannot move from '{entry.status.value}' to '{target.value}'.")
        entry.status = target

    def process_entry(self, entry_id: int) -> PayrollEntity:
        entry = self._get_existing(entry_id)
        self._advance(entry, PayrollStatus.PROCESSED)
        self.payrolls_repository.update(entry)
        logger.info(f"Payroll entry ID {entry_id} processed.")
        return entry

    def pay_entry(self, entry_id: int, pay_date: Union[date, str, None] = None) -> PayrollEntity:
        """Marks a processed entry paid and posts Dr salary expense / Cr cash for the gross pay."""
        entry = self._get_existing(entry_id)
        self._advance(entry, PayrollStatus.PAID)
        entry.pay_date = to_date(pay_date) or date.today()

        journal_entry = self.journal_manager.record_transfer(
            entry_date=entry.pay_date,
            description=f"Payroll for employee ID {entry.employee_id}, "
                        f"{entry.pay_period_start} to {entry.pay_period_end}",
            debit_account_code=self.accounts_config["salary_expense_account"],
            credit_account_code=self.accounts_config["payroll_cash_account"],
            amount=entry.gross_pay,
            reference=f"PAYROLL-{entry.id}",
        )
        entry.journal_entry_id = journal_entry.id
        try:
            self.payrolls_repository.update(entry)
        except Exception:
            logger.error(f"Failed to mark payroll entry {entry_id} paid. Voiding journal entry.", exc_info=True)
            self.journal_manager.void_entry(journal_entry.id)
            raise
        logger.info(f"Payroll entry ID {entry_id} paid on {entry.pay_date} ({journal_entry.entry_number}).")
        return entry

    def delete_entry(self, entry_id: int) -> bool:
        entry = self._get_existing(entry_id)
        if entry.status != PayrollStatus.DRAFT:
            raise ValueError(f"Only draft payroll entries can be deleted; entry {entry_id} is {entry.status.value}.")
        deleted = self.payrolls_repository.delete(entry_id)
        logger.info(f"Payroll entry ID {entry_id} deleted.")
        return deleted

    def get_summary(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {}
        for status in PayrollStatus:
            entries = self.payrolls_repository.get_by_status(status)
            summary[status.value] = {
                "count": len(entries),
                "gross_pay": sum((e.gross_pay for e in entries), ZERO),
                "total_deductions": sum((e.total_deductions for e in entries), ZERO),
                "net_pay": sum((e.net_pay for e in entries), ZERO),
            }
        summary["total_count"] = sum(v["count"] for v in summary.values())
        return summary

    def get_payroll_runs(self) -> List[Dict[str, Any]]:
        """Paid entries grouped by pay period, most recent run first."""
        runs: Dict[str, Dict[str, Any]] = {}
        for entry in self.payrolls_repository.get_by_status(PayrollStatus.PAID):
            run = runs.setdefault(entry.pay_period_key, {
                "run_date": entry.pay_date,
                "pay_period_start": entry.pay_period_start,
                "pay_period_end": entry.pay_period_end,
                "employee_count": 0,
                "total_gross_pay": ZERO,
                "total_deductions": ZERO,
                "total_net_pay": ZERO,
                "status": "completed",
                "entries": [],
            })
            if entry.pay_date and (run["run_date"] is None or entry.pay_date > run["run_date"]):
                run["run_date"] = entry.pay_date
            run["employee_count"] += 1
            run["total_gross_pay"] += entry.gross_pay
            run["total_deductions"] += entry.total_deductions
            run["total_net_pay"] += entry.net_pay
            run["entries"].append(entry)

        return sorted(runs.values(),
                      key=lambda r: (r["run_date"] or r["pay_period_end"], r["pay_period_end"]),
                      reverse=True)

    def export_payroll_history_csv(self,
                                   runs: Optional[List[Dict[str, Any]]] = None,
                                   file_path: Optional[str] = None) -> str:
        """
        Payroll run history as CSV text. Writes it to file_path as well when given.
        """
        runs = self.get_payroll_runs() if runs is None else runs
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(PAYROLL_HISTORY_CSV_HEADER)
        for run in runs:
            writer.writerow([
                to_display_str(run["run_date"]),
                f"{to_display_str(run['pay_period_start'])} - {to_display_str(run['pay_period_end'])}",
                run["employee_count"],
                f"{run['total_gross_pay']:.2f}",
                f"{run['total_deductions']:.2f}",
                f"{run['total_net_pay']:.2f}",
                run["status"],
            ])
        content = buffer.getvalue()
        if file_path:
            with open(file_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            logger.info(f"Payroll history ({len(runs)} runs) exported to {file_path}.")
        return content
