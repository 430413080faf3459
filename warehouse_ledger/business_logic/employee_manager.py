# warehouse_ledger/business_logic/employee_manager.py

import re
import logging
from typing import Optional, List, Dict, Any, TYPE_CHECKING
from datetime import date
from decimal import Decimal
from dataclasses import fields

from warehouse_ledger.business_logic.entities.employee_entity import EmployeeEntity
from warehouse_ledger.constants import (
    EmployeeRole, EmployeeStatus, PayType, DEFAULT_PAGE_PERMISSIONS
)
from warehouse_ledger.utils.date_converter import to_date
from warehouse_ledger.utils.money import to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.employees_repository import EmployeesRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PERCENTAGE_FIELDS = (
    "federal_withholding", "state_withholding", "social_security_rate",
    "medicare_rate", "retirement_401k_rate",
)
AMOUNT_FIELDS = (
    "hourly_rate", "annual_salary", "health_insurance_amount", "dental_insurance_amount",
)


class EmployeeManager:
    def __init__(self, employees_repository: 'EmployeesRepository'):
        """
        Initializes the EmployeeManager.
        :param employees_repository: An instance of EmployeesRepository.
        """
        if employees_repository is None: raise ValueError("employees_repository cannot be None")
        self.employees_repository = employees_repository
        self._editable_fields = {f.name for f in fields(EmployeeEntity) if f.init and f.name != "id"}

    @staticmethod
    def normalize_permissions(page_permissions: Optional[Dict[str, bool]]) -> Dict[str, bool]:
        """Fills missing pages with the defaults; unknown page keys are rejected."""
        merged = dict(DEFAULT_PAGE_PERMISSIONS)
        if not page_permissions:
            return merged
        unknown = sorted(set(page_permissions) - set(DEFAULT_PAGE_PERMISSIONS))
        if unknown:
            raise ValueError(f"Unknown page permission(s): {', '.join(unknown)}.")
        merged.update({page: bool(flag) for page, flag in page_permissions.items()})
        return merged

    def _validate(self, employee: EmployeeEntity) -> None:
        if not employee.name or not employee.name.strip():
            raise ValueError("Employee name is required.")
        if not employee.email or not employee.email.strip():
            raise ValueError("Employee email is required.")
        if not EMAIL_PATTERN.match(employee.email.strip()):
            raise ValueError(f"'{employee.email}' is not a valid email address.")
        if not employee.position or not employee.position.strip():
            raise ValueError("Employee position is required.")
        if not isinstance(employee.role, EmployeeRole):
            raise ValueError(f"Invalid role: {employee.role}")
        if not isinstance(employee.status, EmployeeStatus):
            raise ValueError(f"Invalid status: {employee.status}")
        if not isinstance(employee.pay_type, PayType):
            raise ValueError(f"Invalid pay type: {employee.pay_type}")

        for name in AMOUNT_FIELDS:
            value = to_money(getattr(employee, name), name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative.")
            setattr(employee, name, value)
        for name in PERCENTAGE_FIELDS:
            value = to_money(getattr(employee, name), name)
            if value < 0 or value > Decimal("100"):
                raise ValueError(f"{name} must be between 0 and 100.")
            setattr(employee, name, value)

        employee.name = employee.name.strip()
        employee.email = employee.email.strip()
        employee.position = employee.position.strip()

    def _ensure_unique_email(self, email: str, employee_id: Optional[int] = None) -> None:
        existing = self.employees_repository.get_by_email(email)
        if existing and existing.id != employee_id:
            raise ValueError(f"An employee with email '{email}' already exists.")

    def add_employee(self,
                     name: str,
                     email: str,
                     position: str,
                     role: EmployeeRole = EmployeeRole.EMPLOYEE,
                     department: Optional[str] = None,
                     phone: Optional[str] = None,
                     hire_date: Optional[date] = None,
                     assigned_warehouse_id: Optional[str] = None,
                     pay_type: PayType = PayType.HOURLY,
                     page_permissions: Optional[Dict[str, bool]] = None,
                     **compensation: Any) -> EmployeeEntity:
        """
        Adds a new active employee.
        Compensation keywords: hourly_rate, annual_salary, the withholding
        percentages and the flat insurance amounts.
        """
        unknown = set(compensation) - set(AMOUNT_FIELDS) - set(PERCENTAGE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown employee field(s): {', '.join(sorted(unknown))}.")

        employee = EmployeeEntity(
            name=name or "",
            email=email or "",
            position=position or "",
            role=role,
            department=department,
            phone=phone,
            hire_date=to_date(hire_date),
            assigned_warehouse_id=assigned_warehouse_id,
            pay_type=pay_type,
            page_permissions=self.normalize_permissions(page_permissions),
            **{k: to_money(v, k) for k, v in compensation.items()},
        )
        self._validate(employee)
        self._ensure_unique_email(employee.email)

        try:
            created = self.employees_repository.add(employee)
            logger.info(f"Employee '{created.name}' (ID: {created.id}, role: {created.role.value}) added.")
            return created
        except Exception as e:
            logger.error(f"Error adding employee '{name}': {e}", exc_info=True)
            raise

    def update_employee(self, employee_id: int, **changes: Any) -> EmployeeEntity:
        employee = self.get_employee(employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {employee_id} not found.")

        unknown = set(changes) - self._editable_fields
        if unknown:
            raise ValueError(f"Unknown employee field(s): {', '.join(sorted(unknown))}.")

        for key, value in changes.items():
            if key == "page_permissions":
                value = self.normalize_permissions(value)
            elif key == "hire_date":
                value = to_date(value)
            setattr(employee, key, value)

        self._validate(employee)
        self._ensure_unique_email(employee.email, employee.id)

        updated = self.employees_repository.update(employee)
        logger.info(f"Employee ID {employee_id} updated: {sorted(changes)}.")
        return updated

    def _set_status(self, employee_id: int, status: EmployeeStatus) -> EmployeeEntity:
        employee = self.get_employee(employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {employee_id} not found.")
        if employee.status == status:
            logger.info(f"Employee ID {employee_id} is already {status.value}.")
            return employee
        employee.status = status
        self.employees_repository.update(employee)
        logger.info(f"Employee ID {employee_id} set to {status.value}.")
        return employee

    def deactivate_employee(self, employee_id: int) -> EmployeeEntity:
        return self._set_status(employee_id, EmployeeStatus.INACTIVE)

    def reactivate_employee(self, employee_id: int) -> EmployeeEntity:
        return self._set_status(employee_id, EmployeeStatus.ACTIVE)

    def get_employee(self, employee_id: int) -> Optional[EmployeeEntity]:
        if not isinstance(employee_id, int) or employee_id <= 0:
            logger.error(f"Invalid employee_id: {employee_id}")
            return None
        return self.employees_repository.get_by_id(employee_id)

    def get_active_employees(self) -> List[EmployeeEntity]:
        return self.employees_repository.get_active_employees()

    def list_employees(self,
                       search: Optional[str] = None,
                       warehouse_id: Optional[str] = None,
                       status: Optional[EmployeeStatus] = None,
                       department: Optional[str] = None) -> List[EmployeeEntity]:
        if search and search.strip():
            employees = self.employees_repository.search(search.strip())
        else:
            employees = self.employees_repository.get_all(order_by="name ASC")

        if warehouse_id is not None:
            employees = [e for e in employees if e.assigned_warehouse_id == warehouse_id]
        if status is not None:
            employees = [e for e in employees if e.status == status]
        if department is not None:
            employees = [e for e in employees if (e.department or "").lower() == department.lower()]
        return employees

    @staticmethod
    def has_page_access(employee: EmployeeEntity, page: str) -> bool:
        if employee.role == EmployeeRole.ADMIN:
            return True
        if page not in DEFAULT_PAGE_PERMISSIONS:
            return False
        return bool(employee.page_permissions.get(page, DEFAULT_PAGE_PERMISSIONS[page]))
