"""
Employee tests: validation, page permissions and status changes.
"""

import pytest
from decimal import Decimal

from warehouse_ledger.constants import EmployeeRole, EmployeeStatus, DEFAULT_PAGE_PERMISSIONS
from warehouse_ledger.business_logic.employee_manager import EmployeeManager


class TestAddEmployee:

    def test_defaults(self, employees, hourly_employee):
        stored = employees.get_employee(hourly_employee.id)
        assert stored.status == EmployeeStatus.ACTIVE
        assert stored.role == EmployeeRole.EMPLOYEE
        assert stored.page_permissions == DEFAULT_PAGE_PERMISSIONS
        assert stored.hourly_rate == Decimal("20.00")

    def test_duplicate_email_rejected_case_insensitive(self, employees, hourly_employee):
        with pytest.raises(ValueError, match="already exists"):
            employees.add_employee("Other Dana", "DANA@example.com", "Loader")

    def test_invalid_email_rejected(self, employees):
        with pytest.raises(ValueError, match="valid email"):
            employees.add_employee("No Mail", "not-an-email", "Loader")

    def test_percentage_out_of_range_rejected(self, employees):
        with pytest.raises(ValueError):
            employees.add_employee("Tax Max", "max@example.com", "Loader", federal_withholding="101")

    def test_negative_rate_rejected(self, employees):
        with pytest.raises(ValueError):
            employees.add_employee("Neg Rate", "neg@example.com", "Loader", hourly_rate="-1")

    def test_unknown_field_rejected(self, employees):
        with pytest.raises(ValueError):
            employees.add_employee("Odd", "odd@example.com", "Loader", shoe_size=44)


class TestPagePermissions:

    def test_missing_pages_filled_with_defaults(self):
        merged = EmployeeManager.normalize_permissions({"financial": True})
        assert merged["financial"] is True
        assert merged["inventory"] is True
        assert set(merged) == set(DEFAULT_PAGE_PERMISSIONS)

    def test_unknown_page_rejected(self):
        with pytest.raises(ValueError):
            EmployeeManager.normalize_permissions({"payroll-admin": True})

    def test_access_checks(self, employees, hourly_employee):
        assert EmployeeManager.has_page_access(hourly_employee, "inventory") is True
        assert EmployeeManager.has_page_access(hourly_employee, "financial") is False
        assert EmployeeManager.has_page_access(hourly_employee, "no-such-page") is False

        admin = employees.add_employee("Ada Admin", "ada@example.com", "Director", role=EmployeeRole.ADMIN)
        assert EmployeeManager.has_page_access(admin, "financial") is True

    def test_update_permissions_persist(self, employees, hourly_employee):
        employees.update_employee(hourly_employee.id, page_permissions={"financial": True, "todos": False})
        stored = employees.get_employee(hourly_employee.id)
        assert stored.page_permissions["financial"] is True
        assert stored.page_permissions["todos"] is False
        assert stored.page_permissions["inventory"] is True


class TestEmployeeStatus:

    def test_deactivate_and_reactivate(self, employees, hourly_employee, salaried_employee):
        employees.deactivate_employee(hourly_employee.id)
        assert [e.id for e in employees.get_active_employees()] == [salaried_employee.id]
        inactive = employees.list_employees(status=EmployeeStatus.INACTIVE)
        assert [e.id for e in inactive] == [hourly_employee.id]

        employees.reactivate_employee(hourly_employee.id)
        assert len(employees.get_active_employees()) == 2

    def test_search_and_filters(self, employees, hourly_employee, salaried_employee):
        employees.update_employee(salaried_employee.id, department="Operations", assigned_warehouse_id="WH-1")
        assert [e.name for e in employees.list_employees(search="pick")] == ["Dana Reyes"]
        assert [e.name for e in employees.list_employees(department="operations")] == ["Sam Ortiz"]
        assert [e.name for e in employees.list_employees(warehouse_id="WH-1")] == ["Sam Ortiz"]

    def test_update_email_conflict(self, employees, hourly_employee, salaried_employee):
        with pytest.raises(ValueError):
            employees.update_employee(salaried_employee.id, email="dana@example.com")
