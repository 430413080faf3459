"""
Fixtures for warehouse ledger tests
===================================

Every test gets a fresh SQLite file under tmp_path with the default
chart of accounts seeded, and the managers wired the same way the
application wires them.
"""

import pytest
from datetime import date
from decimal import Decimal

from warehouse_ledger.main_app import build_managers
from warehouse_ledger.constants import PayType

AS_OF = date(2024, 6, 15)


@pytest.fixture
def managers(tmp_path):
    return build_managers(str(tmp_path / "ledger.db"))


@pytest.fixture
def journal(managers):
    return managers.journal_manager


@pytest.fixture
def accounts(managers):
    return managers.account_manager


@pytest.fixture
def payables(managers):
    return managers.payables_manager


@pytest.fixture
def receivables(managers):
    return managers.receivables_manager


@pytest.fixture
def employees(managers):
    return managers.employee_manager


@pytest.fixture
def payroll(managers):
    return managers.payroll_manager


@pytest.fixture
def batches(managers):
    return managers.batch_manager


@pytest.fixture
def expenses(managers):
    return managers.expense_manager


@pytest.fixture
def shipments(managers):
    return managers.shipment_manager


@pytest.fixture
def reports(managers):
    return managers.reports_manager


@pytest.fixture
def hourly_employee(employees):
    """$20/h, 10% federal, 5% state, 6.2% SS, 1.45% medicare, $50 health."""
    return employees.add_employee(
        name="Dana Reyes",
        email="dana@example.com",
        position="Picker",
        pay_type=PayType.HOURLY,
        hourly_rate=Decimal("20.00"),
        federal_withholding=Decimal("10"),
        state_withholding=Decimal("5"),
        social_security_rate=Decimal("6.2"),
        medicare_rate=Decimal("1.45"),
        health_insurance_amount=Decimal("50.00"),
    )


@pytest.fixture
def salaried_employee(employees):
    return employees.add_employee(
        name="Sam Ortiz",
        email="sam@example.com",
        position="Warehouse Manager",
        pay_type=PayType.SALARY,
        annual_salary=Decimal("60000.00"),
        federal_withholding=Decimal("12"),
    )


def balance_of(accounts, code, as_of=None):
    account = accounts.get_account_by_code(code)
    return accounts.get_account_balance(account.id, as_of)
