"""
Report tests: trial balance, balance sheet, profit and loss, aging exports and PDF.
"""

import pytest
from datetime import date
from decimal import Decimal

from warehouse_ledger.constants import AgingBucket, AccountCategory
from warehouse_ledger.business_logic.reports_manager import AGING_CSV_HEADER

from .conftest import AS_OF


@pytest.fixture
def activity(payables, receivables):
    payables.create_bill("B-1", "Acme Pallets", "1500", date(2024, 4, 1), date(2024, 5, 1))
    payables.create_bill("B-2", "Fuel Depot", "250", date(2024, 6, 1), date(2024, 6, 30))
    receivables.create_invoice("INV-1", "Northwind", "2000", date(2024, 6, 1), date(2024, 7, 1))


class TestLedgerReports:

    def test_trial_balance_balanced(self, reports, activity):
        tb = reports.get_trial_balance()
        assert tb["balanced"]
        assert tb["total_debits"] == Decimal("3750.00")

    def test_profit_and_loss(self, reports, activity):
        pnl = reports.get_profit_and_loss()
        assert pnl["total_revenue"] == Decimal("2000.00")
        assert pnl["total_expenses"] == Decimal("1750.00")
        assert pnl["net_income"] == Decimal("250.00")


class TestBalanceSheet:

    def test_balanced_with_current_earnings(self, reports, payables, activity):
        bill = payables.list_bills(search="B-1")[0]["bill"]
        payables.record_payment(bill.id, "500", payment_date=date(2024, 6, 10))

        sheet = reports.get_balance_sheet()
        assert sheet["total_assets"] == Decimal("1500.00")
        assert sheet["total_liabilities"] == Decimal("1250.00")
        assert sheet["current_earnings"] == Decimal("250.00")
        assert sheet["total_liabilities_and_equity"] == Decimal("1500.00")
        assert sheet["balanced"]
        assert ("1000", "Cash", Decimal("-500.00")) in sheet["assets"]

    def test_unmatched_opening_balance_is_not_balanced(self, reports, accounts, activity):
        accounts.add_account("1300", "Prepaid Rent", AccountCategory.ASSET, opening_balance="100")

        sheet = reports.get_balance_sheet()
        assert not sheet["balanced"]
        assert sheet["difference"] == Decimal("100.00")

    def test_empty_ledger_is_balanced(self, reports):
        sheet = reports.get_balance_sheet()
        assert sheet["total_assets"] == Decimal("0.00")
        assert sheet["balanced"]


class TestAgingReports:

    def test_ap_aging_rows(self, reports, activity):
        report = reports.get_ap_aging_report(as_of=AS_OF)
        assert [row["number"] for row in report["rows"]] == ["B-1", "B-2"]
        assert report["rows"][0]["aging_bucket"] == AgingBucket.DAYS_31_60
        assert report["summary"]["total_outstanding"] == Decimal("1750.00")

    def test_ar_aging_rows(self, reports, activity):
        report = reports.get_ar_aging_report(as_of=AS_OF)
        assert [row["party"] for row in report["rows"]] == ["Northwind"]
        assert report["summary"]["current"] == Decimal("2000.00")

    def test_aging_csv(self, reports, activity, tmp_path):
        report = reports.get_ap_aging_report(as_of=AS_OF)
        path = tmp_path / "ap_aging.csv"
        lines = reports.export_aging_csv(report, file_path=str(path)).splitlines()

        assert lines[0] == ",".join(AGING_CSV_HEADER)
        assert lines[1] == "B-1,Acme Pallets,05/01/2024,45,31-60,1500.00"
        assert path.exists()

    def test_aging_html(self, reports, activity):
        html = reports.render_aging_report_html(reports.get_ap_aging_report(as_of=AS_OF))
        assert "Accounts Payable Aging" in html
        assert "Acme Pallets" in html
        assert "$1,750.00" in html

    def test_empty_aging_html(self, reports):
        html = reports.render_aging_report_html(reports.get_ar_aging_report(as_of=AS_OF))
        assert "Nothing outstanding." in html

    def test_aging_pdf(self, reports, activity, tmp_path):
        pytest.importorskip("weasyprint")
        path = tmp_path / "ap_aging.pdf"
        reports.export_aging_report_pdf(reports.get_ap_aging_report(as_of=AS_OF), str(path))
        assert path.read_bytes().startswith(b"%PDF")


class TestPayrollExport:

    def test_empty_history_has_header_only(self, reports):
        assert reports.export_payroll_history_csv().splitlines() == [
            "Run Date,Pay Period,Employee Count,Gross Pay,Deductions,Net Pay,Status"
        ]
