"""
Accounts payable tests: bill posting, payments, derived status and aging.
"""

import pytest
from datetime import date
from decimal import Decimal

from warehouse_ledger.constants import BillStatus, PaymentMethod, AgingBucket
from warehouse_ledger.business_logic.payables_manager import bill_status

from .conftest import AS_OF, balance_of


@pytest.fixture
def bill(payables):
    return payables.create_bill("B-1001", "Acme Pallets", "1500.00",
                                issue_date=date(2024, 5, 1), due_date=date(2024, 5, 31))


class TestCreateBill:

    def test_bill_posts_expense_and_payable(self, payables, accounts, bill):
        assert bill.id is not None
        assert balance_of(accounts, "2000") == Decimal("1500.00")
        assert balance_of(accounts, "6000") == Decimal("1500.00")

    def test_custom_expense_account(self, payables, accounts):
        cogs = accounts.get_account_by_code("5000")
        payables.create_bill("B-2", "Freight Co", "80", date(2024, 6, 1), date(2024, 6, 30),
                             expense_account_id=cogs.id)
        assert balance_of(accounts, "5000") == Decimal("80.00")

    def test_duplicate_bill_number_rejected(self, payables, bill):
        with pytest.raises(ValueError, match="already exists"):
            payables.create_bill("B-1001", "Someone Else", "10", date(2024, 6, 1), date(2024, 6, 30))

    def test_due_before_issue_rejected(self, payables):
        with pytest.raises(ValueError):
            payables.create_bill("B-3", "Acme", "10", date(2024, 6, 10), date(2024, 6, 1))

    def test_non_positive_amount_rejected(self, payables):
        with pytest.raises(ValueError):
            payables.create_bill("B-4", "Acme", "0", date(2024, 6, 1), date(2024, 6, 30))


class TestBillPayments:

    def test_fully_paid_past_due_bill_is_paid(self, payables, accounts, bill):
        payables.record_payment(bill.id, "1500", payment_date=date(2024, 6, 10),
                                payment_method=PaymentMethod.CHECK, reference_number="CHK-77")

        stored = payables.get_bill(bill.id)
        assert stored.outstanding_amount == Decimal("0.00")
        assert bill_status(stored, AS_OF) == BillStatus.PAID
        assert balance_of(accounts, "2000") == Decimal("0.00")
        assert balance_of(accounts, "1000") == Decimal("-1500.00")

        with pytest.raises(ValueError, match="exceeds"):
            payables.record_payment(bill.id, "0.01", payment_date=date(2024, 6, 11))

    def test_overpayment_rejected_and_nothing_recorded(self, payables, journal, bill):
        with pytest.raises(ValueError, match="exceeds"):
            payables.record_payment(bill.id, "1500.01", payment_date=date(2024, 6, 10))
        assert payables.get_payments(bill.id) == []
        assert payables.get_bill(bill.id).paid_amount == Decimal("0.00")
        assert len(journal.get_all_entries()) == 1

    def test_non_positive_payment_rejected(self, payables, bill):
        with pytest.raises(ValueError):
            payables.record_payment(bill.id, "0")

    def test_partial_payments_accumulate(self, payables, bill):
        payables.record_payment(bill.id, "500", payment_date=date(2024, 5, 10))
        payables.record_payment(bill.id, "250.25", payment_date=date(2024, 5, 20))

        stored = payables.get_bill(bill.id)
        assert stored.paid_amount == Decimal("750.25")
        assert stored.outstanding_amount == Decimal("749.75")
        assert len(payables.get_payments(bill.id)) == 2
        assert bill_status(stored, date(2024, 5, 25)) == BillStatus.PARTIALLY_PAID
        assert bill_status(stored, AS_OF) == BillStatus.OVERDUE


class TestListingAndSummary:

    @pytest.fixture
    def bills(self, payables):
        overdue = payables.create_bill("B-1", "Acme Pallets", "300", date(2024, 4, 1), date(2024, 5, 1))
        unpaid = payables.create_bill("B-2", "Fuel Depot", "200", date(2024, 6, 1), date(2024, 6, 20))
        paid = payables.create_bill("B-3", "Acme Tape", "100", date(2024, 5, 1), date(2024, 5, 10))
        payables.record_payment(paid.id, "100", payment_date=date(2024, 5, 9))
        return overdue, unpaid, paid

    def test_statuses(self, payables, bills):
        rows = {row["bill"].bill_number: row for row in payables.list_bills(as_of=AS_OF)}
        assert rows["B-1"]["status"] == BillStatus.OVERDUE
        assert rows["B-1"]["days_past_due"] == 45
        assert rows["B-1"]["aging_bucket"] == AgingBucket.DAYS_31_60
        assert rows["B-2"]["status"] == BillStatus.UNPAID
        assert rows["B-3"]["status"] == BillStatus.PAID
        assert rows["B-3"]["aging_bucket"] is None

    def test_filters(self, payables, bills):
        overdue = payables.list_bills(status=BillStatus.OVERDUE, as_of=AS_OF)
        assert [row["bill"].bill_number for row in overdue] == ["B-1"]
        acme = payables.list_bills(search="acme", as_of=AS_OF)
        assert {row["bill"].bill_number for row in acme} == {"B-1", "B-3"}

    def test_summary(self, payables, bills):
        summary = payables.get_summary(as_of=AS_OF)
        assert summary["bill_count"] == 3
        assert summary["open_count"] == 2
        assert summary["overdue_count"] == 1
        assert summary["paid_count"] == 1
        assert summary["total_paid"] == Decimal("100.00")
        assert summary["total_outstanding"] == Decimal("500.00")
        assert summary["current"] == Decimal("200.00")
        assert summary["due_within"][7] == Decimal("200.00")


class TestVendorLedger:

    def test_running_balance_and_totals(self, payables):
        first = payables.create_bill("B-10", "Acme Pallets", "1000", date(2024, 5, 1), date(2024, 5, 31))
        payables.create_bill("B-11", "Acme Pallets", "400", date(2024, 6, 1), date(2024, 7, 1),
                             description="Pallet repairs")
        payables.create_bill("B-12", "Fuel Depot", "75", date(2024, 6, 1), date(2024, 6, 30))
        payables.record_payment(first.id, "600", payment_date=date(2024, 6, 1),
                                payment_method=PaymentMethod.CHECK, reference_number="CHK-1")

        ledger = payables.get_vendor_ledger("Acme Pallets")
        assert [(line["reference"], line["amount"], line["balance"]) for line in ledger["lines"]] == [
            ("B-10", Decimal("1000.00"), Decimal("1000.00")),
            ("B-11", Decimal("400.00"), Decimal("1400.00")),
            ("CHK-1", Decimal("-600.00"), Decimal("800.00")),
        ]
        assert ledger["lines"][1]["description"] == "Pallet repairs"
        assert ledger["lines"][2]["description"] == "Payment - check"
        assert ledger["total_billed"] == Decimal("1400.00")
        assert ledger["total_paid"] == Decimal("600.00")
        assert ledger["current_balance"] == Decimal("800.00")
        assert ledger["last_payment_date"] == date(2024, 6, 1)
        assert ledger["next_due_date"] == date(2024, 5, 31)

    def test_paid_bills_have_no_next_due_date(self, payables, bill):
        payables.record_payment(bill.id, "1500", payment_date=date(2024, 5, 20))
        ledger = payables.get_vendor_ledger("Acme Pallets")
        assert ledger["current_balance"] == Decimal("0.00")
        assert ledger["next_due_date"] is None
        assert ledger["lines"][-1]["reference"] == "B-1001"

    def test_unknown_vendor_is_empty(self, payables, bill):
        ledger = payables.get_vendor_ledger("Nobody")
        assert ledger["lines"] == []
        assert ledger["current_balance"] == Decimal("0.00")
        with pytest.raises(ValueError):
            payables.get_vendor_ledger("  ")
