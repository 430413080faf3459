"""
Accounts receivable tests: invoice posting, customer payments and aging.
"""

import pytest
from datetime import date
from decimal import Decimal

from warehouse_ledger.constants import InvoiceStatus, AgingBucket
from warehouse_ledger.business_logic.receivables_manager import invoice_status

from .conftest import AS_OF, balance_of


@pytest.fixture
def invoice(receivables):
    return receivables.create_invoice("INV-001", "Northwind Retail", "2000",
                                      invoice_date=date(2024, 6, 1), due_date=date(2024, 7, 1),
                                      client_contact_email="ap@northwind.example")


class TestInvoices:

    def test_invoice_posts_receivable_and_revenue(self, accounts, invoice):
        assert balance_of(accounts, "1100") == Decimal("2000.00")
        assert balance_of(accounts, "4000") == Decimal("2000.00")
        assert invoice_status(invoice, AS_OF) == InvoiceStatus.SENT

    def test_duplicate_number_rejected(self, receivables, invoice):
        with pytest.raises(ValueError):
            receivables.create_invoice("INV-001", "Other", "5", date(2024, 6, 1), date(2024, 6, 30))

    def test_partial_payment(self, receivables, accounts, invoice):
        receivables.record_payment(invoice.id, "500", payment_date=date(2024, 6, 10))
        stored = receivables.get_invoice(invoice.id)

        assert stored.remaining_amount == Decimal("1500.00")
        assert invoice_status(stored, AS_OF) == InvoiceStatus.PARTIALLY_PAID
        assert balance_of(accounts, "1000") == Decimal("500.00")
        assert balance_of(accounts, "1100") == Decimal("1500.00")

    def test_full_payment_after_due_date_is_paid(self, receivables, invoice):
        receivables.record_payment(invoice.id, "2000", payment_date=date(2024, 7, 20))
        stored = receivables.get_invoice(invoice.id)
        assert invoice_status(stored, date(2024, 8, 1)) == InvoiceStatus.PAID

    def test_overpayment_rejected(self, receivables, invoice):
        with pytest.raises(ValueError, match="exceeds"):
            receivables.record_payment(invoice.id, "2000.01")
        assert receivables.get_payments(invoice.id) == []

    def test_past_due_is_overdue(self, receivables, invoice):
        assert invoice_status(invoice, date(2024, 7, 2)) == InvoiceStatus.OVERDUE


class TestReceivablesAging:

    def test_open_invoices_and_summary(self, receivables):
        receivables.create_invoice("INV-1", "A", "100", date(2024, 6, 1), date(2024, 6, 20))
        receivables.create_invoice("INV-2", "B", "200", date(2024, 5, 1), date(2024, 6, 5))
        receivables.create_invoice("INV-3", "C", "300", date(2024, 3, 1), date(2024, 4, 1))
        old = receivables.create_invoice("INV-4", "D", "400", date(2024, 1, 1), date(2024, 2, 1))
        paid = receivables.create_invoice("INV-5", "E", "50", date(2024, 6, 1), date(2024, 6, 2))
        receivables.record_payment(paid.id, "50", payment_date=date(2024, 6, 2))
        receivables.record_payment(old.id, "100", payment_date=date(2024, 3, 1))

        open_rows = {row["invoice"].invoice_number: row for row in receivables.list_open_invoices(AS_OF)}
        assert set(open_rows) == {"INV-1", "INV-2", "INV-3", "INV-4"}
        assert open_rows["INV-3"]["days_past_due"] == 75
        assert open_rows["INV-3"]["aging_bucket"] == AgingBucket.DAYS_61_90
        assert open_rows["INV-4"]["remaining"] == Decimal("300.00")

        summary = receivables.get_summary(as_of=AS_OF)
        assert summary["total_outstanding"] == Decimal("900.00")
        assert summary["current"] == Decimal("100.00")
        assert summary["days_1_30"] == Decimal("200.00")
        assert summary["days_61_90"] == Decimal("300.00")
        assert summary["days_90_plus"] == Decimal("300.00")
        assert summary["past_due"] == Decimal("800.00")

    def test_list_invoices_by_status(self, receivables, invoice):
        receivables.create_invoice("INV-OLD", "Late Co", "10", date(2024, 4, 1), date(2024, 5, 1))
        overdue = receivables.list_invoices(status=InvoiceStatus.OVERDUE, as_of=AS_OF)
        assert [row["invoice"].invoice_number for row in overdue] == ["INV-OLD"]


class TestCustomerLedger:

    def test_running_balance_and_totals(self, receivables, invoice):
        receivables.create_invoice("INV-002", "Northwind Retail", "300", date(2024, 6, 5), date(2024, 6, 20))
        receivables.create_invoice("INV-003", "Contoso", "90", date(2024, 6, 2), date(2024, 7, 2))
        receivables.record_payment(invoice.id, "2000", payment_date=date(2024, 6, 3))

        ledger = receivables.get_customer_ledger("Northwind Retail")
        assert [(line["type"], line["reference"], line["balance"]) for line in ledger["lines"]] == [
            ("invoice", "INV-001", Decimal("2000.00")),
            ("payment", "INV-001", Decimal("0.00")),
            ("invoice", "INV-002", Decimal("300.00")),
        ]
        assert ledger["total_billed"] == Decimal("2300.00")
        assert ledger["total_paid"] == Decimal("2000.00")
        assert ledger["current_balance"] == Decimal("300.00")
        assert ledger["next_due_date"] == date(2024, 6, 20)
        assert ledger["last_payment_date"] == date(2024, 6, 3)

    def test_blank_client_rejected(self, receivables):
        with pytest.raises(ValueError):
            receivables.get_customer_ledger("")
