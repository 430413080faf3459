"""
Journal entry tests
===================

Double-entry validation, numbering, posting lifecycle and the trial balance.
"""

import pytest
from datetime import date
from decimal import Decimal

from warehouse_ledger.constants import AccountCategory, JournalEntryStatus


class TestCreateEntry:

    def test_balanced_entry_is_posted_and_numbered(self, journal):
        first = journal.record_transfer(date(2024, 6, 1), "Cash sale", "1000", "4000", Decimal("125.50"))
        second = journal.record_transfer(date(2024, 6, 2), "Cash sale", "1000", "4000", Decimal("10"))

        assert first.entry_number == "JE-000001"
        assert second.entry_number == "JE-000002"
        assert first.status == JournalEntryStatus.POSTED
        assert first.total_amount == Decimal("125.50")

        stored = journal.get_entry(first.id)
        assert len(stored.lines) == 2
        assert stored.is_balanced
        assert stored.total_debits == stored.total_credits == Decimal("125.50")

    def test_multi_line_entry(self, journal):
        entry = journal.create_entry(date(2024, 6, 1), "Split sale", [
            {"account_code": "1000", "debit": "60"},
            {"account_code": "1100", "debit": "40"},
            {"account_code": "4000", "credit": "100"},
        ])
        assert [l.line_number for l in journal.get_entry(entry.id).lines] == [1, 2, 3]

    def test_unbalanced_entry_rejected(self, journal):
        with pytest.raises(ValueError, match="not balanced"):
            journal.create_entry(date(2024, 6, 1), "Bad", [
                {"account_code": "1000", "debit": "100"},
                {"account_code": "4000", "credit": "99.99"},
            ])
        assert journal.get_all_entries() == []

    def test_single_line_rejected(self, journal):
        with pytest.raises(ValueError):
            journal.create_entry(date(2024, 6, 1), "Bad", [{"account_code": "1000", "debit": "1"}])

    def test_line_with_both_sides_rejected(self, journal):
        with pytest.raises(ValueError):
            journal.create_entry(date(2024, 6, 1), "Bad", [
                {"account_code": "1000", "debit": "5", "credit": "5"},
                {"account_code": "4000", "credit": "0"},
            ])

    def test_negative_amount_rejected(self, journal):
        with pytest.raises(ValueError):
            journal.create_entry(date(2024, 6, 1), "Bad", [
                {"account_code": "1000", "debit": "-5"},
                {"account_code": "4000", "credit": "-5"},
            ])

    def test_unknown_account_rejected(self, journal):
        with pytest.raises(ValueError, match="not found"):
            journal.record_transfer(date(2024, 6, 1), "Bad", "9999", "4000", Decimal("1"))

    def test_inactive_account_rejected(self, journal, accounts):
        petty = accounts.add_account("1010", "Petty Cash", AccountCategory.ASSET)
        accounts.update_account(petty.id, is_active=False)
        with pytest.raises(ValueError, match="inactive"):
            journal.record_transfer(date(2024, 6, 1), "Bad", "1010", "4000", Decimal("1"))


class TestLifecycle:

    def test_post_draft(self, journal):
        draft = journal.create_entry(date(2024, 6, 1), "Draft", [
            {"account_code": "1000", "debit": "1"},
            {"account_code": "4000", "credit": "1"},
        ], post=False)
        assert draft.status == JournalEntryStatus.DRAFT
        assert journal.post_entry(draft.id).status == JournalEntryStatus.POSTED

    def test_void_only_posted(self, journal):
        entry = journal.record_transfer(date(2024, 6, 1), "Sale", "1000", "4000", Decimal("1"))
        journal.void_entry(entry.id)
        with pytest.raises(ValueError):
            journal.void_entry(entry.id)
        with pytest.raises(ValueError):
            journal.post_entry(entry.id)


class TestTrialBalance:

    def test_balanced_and_skips_idle_accounts(self, journal):
        journal.record_transfer(date(2024, 6, 1), "Sale", "1100", "4000", Decimal("500"))
        journal.record_transfer(date(2024, 6, 5), "Collection", "1000", "1100", Decimal("200"))
        journal.record_transfer(date(2024, 6, 7), "Rent", "6000", "1000", Decimal("150"))

        tb = journal.get_trial_balance()
        rows = {row["code"]: row for row in tb["rows"]}

        assert tb["balanced"]
        assert tb["total_debits"] == tb["total_credits"] == Decimal("850.00")
        assert set(rows) == {"1000", "1100", "4000", "6000"}
        assert rows["1100"]["balance"] == Decimal("300.00")
        assert rows["1000"]["balance"] == Decimal("50.00")
        assert rows["4000"]["balance"] == Decimal("500.00")

    def test_as_of_cutoff(self, journal):
        journal.record_transfer(date(2024, 6, 1), "Sale", "1000", "4000", Decimal("10"))
        journal.record_transfer(date(2024, 7, 1), "Sale", "1000", "4000", Decimal("20"))
        tb = journal.get_trial_balance(as_of=date(2024, 6, 30))
        assert tb["total_debits"] == Decimal("10.00")


class TestSummary:

    def test_summary_counts(self, journal):
        journal.record_transfer(date(2024, 5, 20), "Sale", "1000", "4000", Decimal("10"))
        journal.record_transfer(date(2024, 6, 3), "Sale", "1000", "4000", Decimal("20"))
        voided = journal.record_transfer(date(2024, 6, 4), "Sale", "1000", "4000", Decimal("30"))
        journal.void_entry(voided.id)

        summary = journal.get_summary(as_of=date(2024, 6, 15))
        assert summary["entry_count"] == 2
        assert summary["entries_this_month"] == 1
        assert summary["unbalanced_count"] == 0
        assert summary["total_debits"] == Decimal("30.00")
