"""
Aging bucket tests: days past due, bucket boundaries and summaries.
"""

from datetime import date
from decimal import Decimal

from warehouse_ledger.business_logic.aging import days_past_due, classify_aging, build_aging_summary
from warehouse_ledger.constants import AgingBucket

from .conftest import AS_OF


class TestDaysPastDue:

    def test_not_yet_due_is_zero(self):
        assert days_past_due(date(2024, 7, 1), AS_OF) == 0

    def test_counts_whole_days(self):
        assert days_past_due(date(2024, 6, 1), AS_OF) == 14


class TestClassifyAging:

    def test_due_today_is_current(self):
        assert classify_aging(AS_OF, AS_OF) == AgingBucket.CURRENT

    def test_bucket_boundaries(self):
        assert classify_aging(date(2024, 5, 16), AS_OF) == AgingBucket.DAYS_1_30   # 30 days
        assert classify_aging(date(2024, 5, 15), AS_OF) == AgingBucket.DAYS_31_60  # 31 days
        assert classify_aging(date(2024, 4, 16), AS_OF) == AgingBucket.DAYS_31_60  # 60 days
        assert classify_aging(date(2024, 3, 17), AS_OF) == AgingBucket.DAYS_61_90  # 90 days
        assert classify_aging(date(2024, 3, 16), AS_OF) == AgingBucket.DAYS_90_PLUS


class TestAgingSummary:

    def test_totals_and_windows(self):
        summary = build_aging_summary([
            (date(2024, 6, 20), Decimal("100.00")),
            (date(2024, 5, 1), Decimal("200.00")),
            (date(2024, 6, 1), Decimal("0.00")),
        ], AS_OF)

        assert summary["total_outstanding"] == Decimal("300.00")
        assert summary["current"] == Decimal("100.00")
        assert summary["past_due"] == Decimal("200.00")
        assert summary["buckets"][AgingBucket.DAYS_31_60.value] == Decimal("200.00")
        assert summary["counts"][AgingBucket.CURRENT.value] == 1
        assert summary["counts"][AgingBucket.DAYS_1_30.value] == 0
        assert summary["due_within"] == {7: Decimal("100.00"), 14: Decimal("100.00"), 30: Decimal("100.00")}

    def test_due_within_excludes_later_dates(self):
        summary = build_aging_summary([(date(2024, 7, 5), Decimal("50.00"))], AS_OF)
        assert summary["due_within"][7] == Decimal("0.00")
        assert summary["due_within"][14] == Decimal("0.00")
        assert summary["due_within"][30] == Decimal("50.00")
