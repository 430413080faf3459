# warehouse_ledger/business_logic/aging.py
"""
Aging of open balances (bills and invoices) by days past their due date.
"""

from typing import Iterable, Tuple, Dict, Any
from datetime import date
from decimal import Decimal

from warehouse_ledger.constants import AgingBucket
from warehouse_ledger.utils.money import ZERO, to_money

DUE_WITHIN_WINDOWS = (7, 14, 30)


def days_past_due(due_date: date, as_of: date) -> int:
    """Whole days since the due date; 0 when not yet due."""
    return max((as_of - due_date).days, 0)


def classify_aging(due_date: date, as_of: date) -> AgingBucket:
    days = days_past_due(due_date, as_of)
    if days == 0:
        return AgingBucket.CURRENT
    if days <= 30:
        return AgingBucket.DAYS_1_30
    if days <= 60:
        return AgingBucket.DAYS_31_60
    if days <= 90:
        return AgingBucket.DAYS_61_90
    return AgingBucket.DAYS_90_PLUS


def build_aging_summary(items: Iterable[Tuple[date, Decimal]], as_of: date) -> Dict[str, Any]:
    """
    Totals outstanding amounts per aging bucket.

    :param items: (due_date, outstanding_amount) pairs. Items with nothing
                  outstanding are ignored.
    :param as_of: the date the aging is computed for.
    :return: dict with 'buckets' and 'counts' keyed by bucket value,
             'total_outstanding', 'current', 'past_due' and 'due_within'
             (amount due in the next 7, 14 and 30 days, keyed by day count).
    """
    buckets = {bucket.value: ZERO for bucket in AgingBucket}
    counts = {bucket.value: 0 for bucket in AgingBucket}
    due_within = {window: ZERO for window in DUE_WITHIN_WINDOWS}
    total = ZERO

    for due_date, outstanding in items:
        outstanding = to_money(outstanding)
        if outstanding <= ZERO:
            continue
        bucket = classify_aging(due_date, as_of)
        buckets[bucket.value] += outstanding
        counts[bucket.value] += 1
        total += outstanding

        days_until_due = (due_date - as_of).days
        for window in DUE_WITHIN_WINDOWS:
            if 0 <= days_until_due <= window:
                due_within[window] += outstanding

    current = buckets[AgingBucket.CURRENT.value]
    return {
        "buckets": buckets,
        "counts": counts,
        "total_outstanding": total,
        "current": current,
        "past_due": total - current,
        "due_within": due_within,
    }
