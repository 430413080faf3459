# warehouse_ledger/business_logic/party_ledger.py

from typing import Iterable, List, Dict, Any, Optional, Tuple
from datetime import date
from decimal import Decimal

from warehouse_ledger.utils.money import ZERO

# (date, reference, description, amount, due date, open amount)
DocumentRow = Tuple[date, str, Optional[str], Decimal, date, Decimal]
# (date, reference, description, amount)
PaymentRow = Tuple[date, str, Optional[str], Decimal]


def build_party_ledger(party: str,
                       document_type: str,
                       documents: Iterable[DocumentRow],
                       payments: Iterable[PaymentRow]) -> Dict[str, Any]:
    """
    Merges one vendor's bills (or one client's invoices) with the payments
    made against them into a dated ledger.

    Documents raise the balance and payments lower it. Lines run oldest
    first, a document before a payment on the same day, and each carries
    the balance after it.
    """
    lines: List[Dict[str, Any]] = []
    total_billed = ZERO
    total_paid = ZERO
    next_due_date = None
    last_payment_date = None

    for index, (entry_date, reference, description, amount, due_date, open_amount) in enumerate(documents):
        lines.append({"date": entry_date, "type": document_type, "reference": reference,
                      "description": description, "amount": amount, "_order": (entry_date, 0, index)})
        total_billed += amount
        if open_amount > ZERO and (next_due_date is None or due_date < next_due_date):
            next_due_date = due_date

    for index, (entry_date, reference, description, amount) in enumerate(payments):
        lines.append({"date": entry_date, "type": "payment", "reference": reference,
                      "description": description, "amount": -amount, "_order": (entry_date, 1, index)})
        total_paid += amount
        if last_payment_date is None or entry_date > last_payment_date:
            last_payment_date = entry_date

    lines.sort(key=lambda line: line["_order"])
    balance = ZERO
    for line in lines:
        del line["_order"]
        balance += line["amount"]
        line["balance"] = balance

    return {
        "party": party,
        "lines": lines,
        "total_billed": total_billed,
        "total_paid": total_paid,
        "current_balance": total_billed - total_paid,
        "last_payment_date": last_payment_date,
        "next_due_date": next_due_date,
    }
