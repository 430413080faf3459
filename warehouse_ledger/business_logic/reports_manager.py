# warehouse_ledger/business_logic/reports_manager.py

import csv
import io
import html
import logging
from typing import List, Dict, Any, Optional, TYPE_CHECKING
from datetime import date
from decimal import Decimal

from warehouse_ledger.business_logic.aging import build_aging_summary, days_past_due, classify_aging
from warehouse_ledger.config import COMPANY_NAME, DEFAULT_CURRENCY
from warehouse_ledger.constants import AccountCategory, AgingBucket
from warehouse_ledger.utils.date_converter import to_display_str
from warehouse_ledger.utils.money import ZERO, format_currency

if TYPE_CHECKING:
    from .account_manager import AccountManager
    from .journal_manager import JournalManager
    from .payables_manager import PayablesManager
    from .receivables_manager import ReceivablesManager
    from .payroll_manager import PayrollManager

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")
AGING_CSV_HEADER = ["Number", "Party", "Due Date", "Days Past Due", "Aging Bucket", "Outstanding"]

AGING_REPORT_CSS = """
    body { font-family: Helvetica, Arial, sans-serif; font-size: 11px; }
    h2 { margin-bottom: 2px; }
    .subtitle { color: #555; margin-bottom: 12px; }
    table { width: 100%; border-collapse: collapse; margin-top: 10px; }
    th, td { border: 1px solid #ddd; padding: 6px; }
    th { background-color: #f2f2f2; font-weight: bold; text-align: left; }
    .amount { text-align: right; }
    .total td { font-weight: bold; }
"""


class ReportsManager:
    """
    Builds accounting reports (trial balance, balance sheet, aging, profit and loss) and
    their CSV, HTML and PDF exports.
    """

    def __init__(self,
                 account_manager: 'AccountManager',
                 journal_manager: 'JournalManager',
                 payables_manager: 'PayablesManager',
                 receivables_manager: 'ReceivablesManager',
                 payroll_manager: 'PayrollManager'):
        self.account_manager = account_manager
        self.journal_manager = journal_manager
        self.payables_manager = payables_manager
        self.receivables_manager = receivables_manager
        self.payroll_manager = payroll_manager

    def get_trial_balance(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        logger.info(f"Generating trial balance up to {as_of or 'today'}...")
        return self.journal_manager.get_trial_balance(as_of)

    def get_profit_and_loss(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        """Revenue and expense account balances and the resulting net income."""
        accounts = self.account_manager.get_account_balances(as_of=as_of)
        revenue = [a for a in accounts if a.category == AccountCategory.REVENUE]
        expenses = [a for a in accounts if a.category == AccountCategory.EXPENSE]
        total_revenue = sum((a.current_balance for a in revenue), ZERO)
        total_expenses = sum((a.current_balance for a in expenses), ZERO)
        return {
            "revenue": [(a.code, a.name, a.current_balance) for a in revenue],
            "expenses": [(a.code, a.name, a.current_balance) for a in expenses],
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "net_income": total_revenue - total_expenses,
        }

    def get_balance_sheet(self, as_of: Optional[date] = None, warehouse_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Asset, liability and equity balances. Revenue less expenses is carried
        into equity as current earnings, and the sheet is balanced when assets
        match liabilities plus equity to within a cent.
        """
        accounts = self.account_manager.get_account_balances(warehouse_id=warehouse_id, as_of=as_of)

        def section(category):
            rows = [(a.code, a.name, a.current_balance) for a in accounts if a.category == category]
            return rows, sum((balance for _, _, balance in rows), ZERO)

        assets, total_assets = section(AccountCategory.ASSET)
        liabilities, total_liabilities = section(AccountCategory.LIABILITY)
        equity, equity_accounts_total = section(AccountCategory.EQUITY)
        _, total_revenue = section(AccountCategory.REVENUE)
        _, total_expenses = section(AccountCategory.EXPENSE)
        current_earnings = total_revenue - total_expenses
        total_equity = equity_accounts_total + current_earnings
        total_liabilities_and_equity = total_liabilities + total_equity
        difference = abs(total_assets - total_liabilities_and_equity)

        return {
            "as_of": as_of,
            "assets": assets,
            "liabilities": liabilities,
            "equity": equity,
            "current_earnings": current_earnings,
            "total_assets": total_assets,
            "total_liabilities": total_liabilities,
            "total_equity": total_equity,
            "total_liabilities_and_equity": total_liabilities_and_equity,
            "difference": difference,
            "balanced": difference < BALANCE_TOLERANCE,
        }

    def _aging_report(self, title: str, party_label: str, items: List[Dict[str, Any]], as_of: date) -> Dict[str, Any]:
        rows = []
        for item in items:
            rows.append({
                "number": item["number"],
                "party": item["party"],
                "due_date": item["due_date"],
                "days_past_due": days_past_due(item["due_date"], as_of),
                "aging_bucket": classify_aging(item["due_date"], as_of),
                "outstanding": item["outstanding"],
            })
        rows.sort(key=lambda r: (-r["days_past_due"], r["number"]))
        return {
            "title": title,
            "party_label": party_label,
            "as_of": as_of,
            "rows": rows,
            "summary": build_aging_summary(((r["due_date"], r["outstanding"]) for r in rows), as_of),
        }

    def get_ap_aging_report(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        items = [
            {"number": b.bill_number, "party": b.vendor_name, "due_date": b.due_date, "outstanding": b.outstanding_amount}
            for b in self.payables_manager.vendor_bills_repository.get_open_bills()
        ]
        return self._aging_report("Accounts Payable Aging", "Vendor", items, as_of)

    def get_ar_aging_report(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        items = [
            {"number": row["invoice"].invoice_number, "party": row["invoice"].client_name,
             "due_date": row["invoice"].due_date, "outstanding": row["remaining"]}
            for row in self.receivables_manager.list_open_invoices(as_of)
        ]
        return self._aging_report("Accounts Receivable Aging", "Client", items, as_of)

    def export_payroll_history_csv(self, file_path: Optional[str] = None) -> str:
        return self.payroll_manager.export_payroll_history_csv(file_path=file_path)

    def export_aging_csv(self, report: Dict[str, Any], file_path: Optional[str] = None) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(AGING_CSV_HEADER)
        for row in report["rows"]:
            writer.writerow([
                row["number"],
                row["party"],
                to_display_str(row["due_date"]),
                row["days_past_due"],
                row["aging_bucket"].value,
                f"{row['outstanding']:.2f}",
            ])
        content = buffer.getvalue()
        if file_path:
            with open(file_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            logger.info(f"{report['title']} ({len(report['rows'])} rows) exported to {file_path}.")
        return content

    def render_aging_report_html(self, report: Dict[str, Any]) -> str:
        summary = report["summary"]
        money = lambda value: format_currency(value, DEFAULT_CURRENCY)

        parts = [f"<html><head><meta charset='UTF-8'><style>{AGING_REPORT_CSS}</style></head><body>"]
        parts.append(f"<h2>{html.escape(COMPANY_NAME)}: {html.escape(report['title'])}</h2>")
        parts.append(f"<div class='subtitle'>As of {to_display_str(report['as_of'])}</div>")

        parts.append("<table><thead><tr><th>Bucket</th><th>Count</th><th class='amount'>Outstanding</th></tr></thead><tbody>")
        for bucket in AgingBucket:
            parts.append(f"<tr><td>{bucket.value}</td><td>{summary['counts'][bucket.value]}</td>"
                         f"<td class='amount'>{money(summary['buckets'][bucket.value])}</td></tr>")
        parts.append(f"<tr class='total'><td>Total</td><td>{sum(summary['counts'].values())}</td>"
                     f"<td class='amount'>{money(summary['total_outstanding'])}</td></tr>")
        parts.append("</tbody></table>")

        parts.append(f"<table><thead><tr><th>Number</th><th>{html.escape(report['party_label'])}</th><th>Due Date</th>"
                     f"<th>Days Past Due</th><th>Bucket</th><th class='amount'>Outstanding</th></tr></thead><tbody>")
        if report["rows"]:
            for row in report["rows"]:
                parts.append(
                    f"<tr><td>{html.escape(row['number'])}</td><td>{html.escape(row['party'])}</td>"
                    f"<td>{to_display_str(row['due_date'])}</td><td>{row['days_past_due']}</td>"
                    f"<td>{row['aging_bucket'].value}</td><td class='amount'>{money(row['outstanding'])}</td></tr>")
        else:
            parts.append("<tr><td colspan='6'>Nothing outstanding.</td></tr>")
        parts.append("</tbody></table></body></html>")
        return "".join(parts)

    def export_aging_report_pdf(self, report: Dict[str, Any], file_path: str) -> str:
        from weasyprint import HTML

        try:
            HTML(string=self.render_aging_report_html(report)).write_pdf(file_path)
        except Exception as e:
            logger.error(f"Failed to export {report['title']} to PDF: {e}", exc_info=True)
            raise
        logger.info(f"{report['title']} exported to PDF at {file_path}.")
        return file_path
