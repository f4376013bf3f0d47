"""
Financial Report Composer.

Renders the monthly financial report as a print-formatted document:
- An HTML page with print styles, one card per professional
- A plain text version for terminals and logs

Neither output is meant to be parsed back.
"""

import calendar
from html import escape
from typing import List

from ..domain.services import FinancialReport, ProfessionalRevenue


PRINT_STYLES = """
body { font-family: Arial, Helvetica, sans-serif; color: #111827; margin: 24px; }
h1 { font-size: 20px; margin: 0 0 4px 0; }
h2 { font-size: 16px; font-weight: normal; color: #4b5563; margin: 0 0 16px 0; }
.summary { margin-bottom: 16px; }
.professional { border: 1px solid #e5e7eb; border-radius: 6px; padding: 12px; margin-bottom: 8px; page-break-inside: avoid; }
.professional .name { font-weight: bold; }
.professional .specialty { color: #6b7280; font-size: 13px; }
.professional .revenue { float: right; font-size: 18px; font-weight: bold; color: #047857; }
.professional .details { font-size: 13px; margin-top: 6px; }
.empty { color: #6b7280; font-style: italic; }
@media print { body { margin: 0; } }
"""


class FinancialReportComposer:
    """
    Composes printable financial reports.

    Amounts are written with the configured currency symbol, with a
    decimal comma (1.234,56) by default.
    """

    def __init__(self, brand_name: str = "", currency_symbol: str = "R$", decimal_comma: bool = True):
        self.brand_name = brand_name
        self.currency_symbol = currency_symbol
        self.decimal_comma = decimal_comma

    def format_currency(self, value: float) -> str:
        """Format an amount, e.g. ``R$ 1.234,56``."""
        amount = f"{value:,.2f}"
        if self.decimal_comma:
            amount = amount.replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{self.currency_symbol} {amount}"

    @staticmethod
    def month_label(report: FinancialReport) -> str:
        """Human readable month, e.g. ``May 2024``."""
        return f"{calendar.month_name[report.month]} {report.year}"

    def _title(self) -> str:
        return f"{self.brand_name} - Revenue by Professional" if self.brand_name else "Revenue by Professional"

    def _row_details(self, row: ProfessionalRevenue) -> str:
        return (
            f"Completed appointments: {row.completed_count} | "
            f"Average ticket: {self.format_currency(row.average_ticket)}"
        )

    def compose_text(self, report: FinancialReport) -> str:
        """Plain text rendering of the report."""
        lines: List[str] = [
            self._title(),
            self.month_label(report),
            "=" * 48,
        ]

        if not report.rows:
            lines.append("No professionals registered.")
            return "\n".join(lines)

        for row in report.rows:
            lines.append(f"{row.name} ({row.specialty})")
            lines.append(f"  Revenue: {self.format_currency(row.total_revenue)}")
            lines.append(f"  {self._row_details(row)}")

        lines.append("-" * 48)
        lines.append(
            f"Total: {self.format_currency(report.total_revenue)} "
            f"from {report.completed_count} completed appointments"
        )
        return "\n".join(lines)

    def compose_html(self, report: FinancialReport) -> str:
        """Print-formatted HTML rendering of the report."""
        cards = []
        for row in report.rows:
            cards.append(
                '<div class="professional">'
                f'<span class="revenue">{escape(self.format_currency(row.total_revenue))}</span>'
                f'<div class="name">{escape(row.name)}</div>'
                f'<div class="specialty">{escape(row.specialty)}</div>'
                f'<div class="details">{escape(self._row_details(row))}</div>'
                "</div>"
            )

        if cards:
            body = "\n".join(cards)
            summary = (
                '<p class="summary">'
                f"Total: <strong>{escape(self.format_currency(report.total_revenue))}</strong> "
                f"from <strong>{report.completed_count}</strong> completed appointments"
                "</p>"
            )
        else:
            body = '<p class="empty">No professionals registered.</p>'
            summary = ""

        title = escape(self._title())
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{title} - {escape(self.month_label(report))}</title>\n"
            f"<style>{PRINT_STYLES}</style>\n"
            "</head>\n"
            '<body onload="window.print()">\n'
            f"<h1>{title}</h1>\n"
            f"<h2>{escape(self.month_label(report))}</h2>\n"
            f"{summary}\n"
            f"{body}\n"
            "</body>\n"
            "</html>\n"
        )
