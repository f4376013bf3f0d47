"""Tests for the printable financial report."""
from use_cases.scheduling.domain.services import (
    FinancialReport,
    FinancialReportCalculator,
    ProfessionalRevenue,
)
from use_cases.scheduling.presentation import FinancialReportComposer


class TestCurrency:
    """Tests for amount formatting"""

    def test_decimal_comma(self):
        composer = FinancialReportComposer()
        assert composer.format_currency(1234.56) == "R$ 1.234,56"
        assert composer.format_currency(0) == "R$ 0,00"
        assert composer.format_currency(1250000) == "R$ 1.250.000,00"

    def test_decimal_point(self):
        composer = FinancialReportComposer(currency_symbol="$", decimal_comma=False)
        assert composer.format_currency(1234.5) == "$ 1,234.50"


class TestComposer:
    """Tests for text and HTML output"""

    def test_text_report(self, may_schedule):
        report = FinancialReportCalculator().execute(may_schedule, 2024, 5)
        text = FinancialReportComposer(brand_name="Clinic Scheduling").compose_text(report)
        lines = text.splitlines()

        assert lines[0] == "Clinic Scheduling - Revenue by Professional"
        assert lines[1] == "May 2024"
        assert "Dr. Ana Souza (Cardiology)" in lines
        assert "  Revenue: R$ 450,00" in lines
        assert "  Completed appointments: 2 | Average ticket: R$ 225,00" in lines
        assert lines[-1] == "Total: R$ 750,00 from 3 completed appointments"

    def test_text_report_without_professionals(self):
        text = FinancialReportComposer().compose_text(FinancialReport(year=2024, month=1))
        assert text.splitlines()[0] == "Revenue by Professional"
        assert text.endswith("No professionals registered.")

    def test_html_report_is_printable_and_escaped(self):
        report = FinancialReport(year=2024, month=5, rows=[
            ProfessionalRevenue(
                professional_id="prof_1",
                name="<b>Ana</b>",
                specialty="Cardiology",
                completed_count=1,
                total_revenue=200,
                average_ticket=200,
            ),
        ])
        html = FinancialReportComposer().compose_html(report)

        assert html.startswith("<!DOCTYPE html>")
        assert 'onload="window.print()"' in html
        assert "@media print" in html
        assert "&lt;b&gt;Ana&lt;/b&gt;" in html
        assert "<b>Ana</b>" not in html
        assert "R$ 200,00" in html
