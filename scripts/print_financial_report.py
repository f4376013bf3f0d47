"""
Print the monthly financial report from the stored schedule.

Usage:
    python scripts/print_financial_report.py            # current month
    python scripts/print_financial_report.py 2024-05    # given month
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import settings
from use_cases.scheduling import create_schedule_store
from use_cases.scheduling.presentation import FinancialReportComposer

logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(levelname)s - %(message)s")


def main():
    store = create_schedule_store(settings)

    if len(sys.argv) > 1:
        year_str, month_str = sys.argv[1].split("-")
        year, month = int(year_str), int(month_str)
    else:
        now = datetime.now(store.tz)
        year, month = now.year, now.month

    composer = FinancialReportComposer(
        brand_name=settings.brand_name,
        currency_symbol=settings.currency_symbol,
        decimal_comma=settings.currency_decimal_comma,
    )
    print(composer.compose_text(store.financial_report(year, month)))


if __name__ == "__main__":
    main()
