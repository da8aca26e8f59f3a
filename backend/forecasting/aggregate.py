# backend/forecasting/aggregate.py
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from forecasting.date_utils import month_key, parse_year_month
from forecasting.records import Transaction
from forecasting.schemas import HistoricalYear

logger = logging.getLogger(__name__)


@dataclass
class MonthlyAggregate:
    year: int
    month: int  # 1-12
    month_key: str  # YYYY-MM
    total_income: float = 0.0
    total_expenses: float = 0.0
    transaction_count: int = 0


def filter_by_currency(transactions: Iterable[Transaction], currency: str) -> List[Transaction]:
    """Exact, case-sensitive match on the stored currency code."""
    return [t for t in transactions if t.currency == currency]


def aggregate_by_month(transactions: Iterable[Transaction]) -> List[MonthlyAggregate]:
    """
    One aggregate per (year, month) present in the input, sorted chronologically.
    Months without transactions are not synthesized.
    """
    months: Dict[Tuple[int, int], MonthlyAggregate] = {}
    skipped = 0

    for txn in transactions:
        try:
            year, month = parse_year_month(txn.date)
        except ValueError:
            skipped += 1
            continue

        bucket = months.get((year, month))
        if bucket is None:
            bucket = MonthlyAggregate(year=year, month=month, month_key=month_key(year, month))
            months[(year, month)] = bucket

        if txn.is_income:
            bucket.total_income += txn.amount
        else:
            bucket.total_expenses += txn.amount
        bucket.transaction_count += 1

    if skipped:
        logger.debug("Skipped %d transactions with unparsable dates", skipped)

    return [months[key] for key in sorted(months)]


def aggregate_by_year(transactions: Iterable[Transaction]) -> List[HistoricalYear]:
    """Per-calendar-year income/expense totals, for comparison against projections."""
    rows = []
    for t in transactions:
        try:
            year, _ = parse_year_month(t.date)
        except ValueError:
            continue
        rows.append((f"{year:04d}", t.amount if t.is_income else 0.0, 0.0 if t.is_income else t.amount))
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=["year", "income", "expenses"])
    yearly = df.groupby("year", sort=True)[["income", "expenses"]].sum().reset_index()

    return [
        HistoricalYear(year=str(row.year), income=float(row.income), expenses=float(row.expenses))
        for row in yearly.itertuples(index=False)
    ]
