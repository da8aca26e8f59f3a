"""Shared builders for forecasting tests."""
from forecasting.aggregate import MonthlyAggregate
from forecasting.date_utils import month_key
from forecasting.records import CSV_FIELDS, Transaction

HEADER = ",".join(CSV_FIELDS)


def csv_row(id, date, type, amount, currency="GBP", category="General"):
    values = [
        id, date, type, category, "desc", str(amount), currency,
        "m1", "Merchant", "5411", "false", "essential", "0", "1",
    ]
    return ",".join(values)


def make_csv(rows):
    return "\n".join([HEADER] + [csv_row(*r) for r in rows]) + "\n"


def txn(date, type, amount, currency="GBP", id="t"):
    return Transaction(
        id=id,
        date=date,
        type=type,
        category="General",
        description="desc",
        amount=float(amount),
        currency=currency,
    )


def monthly(year, month, income, expenses, count=2):
    return MonthlyAggregate(
        year=year,
        month=month,
        month_key=month_key(year, month),
        total_income=float(income),
        total_expenses=float(expenses),
        transaction_count=count,
    )


def four_month_rows():
    """Income [1000, 1000, 1200, 1200], expenses [800, 900, 800, 900] over 2024-01..04."""
    incomes = [1000, 1000, 1200, 1200]
    expenses = [800, 900, 800, 900]
    rows = []
    for i, (inc, exp) in enumerate(zip(incomes, expenses), start=1):
        rows.append((f"i{i}", f"2024-{i:02d}-01", "income", inc))
        rows.append((f"e{i}a", f"2024-{i:02d}-10", "expense", exp / 2))
        rows.append((f"e{i}b", f"2024-{i:02d}-20", "expense", exp / 2))
    return rows
