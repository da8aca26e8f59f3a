from typing import Tuple


def add_months(year: int, month: int, n: int) -> Tuple[int, int]:
    """
    Add n months to given (year, month)
    Returns new (year, month)
    """
    new_month = month + n
    new_year = year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    return new_year, new_month


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def parse_year_month(date: str) -> Tuple[int, int]:
    """
    "2024-11-03" -> (2024, 11)
    Raises ValueError when the first two components are not a valid year/month.
    """
    parts = date.strip().split("-")
    if len(parts) < 2:
        raise ValueError(f"Not a YYYY-MM date: {date!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range in {date!r}")
    return year, month
