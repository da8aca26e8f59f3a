# backend/forecasting/records.py
import asyncio
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from forecasting.errors import SourceUnavailableError

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "id",
    "date",
    "type",
    "category",
    "description",
    "amount",
    "currency",
    "merchantId",
    "merchantName",
    "mcc",
    "isRecurring",
    "essentiality",
    "labelRecurring",
    "labelEssential",
]


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str  # YYYY-MM-DD
    type: str  # "income" | "expense"
    category: str
    description: str
    amount: float
    currency: str
    merchant_id: str = ""
    merchant_name: str = ""
    mcc: str = ""
    is_recurring: str = ""
    essentiality: str = ""
    label_recurring: str = ""
    label_essential: str = ""

    @property
    def is_income(self) -> bool:
        return self.type == "income"


def parse_amount(raw: str) -> float:
    """
    Lenient decimal parse: empty, unparsable and non-finite values become 0.0,
    negative values are stored as their magnitude.
    """
    try:
        value = float(raw) if raw else 0.0
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return abs(value)


# CSV header -> Transaction attribute, for the plain string fields
_STRING_FIELDS = {
    "id": "id",
    "date": "date",
    "category": "category",
    "description": "description",
    "currency": "currency",
    "merchantId": "merchant_id",
    "merchantName": "merchant_name",
    "mcc": "mcc",
    "isRecurring": "is_recurring",
    "essentiality": "essentiality",
    "labelRecurring": "label_recurring",
    "labelEssential": "label_essential",
}


def _to_transaction(row: Dict[str, str]) -> Transaction:
    fields = {attr: row.get(header, "") for header, attr in _STRING_FIELDS.items()}
    return Transaction(
        type=row.get("type") or "expense",
        amount=parse_amount(row.get("amount", "")),
        **fields,
    )


def parse_csv(text: str) -> List[Transaction]:
    """
    text: comma-delimited transactions, first line is the header
    returns: transactions in input order

    Rows whose field count differs from the header are dropped.
    """
    lines = text.strip().splitlines()
    if not lines:
        return []

    headers = [h.strip() for h in lines[0].split(",")]
    transactions: List[Transaction] = []
    dropped = 0

    for line in lines[1:]:
        values = line.split(",")
        if len(values) != len(headers):
            dropped += 1
            continue
        transactions.append(_to_transaction(dict(zip(headers, values))))

    if dropped:
        logger.debug("Dropped %d malformed CSV rows", dropped)
    return transactions


async def load_csv_file(path: Path | str) -> List[Transaction]:
    path = Path(path)
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error("Error loading CSV file %s: %s", path, e)
        raise SourceUnavailableError(f"Failed to load {path.name}: {e}") from e

    logger.debug("Successfully loaded %s", path.name)
    return parse_csv(text)
