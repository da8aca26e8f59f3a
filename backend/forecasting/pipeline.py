# backend/forecasting/pipeline.py
"""
End-to-end projection pipeline.

Steps:
- Load transactions from the CSV source.
- Keep the requested currency (exact match).
- Aggregate into chronologically ordered monthly totals.
- Build normalized features/labels (needs >= 3 months).
- Train one income and one expense model.
- Autoregressively project the horizon, denormalize, persist.

Invocations are not re-entrant: callers must not start a second run while
one is in flight (both would write the same store key).
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from forecasting import config
from forecasting.aggregate import aggregate_by_month, aggregate_by_year, filter_by_currency
from forecasting.errors import NoTransactionsError
from forecasting.preprocess import build_features
from forecasting.projector import generate_projections
from forecasting.records import load_csv_file
from forecasting.schemas import HistoricalYear, ProjectionResult
from forecasting.store import JsonFileBackend, ProjectionStore
from forecasting.train import TrainedModel, train_model

logger = logging.getLogger(__name__)


def default_store() -> ProjectionStore:
    return ProjectionStore(JsonFileBackend(config.STORE_PATH))


def model_accuracy(*models: TrainedModel) -> Optional[float]:
    """1 - mean final validation MAE (normalized scale), clamped to [0, 1]."""
    maes = [m.history.final_val_mae for m in models]
    maes = [m for m in maes if m is not None]
    if not maes:
        return None
    return min(1.0, max(0.0, 1.0 - sum(maes) / len(maes)))


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def generate_and_save_projections(
    currency: str = config.DEFAULT_CURRENCY,
    *,
    source: Optional[Path] = None,
    store: Optional[ProjectionStore] = None,
    horizon: int = config.HORIZON,
    seed: Optional[int] = config.SEED,
) -> ProjectionResult:
    logger.info("Starting projection generation for currency: %s", currency)

    source = source or config.source_path()
    store = store or default_store()

    transactions = await load_csv_file(source)
    logger.debug("Loaded %d transactions", len(transactions))

    filtered = filter_by_currency(transactions, currency)
    logger.debug("Filtered to %d %s transactions", len(filtered), currency)
    if not filtered:
        raise NoTransactionsError(currency)

    monthly = aggregate_by_month(filtered)
    logger.debug("Aggregated into %d months", len(monthly))

    feature_set = build_features(monthly)

    income_model = expense_model = None
    try:
        logger.debug("Training income model...")
        income_model = await train_model(
            feature_set.features, feature_set.income_labels, name="income", seed=seed
        )
        logger.debug("Training expense model...")
        expense_model = await train_model(
            feature_set.features,
            feature_set.expense_labels,
            name="expense",
            seed=None if seed is None else seed + 1,
        )

        logger.debug("Generating %d-month projections...", horizon)
        projections = await generate_projections(
            income_model, expense_model, monthly, feature_set.constants, horizon=horizon
        )

        result = ProjectionResult(
            projections=projections,
            model_accuracy=model_accuracy(income_model, expense_model),
            training_date=_utc_timestamp(),
            historical_months=len(monthly),
        )
        store.save(result)
    finally:
        for model in (income_model, expense_model):
            if model is not None:
                model.dispose()

    for p in projections[:3]:
        logger.info(
            "  %s: Income=%.2f, Expenses=%.2f",
            p.month_key, p.projected_income, p.projected_expenses,
        )
    return result


async def load_historical_yearly_data(
    currency: str = config.DEFAULT_CURRENCY,
    *,
    source: Optional[Path] = None,
) -> List[HistoricalYear]:
    transactions = await load_csv_file(source or config.source_path())
    return aggregate_by_year(filter_by_currency(transactions, currency))


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    result = asyncio.run(generate_and_save_projections())
    print(result.to_json())
