# backend/forecasting/projector.py
import asyncio
import logging
from typing import List, Sequence

from forecasting.aggregate import MonthlyAggregate
from forecasting.date_utils import add_months, month_key
from forecasting.errors import InsufficientDataError
from forecasting.preprocess import (
    WINDOW_SIZE,
    MovingWindow,
    NormalizationConstants,
    future_feature_vector,
)
from forecasting.schemas import ProjectedMonth
from forecasting.train import TrainedModel

logger = logging.getLogger(__name__)

DEFAULT_HORIZON = 12


async def generate_projections(
    income_model: TrainedModel,
    expense_model: TrainedModel,
    monthly: Sequence[MonthlyAggregate],
    constants: NormalizationConstants,
    horizon: int = DEFAULT_HORIZON,
) -> List[ProjectedMonth]:
    """
    Project `horizon` months past the last historical month.

    Each month's denormalized predictions are pushed into the trailing
    windows used for the next month, so model error compounds across the
    horizon. Output months are contiguous even when the history has gaps.
    """
    if not monthly:
        raise InsufficientDataError(0, 1)
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")

    last = monthly[-1]
    recent = monthly[-WINDOW_SIZE:]
    income_window = MovingWindow(m.total_income for m in recent)
    expense_window = MovingWindow(m.total_expenses for m in recent)

    projections: List[ProjectedMonth] = []

    for step in range(1, horizon + 1):
        year, month = add_months(last.year, last.month, step)
        x = future_feature_vector(constants, year, month, income_window, expense_window)

        projected_income = income_model.predict(x) * constants.max_income
        await asyncio.sleep(0)
        projected_expenses = expense_model.predict(x) * constants.max_expense
        await asyncio.sleep(0)

        projections.append(
            ProjectedMonth(
                month_key=month_key(year, month),
                projected_income=projected_income,
                projected_expenses=projected_expenses,
            )
        )

        income_window.push(projected_income)
        expense_window.push(projected_expenses)

    logger.debug(
        "Projected %d months: %s .. %s",
        len(projections), projections[0].month_key, projections[-1].month_key,
    )
    return projections
