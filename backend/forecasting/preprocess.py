# backend/forecasting/preprocess.py
from collections import deque
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from forecasting.aggregate import MonthlyAggregate
from forecasting.errors import InsufficientDataError

MIN_MONTHS = 3
WINDOW_SIZE = 3
N_FEATURES = 4  # month, year position, income moving avg, expense moving avg


@dataclass(frozen=True)
class NormalizationConstants:
    max_income: float
    max_expense: float
    min_year: int
    max_year: int

    @property
    def year_range(self) -> int:
        # single-year history
        return max(1, self.max_year - self.min_year)

    def normalize_income(self, value: float) -> float:
        return value / self.max_income if self.max_income > 0 else 0.0

    def normalize_expense(self, value: float) -> float:
        return value / self.max_expense if self.max_expense > 0 else 0.0

    def normalize_month(self, month: int) -> float:
        return month / 12

    def normalize_year(self, year: int) -> float:
        return (year - self.min_year) / self.year_range


@dataclass(frozen=True)
class FeatureSet:
    features: np.ndarray  # (N, 4)
    income_labels: np.ndarray  # (N,)
    expense_labels: np.ndarray  # (N,)
    constants: NormalizationConstants

    def __len__(self):
        return self.features.shape[0]


class MovingWindow:
    """Bounded trailing buffer of monthly totals; pushing past capacity evicts the oldest."""

    def __init__(self, values: Iterable[float] = (), size: int = WINDOW_SIZE):
        self._values = deque(maxlen=size)
        for v in values:
            self.push(v)

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def mean(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    def values(self) -> List[float]:
        return list(self._values)

    def __len__(self):
        return len(self._values)


def compute_constants(monthly: Sequence[MonthlyAggregate]) -> NormalizationConstants:
    if not monthly:
        raise InsufficientDataError(0, MIN_MONTHS)
    years = [m.year for m in monthly]
    return NormalizationConstants(
        max_income=max(m.total_income for m in monthly),
        max_expense=max(m.total_expenses for m in monthly),
        min_year=min(years),
        max_year=max(years),
    )


def feature_vector(
    constants: NormalizationConstants,
    year: int,
    month: int,
    income_avg: float,
    expense_avg: float,
) -> np.ndarray:
    return np.array([
        constants.normalize_month(month),
        constants.normalize_year(year),
        constants.normalize_income(income_avg),
        constants.normalize_expense(expense_avg),
    ], dtype=np.float32)


def future_feature_vector(
    constants: NormalizationConstants,
    year: int,
    month: int,
    income_window: MovingWindow,
    expense_window: MovingWindow,
) -> np.ndarray:
    """
    Feature vector for a month with no actuals: the moving averages come from
    whatever trailing totals (actual or predicted) the windows hold.
    """
    return feature_vector(constants, year, month, income_window.mean(), expense_window.mean())


def _trailing_mean(values: np.ndarray, i: int) -> float:
    lookback = min(i, WINDOW_SIZE)
    if lookback == 0:
        return 0.0
    return float(values[i - lookback:i].mean())


def build_features(monthly: Sequence[MonthlyAggregate]) -> FeatureSet:
    """
    monthly: chronologically ordered monthly aggregates
    returns: FeatureSet with one (features, income label, expense label) row per month

    Moving averages cover up to 3 months preceding each row, so the first
    rows average over fewer months and row 0 gets 0.
    """
    if len(monthly) < MIN_MONTHS:
        raise InsufficientDataError(len(monthly), MIN_MONTHS)

    constants = compute_constants(monthly)
    incomes = np.array([m.total_income for m in monthly], dtype=np.float64)
    expenses = np.array([m.total_expenses for m in monthly], dtype=np.float64)

    rows = [
        feature_vector(
            constants,
            m.year,
            m.month,
            _trailing_mean(incomes, i),
            _trailing_mean(expenses, i),
        )
        for i, m in enumerate(monthly)
    ]

    income_labels = np.array([constants.normalize_income(v) for v in incomes], dtype=np.float32)
    expense_labels = np.array([constants.normalize_expense(v) for v in expenses], dtype=np.float32)

    return FeatureSet(
        features=np.stack(rows, axis=0),
        income_labels=income_labels,
        expense_labels=expense_labels,
        constants=constants,
    )
