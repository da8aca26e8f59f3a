"""Exception hierarchy for the forecasting pipeline."""


class ForecastError(Exception):
    """Base exception for the forecasting pipeline."""
    pass


class SourceUnavailableError(ForecastError):
    """The transaction source could not be read."""
    pass


class NoTransactionsError(ForecastError):
    """No transactions matched the requested currency."""

    def __init__(self, currency: str):
        super().__init__(f"No transactions found for currency: {currency}")
        self.currency = currency


class InsufficientDataError(ForecastError):
    """Too few aggregated months to build features or project from."""

    def __init__(self, months: int, required: int):
        super().__init__(
            f"Need at least {required} months of data for meaningful predictions, got {months}"
        )
        self.months = months
        self.required = required


class StoreError(ForecastError):
    """Writing to the persistent store failed."""
    pass


class ModelDisposedError(ForecastError):
    """A trained model was used after its lifetime ended."""
    pass
