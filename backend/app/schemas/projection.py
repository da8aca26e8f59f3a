from typing import List

from pydantic import BaseModel, Field

from forecasting.schemas import HistoricalYear


class YearlyHistoryResponse(BaseModel):
    currency: str
    years: List[HistoricalYear]


class ErrorDetail(BaseModel):
    detail: str = Field(..., description="Human-readable reason")
