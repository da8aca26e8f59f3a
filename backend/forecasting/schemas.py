from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectedMonth(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    month_key: str = Field(..., alias="monthKey", pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    projected_income: float = Field(..., alias="projectedIncome")
    projected_expenses: float = Field(..., alias="projectedExpenses")


class ProjectionResult(BaseModel):
    """
    Persisted projection bundle. Serialized field names are the camelCase
    aliases; anything reading previously saved projections depends on them.
    """
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    projections: List[ProjectedMonth]
    model_accuracy: Optional[float] = Field(None, alias="modelAccuracy")
    training_date: str = Field(..., alias="trainingDate", description="ISO-8601 UTC timestamp")
    historical_months: int = Field(..., alias="historicalMonths", ge=0)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, payload: str) -> "ProjectionResult":
        return cls.model_validate_json(payload)


class HistoricalYear(BaseModel):
    year: str
    income: float
    expenses: float
