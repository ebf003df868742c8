"""Historical prediction schemas."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IncomeSource(str, Enum):
    RECURRING = "recurring"
    AVERAGE = "average"
    ESTIMATE = "estimate"


class HistoricalPrediction(BaseModel):
    category_id: int
    category_name: str
    monthly_average: Decimal
    months_of_data: int
    confidence: Confidence
    variance_percentage: Decimal


class HistoricalIncome(HistoricalPrediction):
    is_recurring: bool
    source: IncomeSource


class IncomeBreakdown(BaseModel):
    category_name: str
    amount: Decimal
    confidence: Confidence
    source: IncomeSource


class PredictedExpense(BaseModel):
    category_id: int | None = None
    category_name: str
    amount: Decimal
    historical_average: Decimal
    months_of_data: int
    confidence: Confidence
    has_gap: bool = False  # True when part of the average is already a scheduled payment
    scheduled_amount: Decimal | None = None
