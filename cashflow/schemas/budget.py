"""Budget schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class BudgetRecord(BaseModel):
    budget_id: int | None = None
    category_id: int | None = None
    category_name: str = "Unknown"
    budget_amount: Decimal
    start_date: date
    end_date: date
    is_active: bool = True


class BudgetLine(BaseModel):
    """Budget allocation counted in a month (categories neither scheduled nor predicted)."""
    category_id: int | None = None
    category_name: str
    budget_amount: Decimal
    estimated_spend: Decimal


class BudgetWarning(BaseModel):
    category_name: str
    projected: Decimal
    budget: Decimal
    variance: Decimal
