"""Monthly projection schemas and API request bodies."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from cashflow.schemas.account import (
    AccountBalance,
    LiquidityPosition,
    LoanReceivableRecord,
    RunwayAnalysis,
)
from cashflow.schemas.analytics import IncomeBreakdown, PredictedExpense
from cashflow.schemas.budget import BudgetLine, BudgetRecord, BudgetWarning
from cashflow.schemas.scheduled_payment import (
    DebtPayment,
    ScheduledPaymentInstance,
    ScheduledPaymentLine,
)
from cashflow.schemas.transaction import TransactionRecord


class HealthStatus(str, Enum):
    SURPLUS = "surplus"
    TIGHT = "tight"
    DEFICIT = "deficit"


class MonthlyProjection(BaseModel):
    month: str  # "2026-10"
    month_label: str  # "October 2026"
    # Balances and health are filled in by the sequential balance walk
    opening_balance: Decimal = Decimal("0.00")
    projected_income: Decimal
    income_breakdown: list[IncomeBreakdown] = []
    debt_payments: list[DebtPayment] = []
    scheduled_payments: list[ScheduledPaymentLine] = []
    predicted_expenses: list[PredictedExpense] = []
    budgets: list[BudgetLine] = []
    budget_warnings: list[BudgetWarning] = []
    # Predicted expenses and warnings held back by the current exclusions
    excluded_expenses: list[PredictedExpense] = []
    excluded_budget_warnings: list[BudgetWarning] = []
    total_debt: Decimal
    total_scheduled: Decimal
    total_predicted: Decimal
    total_budgets: Decimal
    total_obligations: Decimal
    closing_balance: Decimal = Decimal("0.00")
    health: HealthStatus = HealthStatus.SURPLUS


class ProjectionSummary(BaseModel):
    current_balance: Decimal
    months_ahead: int
    total_obligations: Decimal
    total_projected_income: Decimal
    net_projected_change: Decimal
    lowest_projected_balance: Decimal
    months_until_negative: int | None = None  # 1-based month index, None if never negative


class CashFlowProjection(BaseModel):
    entity_id: str
    as_of: date
    summary: ProjectionSummary
    projections: list[MonthlyProjection]
    liquidity: LiquidityPosition
    runway: RunwayAnalysis
    excluded_categories: list[str] = []
    version: str = "3.0"


class ProjectionSnapshot(BaseModel):
    """Pre-fetched data for one entity.

    A collection left to ``None`` means it could not be loaded; required
    collections (transactions, accounts) then fail the projection.
    """
    transactions: list[TransactionRecord] | None = None
    scheduled_instances: list[ScheduledPaymentInstance] | None = None
    debt_payments: list[DebtPayment] | None = None
    budgets: list[BudgetRecord] | None = None
    accounts: list[AccountBalance] | None = None
    receivables: list[LoanReceivableRecord] | None = None


class ProjectionRequest(BaseModel):
    entity_id: str
    months_ahead: int | None = None
    months_back: int | None = None
    as_of: date | None = None
    current_balance: Decimal | None = None  # defaults to the cash-account total
    excluded_categories: list[str] = []
    snapshot: ProjectionSnapshot = Field(default_factory=ProjectionSnapshot)


class ExclusionRequest(BaseModel):
    """Re-walk a returned projection under a new set of excluded categories."""
    projection: CashFlowProjection
    excluded_categories: list[str] = []
