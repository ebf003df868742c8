"""Cash flow projection service.

Reads one entity's data once through the injected data source, then runs the
pure pipeline: income and expense predictions, scheduled-payment
reconciliation, monthly roll-up, liquidity and runway.
"""

import asyncio
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

import structlog

from cashflow.config import Settings, settings
from cashflow.core.exceptions import InvalidParameterError, MissingDataError
from cashflow.schemas.analytics import HistoricalPrediction, IncomeBreakdown
from cashflow.schemas.budget import BudgetRecord
from cashflow.schemas.projection import CashFlowProjection, MonthlyProjection
from cashflow.schemas.scheduled_payment import DebtPayment, ScheduledPaymentInstance
from cashflow.services.category_stats import lookback_window
from cashflow.services.data_source import ProjectionDataSource
from cashflow.services.expense_predictor import (
    analyze_historical_expenses,
    compare_budgets,
    predict_expenses,
)
from cashflow.services.income_predictor import calculate_predicted_income
from cashflow.services.liquidity_service import analyze_liquidity_position, calculate_runway
from cashflow.services.projection import (
    apply_exclusions,
    average_monthly_obligations,
    budgets_active_in_month,
    build_month,
    debt_payments_due,
    month_keys,
    roll_balances,
    scheduled_lines_due,
    select_budgets_for_month,
    summarize_projections,
)
from cashflow.services.scheduled_obligations import (
    categories_with_scheduled_payments,
    scheduled_amounts_by_category,
)
from cashflow.utils.dates import month_bounds

logger = structlog.get_logger()


class CashFlowProjectionService:
    def __init__(self, source: ProjectionDataSource, config: Settings | None = None):
        self.source = source
        self.config = config or settings

    def _validate(self, months_ahead: int, months_back: int) -> None:
        if months_back <= 0:
            raise InvalidParameterError("months_back", "must be a positive number of months")
        if months_ahead <= 0:
            raise InvalidParameterError("months_ahead", "must be a positive number of months")
        if months_ahead > self.config.max_months_ahead:
            raise InvalidParameterError(
                "months_ahead", f"cannot exceed {self.config.max_months_ahead} months"
            )

    async def project(
        self,
        entity_id: str,
        months_ahead: int | None = None,
        months_back: int | None = None,
        current_balance: Decimal | None = None,
        excluded_categories: Iterable[str] = (),
        today: date | None = None,
    ) -> CashFlowProjection:
        """Build the month-by-month projection for an entity.

        ``current_balance`` defaults to the total of the cash accounts.
        """
        months_ahead = months_ahead if months_ahead is not None else self.config.default_months_ahead
        months_back = months_back if months_back is not None else self.config.default_months_back
        self._validate(months_ahead, months_back)
        today = today or date.today()

        history_from, history_to = lookback_window(today, months_back)
        keys = month_keys(today, months_ahead)
        horizon_from = month_bounds(keys[0])[0]
        horizon_to = month_bounds(keys[-1])[1]

        # Snapshot: every collection is read exactly once
        transactions, instances, debts, budgets, accounts, loans = await asyncio.gather(
            self.source.list_transactions(entity_id, history_from, history_to),
            self.source.list_scheduled_instances(entity_id, horizon_from, horizon_to),
            self.source.list_debt_payments(entity_id, horizon_from, horizon_to),
            self.source.list_budgets(entity_id, horizon_from, horizon_to),
            self.source.list_accounts(entity_id),
            self.source.list_receivables(entity_id),
        )
        if transactions is None:
            raise MissingDataError("Transactions")
        if accounts is None:
            raise MissingDataError("Accounts")
        instances = instances or []
        debts = debts or []
        budgets = budgets or []
        loans = loans or []

        income_total, income_breakdown = calculate_predicted_income(
            transactions,
            months_back,
            today,
            variance_threshold=self.config.recurring_variance_threshold,
            appearance_rate=self.config.recurring_appearance_rate,
        )
        historical_expenses = analyze_historical_expenses(transactions, months_back, today)

        months = [
            self._build_month(
                key, income_total, income_breakdown, historical_expenses, instances, debts, budgets
            )
            for key in keys
        ]

        liquidity = analyze_liquidity_position(accounts, loans, today)
        if current_balance is None:
            current_balance = liquidity.cash_balance

        buffer_months = self.config.health_buffer_months
        projections = roll_balances(months, current_balance, buffer_months)
        excluded = sorted(set(excluded_categories))
        if excluded:
            projections = apply_exclusions(projections, excluded, current_balance, buffer_months)

        runway = calculate_runway(
            liquidity,
            average_monthly_obligations(projections),
            income_total,
            months_ahead,
            today,
        )
        summary = summarize_projections(projections, current_balance)

        logger.info(
            "projection_built",
            entity_id=entity_id,
            months_ahead=months_ahead,
            predicted_income=str(income_total),
            total_obligations=str(summary.total_obligations),
            lowest_balance=str(summary.lowest_projected_balance),
            months_until_negative=summary.months_until_negative,
            excluded=len(excluded),
        )
        return CashFlowProjection(
            entity_id=entity_id,
            as_of=today,
            summary=summary,
            projections=projections,
            liquidity=liquidity,
            runway=runway,
            excluded_categories=excluded,
        )

    def _build_month(
        self,
        key: str,
        income_total: Decimal,
        income_breakdown: list[IncomeBreakdown],
        historical_expenses: list[HistoricalPrediction],
        instances: list[ScheduledPaymentInstance],
        debts: list[DebtPayment],
        budgets: list[BudgetRecord],
    ) -> MonthlyProjection:
        # Priority 1
        debt_lines = debt_payments_due(debts, key)
        scheduled_lines = scheduled_lines_due(instances, key)
        # Priority 2
        predicted = predict_expenses(
            historical_expenses, scheduled_amounts_by_category(instances, key)
        )
        # Priority 3
        budget_lines = select_budgets_for_month(
            budgets,
            key,
            categories_with_scheduled_payments(instances, key),
            {e.category_name for e in predicted},
        )
        warnings = compare_budgets(predicted, budgets_active_in_month(budgets, key))
        return build_month(
            key,
            projected_income=income_total,
            income_breakdown=income_breakdown,
            debt_payments=debt_lines,
            scheduled_payments=scheduled_lines,
            predicted_expenses=predicted,
            budgets=budget_lines,
            budget_warnings=warnings,
        )

    def reapply_exclusions(
        self, projection: CashFlowProjection, excluded_categories: Iterable[str]
    ) -> CashFlowProjection:
        """Re-walk a returned projection under a new exclusion set.

        The projection may already carry exclusions; they are replaced, not
        added to.
        """
        excluded = sorted(set(excluded_categories))
        current_balance = projection.summary.current_balance
        projections = apply_exclusions(
            projection.projections, excluded, current_balance, self.config.health_buffer_months
        )
        runway = calculate_runway(
            projection.liquidity,
            average_monthly_obligations(projections),
            projection.runway.monthly_income,
            len(projections),
            projection.as_of,
        )
        return projection.model_copy(
            update={
                "projections": projections,
                "summary": summarize_projections(projections, current_balance),
                "runway": runway,
                "excluded_categories": excluded,
            }
        )
