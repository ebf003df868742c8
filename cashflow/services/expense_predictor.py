"""Expense predictor.

Historical monthly averages of debit categories, net of what scheduled
payments already cover in the target month:

    scheduled == 0                  full historical average
    0 < scheduled < average         the gap (average - scheduled), has_gap=True
    scheduled >= average            nothing: the scheduled line covers it
"""

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from cashflow.schemas.analytics import HistoricalPrediction, PredictedExpense
from cashflow.schemas.budget import BudgetRecord, BudgetWarning
from cashflow.schemas.transaction import Direction, TransactionRecord
from cashflow.services.category_stats import analyze_direction
from cashflow.utils.money import ZERO


def analyze_historical_expenses(
    transactions: Iterable[TransactionRecord],
    months_back: int = 6,
    today: date | None = None,
) -> list[HistoricalPrediction]:
    today = today or date.today()
    return [
        fig.to_prediction()
        for fig in analyze_direction(transactions, Direction.DEBIT, months_back, today)
    ]


def predict_expenses(
    historical: Iterable[HistoricalPrediction],
    scheduled_amounts: Mapping[int, Decimal],
) -> list[PredictedExpense]:
    predictions = []
    for expense in historical:
        scheduled = scheduled_amounts.get(expense.category_id, ZERO)
        average = expense.monthly_average
        common = {
            "category_id": expense.category_id,
            "category_name": expense.category_name,
            "historical_average": average,
            "months_of_data": expense.months_of_data,
            "confidence": expense.confidence,
        }
        if scheduled <= ZERO:
            predictions.append(PredictedExpense(amount=average, has_gap=False, **common))
        elif average > scheduled:
            predictions.append(
                PredictedExpense(
                    amount=average - scheduled,
                    has_gap=True,
                    scheduled_amount=scheduled,
                    **common,
                )
            )
        # else: fully covered by the scheduled payments line
    return predictions


def compare_budgets(
    predicted: Iterable[PredictedExpense],
    budgets: Iterable[BudgetRecord],
) -> list[BudgetWarning]:
    """Warn for every predicted expense above its category budget."""
    budget_by_name = {b.category_name: b.budget_amount for b in budgets}
    warnings = []
    for expense in predicted:
        budget = budget_by_name.get(expense.category_name)
        if budget and expense.amount > budget:
            warnings.append(
                BudgetWarning(
                    category_name=expense.category_name,
                    projected=expense.amount,
                    budget=budget,
                    variance=expense.amount - budget,
                )
            )
    return warnings
