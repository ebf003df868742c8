"""Income predictor: recurring/average/estimate income per category."""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

import structlog

from cashflow.schemas.analytics import HistoricalIncome, IncomeBreakdown, IncomeSource
from cashflow.schemas.transaction import Direction, TransactionRecord
from cashflow.services.category_stats import analyze_direction
from cashflow.utils.money import total

logger = structlog.get_logger()

RECURRING_VARIANCE_THRESHOLD = Decimal("15")
RECURRING_APPEARANCE_RATE = Decimal("0.5")
MIN_MONTHS_FOR_AVERAGE = 3


def classify_source(is_recurring: bool, months_of_data: int) -> IncomeSource:
    if is_recurring:
        return IncomeSource.RECURRING
    if months_of_data >= MIN_MONTHS_FOR_AVERAGE:
        return IncomeSource.AVERAGE
    return IncomeSource.ESTIMATE


def analyze_historical_income(
    transactions: Iterable[TransactionRecord],
    months_back: int = 6,
    today: date | None = None,
    variance_threshold: Decimal = RECURRING_VARIANCE_THRESHOLD,
    appearance_rate: Decimal = RECURRING_APPEARANCE_RATE,
) -> list[HistoricalIncome]:
    """Predict monthly income per category from credit transactions.

    A category is recurring when its amounts barely vary
    (variance_percentage < variance_threshold) and it shows up in at least
    ``appearance_rate`` of the lookback months.
    """
    today = today or date.today()
    predictions = []
    for fig in analyze_direction(transactions, Direction.CREDIT, months_back, today):
        months = fig.stats.months_of_data
        rate = Decimal(months) / Decimal(months_back)
        is_recurring = fig.variance_percentage < variance_threshold and rate >= appearance_rate
        base = fig.to_prediction()
        predictions.append(
            HistoricalIncome(
                **base.model_dump(),
                is_recurring=is_recurring,
                source=classify_source(is_recurring, months),
            )
        )
    return predictions


def calculate_predicted_income(
    transactions: Iterable[TransactionRecord],
    months_back: int = 6,
    today: date | None = None,
    variance_threshold: Decimal = RECURRING_VARIANCE_THRESHOLD,
    appearance_rate: Decimal = RECURRING_APPEARANCE_RATE,
) -> tuple[Decimal, list[IncomeBreakdown]]:
    """Flat monthly income forecast (no seasonality) and its breakdown."""
    income = analyze_historical_income(
        transactions, months_back, today, variance_threshold, appearance_rate
    )
    breakdown = [
        IncomeBreakdown(
            category_name=item.category_name,
            amount=item.monthly_average,
            confidence=item.confidence,
            source=item.source,
        )
        for item in income
    ]
    predicted = total(item.monthly_average for item in income)
    logger.info("predicted_income", total=str(predicted), sources=len(breakdown))
    return predicted, breakdown
