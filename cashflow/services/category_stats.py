"""Category statistics aggregator.

Groups historical transactions by category and month and derives, per
category:

    monthly_average      sum(amounts) / max(months_of_data, 1)
    variance_percentage  100 * stddev(amounts) / monthly_average
                         (population stddev of the raw transaction amounts,
                         not of the monthly sums; 100 when the average is <= 0)
    confidence           high / medium / low, see CONFIDENCE_TIERS

Categories whose average is not positive (refund-dominated, net zero) are
not usable predictions and are dropped.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import structlog

from cashflow.core.exceptions import InvalidParameterError
from cashflow.schemas.analytics import Confidence, HistoricalPrediction
from cashflow.schemas.transaction import EXCLUDED_TYPE_CODES, Direction, TransactionRecord
from cashflow.utils.dates import add_months, first_of_month, month_key
from cashflow.utils.money import CENT, ZERO, to_money, total

logger = structlog.get_logger()

HUNDRED = Decimal("100")

# (min months_of_data, variance_percentage strictly below, tier); first match wins
CONFIDENCE_TIERS: list[tuple[int, Decimal, Confidence]] = [
    (4, Decimal("10"), Confidence.HIGH),
    (3, Decimal("30"), Confidence.MEDIUM),
]


@dataclass
class CategoryStatistics:
    category_id: int
    category_name: str
    amounts: list[Decimal] = field(default_factory=list)
    distinct_months: set[str] = field(default_factory=set)

    def add(self, txn: TransactionRecord) -> None:
        self.amounts.append(txn.amount)
        self.distinct_months.add(month_key(txn.date))

    @property
    def months_of_data(self) -> int:
        return len(self.distinct_months)

    @property
    def monthly_average(self) -> Decimal:
        return total(self.amounts) / max(self.months_of_data, 1)

    @property
    def variance(self) -> Decimal:
        mean = self.monthly_average
        return total((amount - mean) ** 2 for amount in self.amounts) / len(self.amounts)

    @property
    def variance_percentage(self) -> Decimal:
        mean = self.monthly_average
        if mean <= 0:
            return HUNDRED
        return HUNDRED * self.variance.sqrt() / mean


@dataclass(frozen=True)
class CategoryFigures:
    """Unrounded figures of one usable category."""
    stats: CategoryStatistics
    monthly_average: Decimal
    variance_percentage: Decimal
    confidence: Confidence

    def to_prediction(self) -> HistoricalPrediction:
        return HistoricalPrediction(
            category_id=self.stats.category_id,
            category_name=self.stats.category_name,
            monthly_average=to_money(self.monthly_average),
            months_of_data=self.stats.months_of_data,
            confidence=self.confidence,
            variance_percentage=self.variance_percentage.quantize(CENT),
        )


def lookback_window(today: date, months_back: int) -> tuple[date, date]:
    """``months_back`` calendar months ending at ``today`` (current month included)."""
    if months_back <= 0:
        raise InvalidParameterError("months_back", "must be a positive number of months")
    return add_months(first_of_month(today), -(months_back - 1)), today


def filter_prediction_pool(
    transactions: Iterable[TransactionRecord],
    direction: Direction,
    date_from: date,
    date_to: date,
) -> list[TransactionRecord]:
    """Cash-affecting, categorized, operating transactions of one direction."""
    return [
        txn for txn in transactions
        if txn.direction == direction
        and txn.affects_cashflow
        and txn.category_id is not None
        and txn.type_code not in EXCLUDED_TYPE_CODES
        and date_from <= txn.date <= date_to
    ]


def aggregate_by_category(transactions: Iterable[TransactionRecord]) -> list[CategoryStatistics]:
    by_category: dict[int, CategoryStatistics] = {}
    for txn in transactions:
        stats = by_category.get(txn.category_id)
        if stats is None:
            stats = CategoryStatistics(
                category_id=txn.category_id,
                category_name=txn.category_name or "Unknown",
            )
            by_category[txn.category_id] = stats
        stats.add(txn)
    return list(by_category.values())


def score_confidence(months_of_data: int, variance_percentage: Decimal) -> Confidence:
    for min_months, max_variance, tier in CONFIDENCE_TIERS:
        if months_of_data >= min_months and variance_percentage < max_variance:
            return tier
    return Confidence.LOW


def summarize_categories(stats_list: Iterable[CategoryStatistics]) -> list[CategoryFigures]:
    """Derive figures per category, skipping the ones that cannot be computed."""
    figures = []
    for stats in stats_list:
        try:
            average = stats.monthly_average
            variance_pct = stats.variance_percentage
        except ArithmeticError as e:
            logger.warning(
                "category_stats_skipped",
                category_id=stats.category_id,
                category_name=stats.category_name,
                error=str(e),
            )
            continue
        if average <= ZERO:
            continue
        figures.append(
            CategoryFigures(
                stats=stats,
                monthly_average=average,
                variance_percentage=variance_pct,
                confidence=score_confidence(stats.months_of_data, variance_pct),
            )
        )
    return figures


def analyze_direction(
    transactions: Iterable[TransactionRecord],
    direction: Direction,
    months_back: int,
    today: date,
) -> list[CategoryFigures]:
    """Window, filter, group and summarize one direction of the history."""
    date_from, date_to = lookback_window(today, months_back)
    pool = filter_prediction_pool(transactions, direction, date_from, date_to)
    figures = summarize_categories(aggregate_by_category(pool))
    logger.debug(
        "categories_analyzed",
        direction=direction.value,
        transactions=len(pool),
        categories=len(figures),
        date_from=date_from.isoformat(),
        date_to=date_to.isoformat(),
    )
    return figures
