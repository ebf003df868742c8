"""Category statistics aggregator tests."""

from datetime import date
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from cashflow.core.exceptions import InvalidParameterError
from cashflow.schemas.analytics import Confidence
from cashflow.schemas.transaction import Direction
from cashflow.services.category_stats import (
    CategoryStatistics,
    aggregate_by_category,
    analyze_direction,
    filter_prediction_pool,
    lookback_window,
    score_confidence,
    summarize_categories,
)
from factories import TODAY, office_supplies_history, txn


def test_lookback_window_includes_current_month():
    assert lookback_window(TODAY, 6) == (date(2026, 5, 1), TODAY)
    assert lookback_window(date(2026, 3, 31), 1) == (date(2026, 3, 1), date(2026, 3, 31))


def test_lookback_window_crosses_year():
    assert lookback_window(date(2027, 2, 14), 6) == (date(2026, 9, 1), date(2027, 2, 14))


@pytest.mark.parametrize("months_back", [0, -3])
def test_lookback_window_rejects_non_positive(months_back):
    with pytest.raises(InvalidParameterError) as exc_info:
        lookback_window(TODAY, months_back)
    assert exc_info.value.parameter == "months_back"


def test_office_supplies_average_and_confidence():
    [fig] = analyze_direction(office_supplies_history(), Direction.DEBIT, 6, TODAY)
    assert fig.monthly_average == Decimal("100")
    assert fig.variance_percentage == Decimal("5")
    assert fig.confidence == Confidence.HIGH

    prediction = fig.to_prediction()
    assert prediction.category_name == "Office Supplies"
    assert prediction.monthly_average == Decimal("100.00")
    assert prediction.months_of_data == 4
    assert prediction.variance_percentage == Decimal("5.00")


def test_variance_uses_raw_amounts_not_monthly_sums():
    # Every month sums to 200, but the individual amounts spread widely
    transactions = [
        txn(date(2026, 8, 3), "50"),
        txn(date(2026, 8, 20), "150"),
        txn(date(2026, 9, 3), "50"),
        txn(date(2026, 9, 20), "150"),
    ]
    [fig] = analyze_direction(transactions, Direction.DEBIT, 6, TODAY)
    assert fig.monthly_average == Decimal("200")
    assert fig.to_prediction().variance_percentage == Decimal("55.90")
    assert fig.confidence == Confidence.LOW


def test_pool_excludes_non_operating_transactions():
    transactions = [
        txn(date(2026, 9, 1), "10"),
        txn(date(2026, 9, 2), "20", affects_cashflow=False),
        txn(date(2026, 9, 3), "30", type_code="TRF_OUT"),
        txn(date(2026, 9, 4), "40", type_code="DEBT_PAYBACK"),
        txn(date(2026, 9, 5), "50", category_id=None),
        txn(date(2026, 9, 6), "60", direction="credit"),
        txn(date(2026, 4, 30), "70"),
        txn(date(2026, 10, 19), "80"),
    ]
    pool = filter_prediction_pool(transactions, Direction.DEBIT, date(2026, 5, 1), TODAY)
    assert [t.amount for t in pool] == [Decimal("10")]


def test_distinct_months_bounded_by_lookback():
    transactions = [txn(date(2026, month, 15), "100") for month in range(1, 11)]
    [fig] = analyze_direction(transactions, Direction.DEBIT, 6, TODAY)
    assert fig.stats.months_of_data == 6
    assert fig.stats.distinct_months == {
        "2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10",
    }


def test_aggregate_groups_by_category_and_defaults_name():
    transactions = [
        txn(date(2026, 9, 1), "10", category_id=1, category_name="Office Supplies"),
        txn(date(2026, 9, 2), "20", category_id=2, category_name=None),
        txn(date(2026, 10, 2), "30", category_id=1, category_name="Office Supplies"),
    ]
    stats = {s.category_id: s for s in aggregate_by_category(transactions)}
    assert stats[1].amounts == [Decimal("10"), Decimal("30")]
    assert stats[1].months_of_data == 2
    assert stats[2].category_name == "Unknown"


def test_non_positive_average_is_dropped():
    stats = CategoryStatistics(category_id=5, category_name="Refunds")
    stats.add(txn(date(2026, 9, 1), "0", category_id=5))
    assert stats.variance_percentage == Decimal("100")
    assert summarize_categories([stats]) == []


def test_empty_statistics_do_not_divide_by_zero():
    stats = CategoryStatistics(category_id=5, category_name="Empty")
    assert stats.monthly_average == Decimal("0")
    assert summarize_categories([stats]) == []


@pytest.mark.parametrize(
    "months, variance_pct, expected",
    [
        (4, "9.99", Confidence.HIGH),
        (12, "0", Confidence.HIGH),
        (4, "10", Confidence.MEDIUM),
        (3, "29.99", Confidence.MEDIUM),
        (3, "5", Confidence.MEDIUM),
        (3, "30", Confidence.LOW),
        (2, "0", Confidence.LOW),
        (6, "100", Confidence.LOW),
    ],
)
def test_score_confidence_table(months, variance_pct, expected):
    assert score_confidence(months, Decimal(variance_pct)) == expected


def test_confidence_never_decreases_with_more_months():
    rank = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}
    for pct in ["0", "5", "9.99", "10", "20", "29.99", "30", "50", "100"]:
        tiers = [rank[score_confidence(months, Decimal(pct))] for months in range(0, 13)]
        assert tiers == sorted(tiers), pct


def test_arithmetic_failure_skips_only_that_category():
    broken = CategoryStatistics(category_id=5, category_name="Corrupted")
    broken.add(txn(date(2026, 9, 1), "10", category_id=5))
    broken.amounts.append(Decimal("sNaN"))
    healthy = aggregate_by_category(office_supplies_history())

    with capture_logs() as logs:
        figures = summarize_categories([broken, *healthy])

    assert [f.stats.category_name for f in figures] == ["Office Supplies"]
    [entry] = [e for e in logs if e["event"] == "category_stats_skipped"]
    assert entry["log_level"] == "warning"
    assert entry["category_id"] == 5
