"""End-to-end projection service tests over an in-memory snapshot."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow.config import Settings
from cashflow.core.exceptions import InvalidParameterError, MissingDataError
from cashflow.schemas.projection import HealthStatus, ProjectionSnapshot
from cashflow.services.cash_flow_service import CashFlowProjectionService
from cashflow.services.data_source import SnapshotDataSource
from factories import TODAY, account, txn


@pytest.fixture
def service(source):
    return CashFlowProjectionService(source, Settings())


@pytest.mark.asyncio
async def test_monthly_line_items(service):
    projection = await service.project("entity-1", months_ahead=6, today=TODAY)
    months = {m.month: m for m in projection.projections}
    assert list(months) == ["2026-10", "2026-11", "2026-12", "2027-01", "2027-02", "2027-03"]

    october = months["2026-10"]
    assert october.projected_income == Decimal("5000.00")
    assert {e.category_name: e.amount for e in october.predicted_expenses} == {
        "Office Supplies": Decimal("100.00"),
        "Rent": Decimal("1500.00"),
    }
    assert [b.category_name for b in october.budgets] == ["Marketing"]
    assert [w.variance for w in october.budget_warnings] == [Decimal("20.00")]

    # Rent is fully covered by the lease instance
    november = months["2026-11"]
    assert [e.category_name for e in november.predicted_expenses] == ["Office Supplies"]
    assert november.total_scheduled == Decimal("1500.00")

    assert months["2026-12"].total_debt == Decimal("500.00")
    assert months["2026-12"].total_obligations == Decimal("2300.00")

    february = months["2027-02"]
    office = next(e for e in february.predicted_expenses if e.category_name == "Office Supplies")
    assert office.has_gap is True
    assert office.amount == Decimal("40.00")
    assert office.scheduled_amount == Decimal("60.00")
    assert february.budget_warnings == []

    march = months["2027-03"]
    assert [e.category_name for e in march.predicted_expenses] == ["Rent"]
    assert march.total_scheduled == Decimal("120.00")
    # Office Supplies is scheduled in March, so its budget does not count either
    assert [b.category_name for b in march.budgets] == ["Marketing"]
    assert march.total_obligations == Decimal("1820.00")


@pytest.mark.asyncio
async def test_balances_summary_and_runway(service):
    projection = await service.project("entity-1", months_ahead=6, today=TODAY)
    assert projection.as_of == TODAY
    assert projection.summary.current_balance == Decimal("8000.00")
    assert [m.closing_balance for m in projection.projections] == [
        Decimal("11200.00"),
        Decimal("14400.00"),
        Decimal("17100.00"),
        Decimal("20300.00"),
        Decimal("23500.00"),
        Decimal("26680.00"),
    ]
    assert all(m.health == HealthStatus.SURPLUS for m in projection.projections)

    summary = projection.summary
    assert summary.total_obligations == Decimal("11320.00")
    assert summary.total_projected_income == Decimal("30000.00")
    assert summary.net_projected_change == Decimal("18680.00")
    assert summary.lowest_projected_balance == Decimal("11200.00")
    assert summary.months_until_negative is None

    assert projection.liquidity.cash_balance == Decimal("8000.00")
    assert projection.liquidity.total_liquid_assets == Decimal("18000.00")
    assert projection.runway.monthly_burn_rate == Decimal("1886.67")
    assert projection.runway.cash_runway_months.is_infinite()
    assert projection.runway.will_run_out_of_cash is False


@pytest.mark.asyncio
async def test_explicit_current_balance(service):
    projection = await service.project(
        "entity-1", months_ahead=3, current_balance=Decimal("-4000"), today=TODAY
    )
    assert projection.projections[0].opening_balance == Decimal("-4000")
    assert projection.projections[0].closing_balance == Decimal("-800.00")
    assert projection.projections[0].health == HealthStatus.DEFICIT
    assert projection.summary.months_until_negative == 1


@pytest.mark.asyncio
async def test_defaults_come_from_settings(source):
    service = CashFlowProjectionService(source, Settings(default_months_ahead=3))
    projection = await service.project("entity-1", today=TODAY)
    assert projection.summary.months_ahead == 3


@pytest.mark.asyncio
async def test_projection_is_idempotent(service):
    first = await service.project("entity-1", months_ahead=6, today=TODAY)
    second = await service.project("entity-1", months_ahead=6, today=TODAY)
    assert first == second


@pytest.mark.asyncio
async def test_excluded_categories(service):
    unfiltered = await service.project("entity-1", months_ahead=6, today=TODAY)
    filtered = await service.project(
        "entity-1", months_ahead=6, excluded_categories=["Office Supplies"], today=TODAY
    )
    assert filtered.excluded_categories == ["Office Supplies"]
    deltas = [
        f.closing_balance - u.closing_balance
        for f, u in zip(filtered.projections, unfiltered.projections)
    ]
    assert deltas == [
        Decimal("100.00"),
        Decimal("200.00"),
        Decimal("300.00"),
        Decimal("400.00"),
        Decimal("440.00"),
        Decimal("440.00"),
    ]
    assert all(m.budget_warnings == [] for m in filtered.projections)


@pytest.mark.asyncio
async def test_reapply_exclusions_matches_fresh_projection(service):
    unfiltered = await service.project("entity-1", months_ahead=6, today=TODAY)
    fresh = await service.project(
        "entity-1", months_ahead=6, excluded_categories=["Office Supplies"], today=TODAY
    )
    assert service.reapply_exclusions(unfiltered, ["Office Supplies"]) == fresh
    assert service.reapply_exclusions(unfiltered, []) == unfiltered


@pytest.mark.asyncio
async def test_changing_exclusions_restores_held_back_expenses(service):
    unfiltered = await service.project("entity-1", months_ahead=6, today=TODAY)
    office_excluded = await service.project(
        "entity-1", months_ahead=6, excluded_categories=["Office Supplies"], today=TODAY
    )
    rent_excluded = await service.project(
        "entity-1", months_ahead=6, excluded_categories=["Rent"], today=TODAY
    )

    assert service.reapply_exclusions(office_excluded, []) == unfiltered
    assert service.reapply_exclusions(office_excluded, ["Rent"]) == rent_excluded

    october = office_excluded.projections[0]
    assert [e.category_name for e in october.excluded_expenses] == ["Office Supplies"]
    assert [w.category_name for w in october.excluded_budget_warnings] == ["Office Supplies"]


@pytest.mark.asyncio
async def test_running_out_of_cash():
    snapshot = ProjectionSnapshot(
        transactions=[txn(date(2026, m, 1), "1500.00", category_id=7, category_name="Rent") for m in range(5, 11)],
        accounts=[account(1, "bank", "1000.00")],
    )
    service = CashFlowProjectionService(SnapshotDataSource(snapshot), Settings())
    projection = await service.project("entity-1", months_ahead=3, today=TODAY)

    assert projection.projections[0].closing_balance == Decimal("-500.00")
    assert projection.summary.months_until_negative == 1
    runway = projection.runway
    assert runway.net_monthly_burn == Decimal("1500.00")
    assert runway.cash_runway_months == Decimal("0.67")
    assert runway.will_run_out_of_cash is True
    assert runway.cash_depletion_month == "2026-10"


@pytest.mark.asyncio
@pytest.mark.parametrize("field, collection", [("transactions", "Transactions"), ("accounts", "Accounts")])
async def test_required_collections(snapshot, field, collection):
    snapshot = snapshot.model_copy(update={field: None})
    service = CashFlowProjectionService(SnapshotDataSource(snapshot), Settings())
    with pytest.raises(MissingDataError) as exc_info:
        await service.project("entity-1", today=TODAY)
    assert exc_info.value.collection == collection


@pytest.mark.asyncio
async def test_optional_collections_default_to_empty(snapshot):
    snapshot = snapshot.model_copy(
        update={"scheduled_instances": None, "debt_payments": None, "budgets": None, "receivables": None}
    )
    service = CashFlowProjectionService(SnapshotDataSource(snapshot), Settings())
    projection = await service.project("entity-1", months_ahead=2, today=TODAY)
    assert all(m.total_scheduled == 0 and m.total_budgets == 0 for m in projection.projections)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs, parameter",
    [
        ({"months_ahead": 0}, "months_ahead"),
        ({"months_ahead": 37}, "months_ahead"),
        ({"months_back": 0}, "months_back"),
    ],
)
async def test_invalid_parameters(service, kwargs, parameter):
    with pytest.raises(InvalidParameterError) as exc_info:
        await service.project("entity-1", today=TODAY, **kwargs)
    assert exc_info.value.parameter == parameter
