"""Scheduled-obligation resolver.

Tells, for a month, how much of each category's spending is already
represented by an unpaid scheduled payment instance. The expense predictor
subtracts these amounts so that the same money is not counted twice.
"""

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from cashflow.schemas.scheduled_payment import OPEN_INSTANCE_STATUSES, ScheduledPaymentInstance
from cashflow.services.data_source import ProjectionDataSource
from cashflow.utils.dates import month_bounds


def instances_due_in_month(
    instances: Iterable[ScheduledPaymentInstance], month: str
) -> list[ScheduledPaymentInstance]:
    """Pending/overdue instances whose due date falls inside the month."""
    start, end = month_bounds(month)
    return [
        inst for inst in instances
        if inst.status in OPEN_INSTANCE_STATUSES and start <= inst.due_date <= end
    ]


def scheduled_amounts_by_category(
    instances: Iterable[ScheduledPaymentInstance], month: str
) -> dict[int, Decimal]:
    amounts: dict[int, Decimal] = defaultdict(Decimal)
    for inst in instances_due_in_month(instances, month):
        if inst.category_id is not None:
            amounts[inst.category_id] += inst.amount
    return dict(amounts)


def categories_with_scheduled_payments(
    instances: Iterable[ScheduledPaymentInstance], month: str
) -> set[int]:
    return {
        inst.category_id
        for inst in instances_due_in_month(instances, month)
        if inst.category_id is not None
    }


class ScheduledObligationResolver:
    """Entity-scoped lookups backed by the injected data source."""

    def __init__(self, source: ProjectionDataSource):
        self.source = source

    async def _instances(self, entity_id: str, month: str) -> list[ScheduledPaymentInstance]:
        start, end = month_bounds(month)
        return await self.source.list_scheduled_instances(entity_id, start, end) or []

    async def amounts_by_category(self, entity_id: str, month: str) -> dict[int, Decimal]:
        return scheduled_amounts_by_category(await self._instances(entity_id, month), month)

    async def scheduled_categories(self, entity_id: str, month: str) -> set[int]:
        return categories_with_scheduled_payments(await self._instances(entity_id, month), month)
