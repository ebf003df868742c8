"""Data access contract for the projection engine.

The engine never talks to the database itself: a ``ProjectionDataSource`` is
handed to each service (the way ``AsyncSession`` is handed to the CRUD
services) and every collection is read once, up front. A method returns
``None`` when the collection could not be loaded.
"""

from datetime import date
from typing import Protocol

from cashflow.schemas.account import AccountBalance, LoanReceivableRecord
from cashflow.schemas.budget import BudgetRecord
from cashflow.schemas.projection import ProjectionSnapshot
from cashflow.schemas.scheduled_payment import DebtPayment, ScheduledPaymentInstance
from cashflow.schemas.transaction import TransactionRecord


class ProjectionDataSource(Protocol):
    async def list_transactions(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[TransactionRecord] | None: ...

    async def list_scheduled_instances(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[ScheduledPaymentInstance] | None: ...

    async def list_debt_payments(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[DebtPayment] | None: ...

    async def list_budgets(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[BudgetRecord] | None: ...

    async def list_accounts(self, entity_id: str) -> list[AccountBalance] | None: ...

    async def list_receivables(self, entity_id: str) -> list[LoanReceivableRecord] | None: ...


class SnapshotDataSource:
    """Serves one entity's pre-fetched snapshot, applying the date filters."""

    def __init__(self, snapshot: ProjectionSnapshot):
        self.snapshot = snapshot

    async def list_transactions(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[TransactionRecord] | None:
        if self.snapshot.transactions is None:
            return None
        return [t for t in self.snapshot.transactions if date_from <= t.date <= date_to]

    async def list_scheduled_instances(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[ScheduledPaymentInstance] | None:
        if self.snapshot.scheduled_instances is None:
            return None
        return [
            inst for inst in self.snapshot.scheduled_instances
            if date_from <= inst.due_date <= date_to
        ]

    async def list_debt_payments(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[DebtPayment] | None:
        if self.snapshot.debt_payments is None:
            return None
        return [p for p in self.snapshot.debt_payments if date_from <= p.due_date <= date_to]

    async def list_budgets(
        self, entity_id: str, date_from: date, date_to: date
    ) -> list[BudgetRecord] | None:
        if self.snapshot.budgets is None:
            return None
        # Any overlap with the window, inactive budgets dropped
        return [
            b for b in self.snapshot.budgets
            if b.is_active and b.start_date <= date_to and b.end_date >= date_from
        ]

    async def list_accounts(self, entity_id: str) -> list[AccountBalance] | None:
        if self.snapshot.accounts is None:
            return None
        return [a for a in self.snapshot.accounts if a.is_active]

    async def list_receivables(self, entity_id: str) -> list[LoanReceivableRecord] | None:
        return self.snapshot.receivables
