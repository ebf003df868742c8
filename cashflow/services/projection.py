"""Monthly projection roll-up.

Each projected month stacks its obligations in priority order:

    1. debt payments and scheduled payment instances due that month
    2. predicted expenses (historical averages net of scheduled amounts)
    3. budgets, only for categories neither scheduled nor predicted that month

and the balance is walked sequentially: a month opens on the previous
month's closing balance. Every function here is pure; an exclusion change
re-walks the whole sequence from the current balance.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from cashflow.schemas.analytics import IncomeBreakdown, PredictedExpense
from cashflow.schemas.budget import BudgetLine, BudgetRecord, BudgetWarning
from cashflow.schemas.projection import HealthStatus, MonthlyProjection, ProjectionSummary
from cashflow.schemas.scheduled_payment import (
    DebtPayment,
    ScheduledPaymentInstance,
    ScheduledPaymentLine,
)
from cashflow.services.scheduled_obligations import instances_due_in_month
from cashflow.utils.dates import add_months, first_of_month, in_month, month_bounds, month_key, month_label
from cashflow.utils.money import ZERO, to_money, total


def month_keys(start: date, months_ahead: int) -> list[str]:
    first = first_of_month(start)
    return [month_key(add_months(first, offset)) for offset in range(months_ahead)]


def debt_payments_due(debts: Iterable[DebtPayment], month: str) -> list[DebtPayment]:
    return sorted((d for d in debts if in_month(d.due_date, month)), key=lambda d: d.due_date)


def scheduled_lines_due(
    instances: Iterable[ScheduledPaymentInstance], month: str
) -> list[ScheduledPaymentLine]:
    due = sorted(instances_due_in_month(instances, month), key=lambda inst: inst.due_date)
    return [
        ScheduledPaymentLine(
            scheduled_payment_id=inst.scheduled_payment_id,
            contract_name=inst.contract_name or "Unknown",
            payment_type=inst.payment_type,
            payee_name=inst.payee_name or "Unknown",
            category_id=inst.category_id,
            amount=inst.amount,
            due_date=inst.due_date,
            status=inst.status,
        )
        for inst in due
    ]


def budgets_active_in_month(budgets: Iterable[BudgetRecord], month: str) -> list[BudgetRecord]:
    start, end = month_bounds(month)
    return [b for b in budgets if b.is_active and b.start_date <= end and b.end_date >= start]


def select_budgets_for_month(
    budgets: Iterable[BudgetRecord],
    month: str,
    scheduled_category_ids: set[int],
    predicted_category_names: set[str],
) -> list[BudgetLine]:
    """Priority 3: budgets for categories not already scheduled or predicted."""
    return [
        BudgetLine(
            category_id=b.category_id,
            category_name=b.category_name,
            budget_amount=b.budget_amount,
            estimated_spend=b.budget_amount,
        )
        for b in budgets_active_in_month(budgets, month)
        if b.category_id not in scheduled_category_ids
        and b.category_name not in predicted_category_names
    ]


def _by_category(items):
    return sorted(items, key=lambda item: item.category_name)


def build_month(
    month: str,
    projected_income: Decimal,
    income_breakdown: list[IncomeBreakdown],
    debt_payments: list[DebtPayment],
    scheduled_payments: list[ScheduledPaymentLine],
    predicted_expenses: list[PredictedExpense],
    budgets: list[BudgetLine],
    budget_warnings: list[BudgetWarning] | None = None,
) -> MonthlyProjection:
    """One month's line items and totals; balances are set by ``roll_balances``."""
    total_debt = total(p.amount for p in debt_payments)
    total_scheduled = total(p.amount for p in scheduled_payments)
    total_predicted = total(e.amount for e in predicted_expenses)
    total_budgets = total(b.estimated_spend for b in budgets)
    return MonthlyProjection(
        month=month,
        month_label=month_label(month),
        projected_income=projected_income,
        income_breakdown=income_breakdown,
        debt_payments=debt_payments,
        scheduled_payments=scheduled_payments,
        predicted_expenses=_by_category(predicted_expenses),
        budgets=budgets,
        budget_warnings=_by_category(budget_warnings or []),
        total_debt=total_debt,
        total_scheduled=total_scheduled,
        total_predicted=total_predicted,
        total_budgets=total_budgets,
        total_obligations=total_debt + total_scheduled + total_predicted + total_budgets,
    )


def classify_health(
    closing_balance: Decimal, total_obligations: Decimal, buffer_months: Decimal
) -> HealthStatus:
    """deficit below zero; tight when less than ``buffer_months`` of this month's obligations remain."""
    if closing_balance < ZERO:
        return HealthStatus.DEFICIT
    if closing_balance < total_obligations * buffer_months:
        return HealthStatus.TIGHT
    return HealthStatus.SURPLUS


def roll_balances(
    months: Sequence[MonthlyProjection],
    current_balance: Decimal,
    buffer_months: Decimal = Decimal("1"),
) -> list[MonthlyProjection]:
    running = current_balance
    walked = []
    for month in sorted(months, key=lambda m: m.month):
        opening = running
        closing = opening + month.projected_income - month.total_obligations
        running = closing
        walked.append(
            month.model_copy(
                update={
                    "opening_balance": opening,
                    "closing_balance": closing,
                    "health": classify_health(closing, month.total_obligations, buffer_months),
                }
            )
        )
    return walked


def apply_exclusions(
    projections: Sequence[MonthlyProjection],
    excluded_categories: Iterable[str],
    current_balance: Decimal,
    buffer_months: Decimal = Decimal("1"),
) -> list[MonthlyProjection]:
    """Hold back predicted expenses of the excluded categories and re-walk the balances.

    Items held back by an earlier call are put back first, so the result only
    depends on the new exclusion set: an empty set restores the full projection.
    """
    excluded = set(excluded_categories)
    filtered = []
    for month in projections:
        expenses = _by_category(month.predicted_expenses + month.excluded_expenses)
        warnings = _by_category(month.budget_warnings + month.excluded_budget_warnings)
        kept = [e for e in expenses if e.category_name not in excluded]
        total_predicted = total(e.amount for e in kept)
        filtered.append(
            month.model_copy(
                update={
                    "predicted_expenses": kept,
                    "excluded_expenses": [e for e in expenses if e.category_name in excluded],
                    "budget_warnings": [w for w in warnings if w.category_name not in excluded],
                    "excluded_budget_warnings": [w for w in warnings if w.category_name in excluded],
                    "total_predicted": total_predicted,
                    "total_obligations": (
                        month.total_debt + month.total_scheduled + total_predicted + month.total_budgets
                    ),
                }
            )
        )
    return roll_balances(filtered, current_balance, buffer_months)


def summarize_projections(
    projections: Sequence[MonthlyProjection], current_balance: Decimal
) -> ProjectionSummary:
    total_obligations = total(p.total_obligations for p in projections)
    total_income = total(p.projected_income for p in projections)
    first_negative = next(
        (index for index, p in enumerate(projections, start=1) if p.closing_balance < ZERO),
        None,
    )
    return ProjectionSummary(
        current_balance=current_balance,
        months_ahead=len(projections),
        total_obligations=total_obligations,
        total_projected_income=total_income,
        net_projected_change=total_income - total_obligations,
        lowest_projected_balance=min(
            (p.closing_balance for p in projections), default=current_balance
        ),
        months_until_negative=first_negative,
    )


def average_monthly_obligations(projections: Sequence[MonthlyProjection]) -> Decimal:
    """Burn rate used for the runway: mean total obligations over the horizon."""
    if not projections:
        return ZERO
    return to_money(total(p.total_obligations for p in projections) / len(projections))
