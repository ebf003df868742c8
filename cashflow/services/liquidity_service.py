"""Liquidity position and runway analysis."""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_FLOOR, Decimal

import structlog

from cashflow.schemas.account import (
    AccountBalance,
    LiquidityPosition,
    LoanReceivableRecord,
    ReceivableLoan,
    RunwayAnalysis,
)
from cashflow.utils.dates import add_months, month_key
from cashflow.utils.money import CENT, INFINITY, ZERO, total

logger = structlog.get_logger()

CASH_ACCOUNT_TYPES = frozenset({"bank", "cash"})
INVESTMENT_ACCOUNT_TYPES = frozenset({"investment"})


def classify_accounts(
    accounts: Iterable[AccountBalance],
) -> tuple[list[AccountBalance], list[AccountBalance]]:
    """Split active accounts into (cash, investments); debt accounts are left out."""
    cash, investments = [], []
    for account in accounts:
        if not account.is_active:
            continue
        if account.account_type in CASH_ACCOUNT_TYPES:
            cash.append(account)
        elif account.account_type in INVESTMENT_ACCOUNT_TYPES:
            investments.append(account)
    return cash, investments


def analyze_receivables(
    loans: Iterable[LoanReceivableRecord], today: date
) -> list[ReceivableLoan]:
    """Active loans we gave out, flagged overdue when past their due date."""
    receivables = []
    for loan in loans:
        if loan.status != "active":
            continue
        is_overdue = loan.due_date is not None and loan.due_date < today
        receivables.append(
            ReceivableLoan(
                loan_disbursement_id=loan.loan_disbursement_id,
                borrower_name=loan.borrower_name,
                remaining_balance=loan.remaining_balance,
                due_date=loan.due_date,
                is_overdue=is_overdue,
                days_overdue=(today - loan.due_date).days if is_overdue else 0,
            )
        )
    return receivables


def analyze_liquidity_position(
    accounts: Iterable[AccountBalance],
    loans: Iterable[LoanReceivableRecord],
    today: date,
) -> LiquidityPosition:
    cash, investments = classify_accounts(accounts)
    receivables = analyze_receivables(loans, today)
    overdue = [r for r in receivables if r.is_overdue]

    cash_balance = total(a.current_balance for a in cash)
    investment_balance = total(a.current_balance for a in investments)
    receivables_balance = total(r.remaining_balance for r in receivables)

    logger.debug(
        "liquidity_position",
        cash_accounts=len(cash),
        investment_accounts=len(investments),
        receivables=len(receivables),
        overdue=len(overdue),
    )
    return LiquidityPosition(
        cash_balance=cash_balance,
        cash_accounts=cash,
        investment_balance=investment_balance,
        investment_accounts=investments,
        receivables_balance=receivables_balance,
        receivables=receivables,
        overdue_receivables=total(r.remaining_balance for r in overdue),
        overdue_count=len(overdue),
        total_liquid_assets=cash_balance + investment_balance + receivables_balance,
    )


def calculate_runway(
    liquidity: LiquidityPosition,
    monthly_burn_rate: Decimal,
    monthly_income: Decimal,
    months_ahead: int = 6,
    today: date | None = None,
) -> RunwayAnalysis:
    """Months until cash (or all liquid assets) run out at the current net burn.

    A cash-flow positive entity (income covers the burn) has an unbounded
    runway, reported as Decimal("Infinity").
    """
    today = today or date.today()
    net_burn = monthly_burn_rate - monthly_income

    if net_burn <= ZERO:
        return RunwayAnalysis(
            monthly_burn_rate=monthly_burn_rate,
            monthly_income=monthly_income,
            net_monthly_burn=net_burn,
            cash_runway_months=INFINITY,
            liquidity_runway_months=INFINITY,
            quick_ratio=INFINITY,
            will_run_out_of_cash=False,
            cash_depletion_month=None,
            liquidity_buffer=INFINITY,
        )

    cash_runway = liquidity.cash_balance / net_burn
    liquidity_runway = liquidity.total_liquid_assets / net_burn
    quick_ratio = (
        liquidity.total_liquid_assets / monthly_burn_rate if monthly_burn_rate > ZERO else INFINITY
    )
    will_run_out = cash_runway < months_ahead

    depletion_month = None
    if will_run_out:
        # An already negative cash balance is depleted now, not in the past
        whole_months = max(int(cash_runway.to_integral_value(rounding=ROUND_FLOOR)), 0)
        depletion_month = month_key(add_months(today, whole_months))

    cash_months = cash_runway.quantize(CENT)
    liquidity_months = liquidity_runway.quantize(CENT)
    return RunwayAnalysis(
        monthly_burn_rate=monthly_burn_rate,
        monthly_income=monthly_income,
        net_monthly_burn=net_burn,
        cash_runway_months=cash_months,
        liquidity_runway_months=liquidity_months,
        quick_ratio=quick_ratio.quantize(CENT) if quick_ratio.is_finite() else quick_ratio,
        will_run_out_of_cash=will_run_out,
        cash_depletion_month=depletion_month,
        liquidity_buffer=liquidity_months - cash_months,
    )
