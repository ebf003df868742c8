"""Account, receivable and liquidity schemas."""

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field

# Runway figures are unbounded (Decimal("Infinity")) for cash-flow positive entities
UnboundedDecimal = Annotated[Decimal, Field(allow_inf_nan=True)]


class AccountBalance(BaseModel):
    account_id: int
    account_name: str
    account_type: str  # bank, cash, investment, credit_card, credit_line, term_loan, loan_receivable
    current_balance: Decimal = Decimal("0.00")
    is_active: bool = True


class LoanReceivableRecord(BaseModel):
    """Money lent to others (loan disbursement)."""
    loan_disbursement_id: int
    borrower_name: str = "Unknown"
    remaining_balance: Decimal = Decimal("0.00")
    due_date: date | None = None
    status: str = "active"  # active, repaid, written_off


class ReceivableLoan(BaseModel):
    loan_disbursement_id: int
    borrower_name: str
    remaining_balance: Decimal
    due_date: date | None = None
    is_overdue: bool
    days_overdue: int


class LiquidityPosition(BaseModel):
    cash_balance: Decimal
    cash_accounts: list[AccountBalance]
    investment_balance: Decimal
    investment_accounts: list[AccountBalance]
    receivables_balance: Decimal
    receivables: list[ReceivableLoan]
    overdue_receivables: Decimal
    overdue_count: int
    total_liquid_assets: Decimal


class RunwayAnalysis(BaseModel):
    monthly_burn_rate: Decimal
    monthly_income: Decimal
    net_monthly_burn: Decimal
    cash_runway_months: UnboundedDecimal
    liquidity_runway_months: UnboundedDecimal
    quick_ratio: UnboundedDecimal
    will_run_out_of_cash: bool
    cash_depletion_month: str | None = None
    liquidity_buffer: UnboundedDecimal  # extra months bought by liquidating investments + receivables
