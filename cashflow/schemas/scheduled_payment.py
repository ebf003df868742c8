"""Scheduled payment and debt obligation schemas."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class InstanceStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


# Only unpaid instances are still future obligations
OPEN_INSTANCE_STATUSES = frozenset({InstanceStatus.PENDING, InstanceStatus.OVERDUE})


class ScheduledPaymentInstance(BaseModel):
    instance_id: int | None = None
    scheduled_payment_id: int
    category_id: int | None = None
    due_date: date
    amount: Decimal
    status: InstanceStatus = InstanceStatus.PENDING
    contract_name: str | None = None
    payment_type: str | None = None  # primary, rent, utilities, ...
    payee_name: str | None = None


class ScheduledPaymentLine(BaseModel):
    """A scheduled instance as shown in a projected month."""
    scheduled_payment_id: int
    contract_name: str
    payment_type: str | None = None
    payee_name: str
    category_id: int | None = None
    amount: Decimal
    due_date: date
    status: InstanceStatus


class DebtPayment(BaseModel):
    """Loan obligation due in a projected month (supplied by the loan scheduler)."""
    loan_name: str = "Loan Receivable"
    borrower_name: str = "Unknown"
    type: str = "Loan Due"
    due_date: date
    amount: Decimal
    status: str = "active"
