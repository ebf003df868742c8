"""Transaction schemas consumed by the prediction engine."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class Direction(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


# Internal movement and financing, never operating income/expense
TRANSFER_TYPE_CODES = frozenset({"TRF_IN", "TRF_OUT"})
DEBT_TYPE_CODES = frozenset({"DEBT_TAKE", "DEBT_PAYBACK"})
EXCLUDED_TYPE_CODES = TRANSFER_TYPE_CODES | DEBT_TYPE_CODES


class TransactionRecord(BaseModel):
    id: int
    date: date
    amount: Decimal  # positive; direction carries the sign
    direction: Direction
    category_id: int | None = None
    category_name: str | None = None
    type_code: str | None = None
    affects_cashflow: bool = True  # False for credit-card charges (debt, not cash)
