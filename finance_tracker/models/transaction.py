"""
Income and expense transaction models.
"""

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from ..core.clock import month_key, utcnow
from .category import TransactionType


class TransactionCreate(BaseModel):
    """Request model for recording a transaction."""

    user_id: str
    amount: float = Field(..., gt=0)
    type: TransactionType
    category_id: str | None = None
    merchant: str | None = None
    description: str | None = None
    date: dt.date


class Transaction(BaseModel):
    """
    Transaction model for database storage.

    ``date`` is stored as a YYYY-MM-DD string and ``month`` as YYYY-MM so
    monthly aggregation is a plain equality filter.
    """

    transaction_id: str = Field(..., description="Unique transaction identifier")
    user_id: str = Field(..., description="Owner of the transaction")
    amount: float = Field(..., gt=0, description="Amount in base currency")
    type: TransactionType = Field(..., description="income or expense")
    category_id: str | None = Field(default=None, description="FK to categories")
    merchant: str | None = None
    description: str | None = None
    date: str = Field(..., description="Calendar date (YYYY-MM-DD)")
    month: str = Field(..., description="Calendar month (YYYY-MM)")
    created_at: dt.datetime = Field(default_factory=utcnow)

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: object) -> object:
        if isinstance(value, dt.datetime):
            return value.date().isoformat()
        if isinstance(value, dt.date):
            return value.isoformat()
        return value

    @classmethod
    def from_create(
        cls,
        transaction_id: str,
        data: TransactionCreate,
        created_at: dt.datetime | None = None,
    ) -> "Transaction":
        """Build a storable transaction, deriving the month key from the date."""
        return cls(
            transaction_id=transaction_id,
            user_id=data.user_id,
            amount=data.amount,
            type=data.type,
            category_id=data.category_id,
            merchant=data.merchant,
            description=data.description,
            date=data.date.isoformat(),
            month=month_key(data.date),
            created_at=created_at or utcnow(),
        )
