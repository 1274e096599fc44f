"""Transaction schemas for request/response validation."""

import re
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from fintrack.services.aggregation import to_utc

# Amounts travel as JSON numbers, not strings.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Free-form label, no fixed taxonomy.
Category = str

# Largest magnitude a Numeric(12, 2) column holds.
MAX_AMOUNT = Decimal("9999999999.99")

ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_day(value: str) -> date_type:
    """Parse a strict ``YYYY-MM-DD`` calendar day."""
    if not ISO_DAY.fullmatch(value):
        raise ValueError("date must be YYYY-MM-DD or an ISO 8601 timestamp")
    return date_type.fromisoformat(value)


def _coerce_day(v):
    """Accept ``YYYY-MM-DD`` as UTC midnight alongside full timestamps.

    A string without a time part must be a calendar day; digits-only
    strings are not read as Unix seconds.
    """
    if isinstance(v, str) and "T" not in v and " " not in v.strip():
        v = parse_day(v.strip())
    if isinstance(v, date_type) and not isinstance(v, datetime):
        return to_utc(v)
    return v


class TransactionCreate(BaseModel):
    date: datetime
    description: str = Field(min_length=1)
    amount: Decimal = Field(ge=-MAX_AMOUNT, le=MAX_AMOUNT)
    category: Category = Field(min_length=1)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return _coerce_day(v)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_utc(v)


class TransactionResponse(BaseModel):
    id: int
    date: datetime
    description: str
    amount: Money
    category: Category

    model_config = {"from_attributes": True}

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return _coerce_day(v)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_utc(v)
