"""SQLAlchemy models."""

from fintrack.models.base import Base
from fintrack.models.transaction import Transaction
from fintrack.models.user import User

__all__ = [
    "Base",
    "User",
    "Transaction",
]
