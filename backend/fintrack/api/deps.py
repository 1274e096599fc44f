"""Shared API dependencies."""

from fintrack.core.database import get_db
from fintrack.core.security import get_current_user

__all__ = ["get_db", "get_current_user"]
