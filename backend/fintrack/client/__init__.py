"""Python client for the fintrack API: session handling, dashboard and forms."""

from fintrack.client.api import ApiClient, ApiError
from fintrack.client.dashboard import Dashboard
from fintrack.client.forms import DraftValidationError, TransactionDraft, TransactionForm
from fintrack.client.session import Session, SessionManager, TokenStore

__all__ = [
    "ApiClient",
    "ApiError",
    "Dashboard",
    "DraftValidationError",
    "Session",
    "SessionManager",
    "TokenStore",
    "TransactionDraft",
    "TransactionForm",
]
