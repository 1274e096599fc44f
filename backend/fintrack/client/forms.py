"""New-transaction form: draft validation and submission."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation

import httpx
import structlog

from fintrack.client.api import ApiClient, ApiError
from fintrack.client.session import Session
from fintrack.schemas.transaction import MAX_AMOUNT, TransactionResponse, parse_day

logger = structlog.get_logger()


class DraftValidationError(ValueError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


@dataclass(frozen=True)
class TransactionDraft:
    """Raw form input, every field as typed."""

    date: str = ""
    description: str = ""
    amount: str = ""
    category: str = ""

    def validate(self) -> dict:
        """Return the submission payload or raise :class:`DraftValidationError`."""
        errors = {f.name: "required" for f in fields(self) if not getattr(self, f.name).strip()}

        if "date" not in errors and not _is_iso_date(self.date.strip()):
            errors["date"] = "not a valid date"

        amount = None
        if "amount" not in errors:
            try:
                amount = Decimal(self.amount.strip())
            except InvalidOperation:
                errors["amount"] = "not a number"
            else:
                if not amount.is_finite():
                    errors["amount"] = "not a number"
                elif abs(amount) > MAX_AMOUNT:
                    errors["amount"] = "out of range"

        if errors:
            raise DraftValidationError(errors)

        return {
            "date": self.date.strip(),
            "description": self.description.strip(),
            "amount": amount,
            "category": self.category.strip(),
        }


def _is_iso_date(value: str) -> bool:
    """Only ``YYYY-MM-DD``, the format a date picker produces."""
    try:
        parse_day(value)
    except ValueError:
        return False
    return True


class TransactionForm:
    """Submits drafts under a session; ``on_saved`` re-fetches the list."""

    def __init__(
        self,
        api: ApiClient,
        session: Session,
        on_saved: Callable[[], Awaitable[object]] | None = None,
    ):
        self.api = api
        self.session = session
        self.on_saved = on_saved
        self.draft = TransactionDraft()
        self.error: str | None = None

    def update(self, **values: str) -> TransactionDraft:
        self.draft = replace(self.draft, **values)
        return self.draft

    async def submit(self) -> TransactionResponse | None:
        """Validate, post and refresh. The draft survives any failure."""
        try:
            payload = self.draft.validate()
        except DraftValidationError as e:
            self.error = str(e)
            return None

        try:
            created = await self.api.create_transaction(self.session.token, **payload)
        except ApiError as e:
            self.error = e.message
            return None
        except httpx.HTTPError:
            logger.exception("Failed to add transaction")
            self.error = "Failed to add transaction"
            return None

        self.draft = TransactionDraft()
        self.error = None
        if self.on_saved is not None:
            await self.on_saved()
        return created
