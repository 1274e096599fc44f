"""Dashboard view-model: fetched transactions plus their aggregation."""

from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import structlog

from fintrack.client.api import ApiClient, ApiError
from fintrack.client.session import Session
from fintrack.schemas.transaction import TransactionResponse
from fintrack.services.aggregation import Aggregation, TimeRange, aggregate

logger = structlog.get_logger()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Dashboard:
    """Holds the transaction list for a session and derives chart data from it.

    Each fetch is numbered; a response that arrives after a newer fetch was
    started is dropped, so a slow answer for an old range never overwrites
    the current one.
    """

    def __init__(
        self,
        api: ApiClient,
        session: Session,
        clock: Callable[[], datetime] = utcnow,
        time_range: TimeRange | str = TimeRange.WEEK,
    ):
        self.api = api
        self.session = session
        self.clock = clock
        self.time_range = TimeRange.parse(time_range)
        self.transactions: list[TransactionResponse] = []
        self.error: str | None = None
        self._issued = 0

    @property
    def aggregation(self) -> Aggregation:
        return aggregate(self.transactions, self.time_range, self.clock())

    @property
    def range_label(self) -> str:
        return self.time_range.label

    async def set_time_range(self, time_range: TimeRange | str) -> bool:
        self.time_range = TimeRange.parse(time_range)
        return await self.refresh()

    async def refresh(self) -> bool:
        """Re-fetch transactions for the current range.

        Returns True when the response was applied.
        """
        self._issued += 1
        request_no = self._issued
        time_range = self.time_range

        try:
            transactions = await self.api.list_transactions(self.session.token, time_range)
        except ApiError as e:
            return self._fail(request_no, e.message)
        except httpx.HTTPError:
            logger.exception("Failed to fetch transactions")
            return self._fail(request_no, "Failed to fetch transactions")

        if request_no != self._issued:
            logger.debug("Discarding stale transactions response", request=request_no, latest=self._issued)
            return False

        self.transactions = transactions
        self.error = None
        return True

    def _fail(self, request_no: int, message: str) -> bool:
        if request_no == self._issued:
            self.error = message
        return False
