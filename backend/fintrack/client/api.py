"""Thin async wrapper around the fintrack HTTP API."""

from decimal import Decimal

import httpx
import structlog

from fintrack.config import settings
from fintrack.schemas.analytics import AggregationResponse
from fintrack.schemas.transaction import TransactionResponse
from fintrack.schemas.user import UserResponse
from fintrack.services.aggregation import TimeRange

logger = structlog.get_logger()


class ApiError(Exception):
    """Non-2xx answer from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


class ApiClient:
    """One method per endpoint. Transport errors propagate as ``httpx.HTTPError``."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_url,
            transport=transport,
            timeout=timeout or settings.api_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── Identity ──────────────────────────────────
    async def register(self, name: str, email: str, password: str) -> str:
        data = await self._request(
            "POST", "/api/register", json={"name": name, "email": email, "password": password}
        )
        return data["message"]

    async def login(self, email: str, password: str) -> str:
        data = await self._request("POST", "/api/login", json={"email": email, "password": password})
        return data["token"]

    async def profile(self, token: str) -> UserResponse:
        data = await self._request("GET", "/api/profile", token=token)
        return UserResponse.model_validate(data)

    # ── Transactions ──────────────────────────────
    async def list_transactions(
        self, token: str, time_range: TimeRange | str | None = None
    ) -> list[TransactionResponse]:
        params = {}
        selector = TimeRange.parse(time_range) if time_range is not None else TimeRange.ALL
        if selector is not TimeRange.ALL:
            params["timeRange"] = selector.value
        data = await self._request("GET", "/api/transactions", token=token, params=params)
        return [TransactionResponse.model_validate(item) for item in data]

    async def create_transaction(
        self, token: str, date: str, description: str, amount: Decimal, category: str
    ) -> TransactionResponse:
        payload = {
            "date": date,
            "description": description,
            "amount": str(amount),
            "category": category,
        }
        data = await self._request("POST", "/api/transactions", token=token, json=payload)
        return TransactionResponse.model_validate(data)

    async def summary(
        self, token: str, time_range: TimeRange | str | None = None
    ) -> AggregationResponse:
        params = {"timeRange": TimeRange.parse(time_range).value}
        data = await self._request("GET", "/api/transactions/summary", token=token, params=params)
        return AggregationResponse.model_validate(data)

    # ── Internals ─────────────────────────────────
    async def _request(self, method: str, path: str, token: str | None = None, **kwargs):
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = await self._client.request(method, path, headers=headers, **kwargs)
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("error") if isinstance(body, dict) else None
        logger.info("API request failed", method=method, path=path, status=response.status_code)
        raise ApiError(response.status_code, str(message or response.reason_phrase))
