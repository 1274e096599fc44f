"""Client tests: session lifecycle, dashboard refresh and the transaction form."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport

from fintrack.client import (
    ApiClient,
    ApiError,
    Dashboard,
    DraftValidationError,
    Session,
    SessionManager,
    TokenStore,
    TransactionDraft,
    TransactionForm,
)
from fintrack.main import app
from fintrack.schemas.transaction import TransactionResponse
from fintrack.services.aggregation import TimeRange


@pytest.fixture
def store(tmp_path):
    return TokenStore(tmp_path / "token.json")


@pytest.fixture
async def api(client):
    """API client talking to the app in-process (shares the test database)."""
    api = ApiClient(base_url="http://test", transport=ASGITransport(app=app))
    yield api
    await api.aclose()


def mock_api(handler) -> ApiClient:
    return ApiClient(base_url="http://test", transport=httpx.MockTransport(handler))


# ── Token store ───────────────────────────────────
def test_token_store_roundtrip(store):
    assert store.load() is None
    store.save("abc")
    assert store.load() == "abc"
    store.clear()
    assert store.load() is None
    store.clear()


def test_token_store_ignores_corrupt_file(store):
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None


# ── Session ───────────────────────────────────────
@pytest.mark.asyncio
async def test_login_creates_session(api, store):
    manager = SessionManager(api, store)
    assert await manager.register("Carol", "carol@example.com", "pw")

    session = await manager.login("carol@example.com", "pw")

    assert manager.is_authenticated
    assert session.user.email == "carol@example.com"
    assert store.load() == session.token


@pytest.mark.asyncio
async def test_login_failure_keeps_session_closed(api, store):
    manager = SessionManager(api, store)
    assert await manager.login("nobody@example.com", "pw") is None
    assert not manager.is_authenticated
    assert manager.error == "Invalid credentials"
    assert store.load() is None


@pytest.mark.asyncio
async def test_restore_with_stored_token(api, store, token):
    store.save(token)
    manager = SessionManager(api, store)
    session = await manager.restore()
    assert session is not None
    assert session.user.name == "Alice"


@pytest.mark.asyncio
async def test_profile_401_clears_token(store):
    def handler(request):
        assert request.url.path == "/api/profile"
        return httpx.Response(401, json={"error": "Invalid token"})

    store.save("expired-token")
    manager = SessionManager(mock_api(handler), store)

    assert await manager.restore() is None
    assert not manager.is_authenticated
    assert store.load() is None


@pytest.mark.asyncio
async def test_profile_network_error_clears_token(store):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    store.save("some-token")
    manager = SessionManager(mock_api(handler), store)

    assert await manager.restore() is None
    assert store.load() is None


@pytest.mark.asyncio
async def test_logout(store):
    store.save("t")
    manager = SessionManager(mock_api(lambda r: httpx.Response(500)), store)
    manager.session = Session(token="t")
    manager.logout()
    assert not manager.is_authenticated
    assert store.load() is None


# ── Draft validation ──────────────────────────────
def test_draft_requires_all_fields():
    draft = TransactionDraft(date="2024-01-01", description="", amount="5", category="food")
    with pytest.raises(DraftValidationError) as exc:
        draft.validate()
    assert exc.value.errors == {"description": "required"}


def test_draft_rejects_whitespace_and_bad_numbers():
    draft = TransactionDraft(date="yesterday", description="  ", amount="five", category="x")
    with pytest.raises(DraftValidationError) as exc:
        draft.validate()
    assert exc.value.errors == {
        "description": "required",
        "date": "not a valid date",
        "amount": "not a number",
    }


def test_draft_converts_amount():
    payload = TransactionDraft("2024-01-01", "Rent", "-850.00", "housing").validate()
    assert payload["amount"] == Decimal("-850.00")


@pytest.mark.parametrize("value", ["20240101", "2024-01-01T10:00:00", "2024-1-1", "2024-02-30"])
def test_draft_only_accepts_calendar_days(value):
    draft = TransactionDraft(date=value, description="Rent", amount="1", category="housing")
    with pytest.raises(DraftValidationError) as exc:
        draft.validate()
    assert exc.value.errors == {"date": "not a valid date"}


def test_draft_rejects_amount_beyond_column_range():
    draft = TransactionDraft("2024-01-01", "Lottery", "1e400", "luck")
    with pytest.raises(DraftValidationError) as exc:
        draft.validate()
    assert exc.value.errors == {"amount": "out of range"}


# ── Form ──────────────────────────────────────────
@pytest.mark.asyncio
async def test_empty_description_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={})

    form = TransactionForm(mock_api(handler), Session(token="t"))
    form.update(date="2024-01-01", description="", amount="10", category="misc")

    assert await form.submit() is None
    assert calls == []
    assert "description" in form.error


@pytest.mark.asyncio
async def test_huge_amount_sets_error_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={})

    form = TransactionForm(mock_api(handler), Session(token="t"))
    draft = form.update(date="2024-01-01", description="Lottery", amount="1e400", category="luck")

    assert await form.submit() is None
    assert calls == []
    assert form.draft == draft
    assert "amount" in form.error


@pytest.mark.asyncio
async def test_amount_is_sent_without_float_rounding():
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(
            201,
            json={
                "id": 1,
                "date": "2024-01-01T00:00:00Z",
                "description": "Bonus",
                "amount": 1234567890.12,
                "category": "income",
            },
        )

    form = TransactionForm(mock_api(handler), Session(token="t"))
    form.update(date="2024-01-01", description="Bonus", amount="1234567890.12", category="income")

    assert await form.submit() is not None
    assert sent[0]["amount"] == "1234567890.12"


@pytest.mark.asyncio
async def test_failed_submit_keeps_draft():
    form = TransactionForm(
        mock_api(lambda r: httpx.Response(500, json={"error": "Failed to add transaction"})),
        Session(token="t"),
    )
    draft = form.update(date="2024-01-01", description="Coffee", amount="-3", category="food")

    assert await form.submit() is None
    assert form.draft == draft
    assert form.error == "Failed to add transaction"


@pytest.mark.asyncio
async def test_submit_refreshes_dashboard(api, token):
    session = Session(token=token)
    now = datetime.now(timezone.utc)
    dashboard = Dashboard(api, session, clock=lambda: now)
    await dashboard.refresh()
    assert dashboard.transactions == []

    form = TransactionForm(api, session, on_saved=dashboard.refresh)
    form.update(
        date=(now - timedelta(days=1)).strftime("%Y-%m-%d"),
        description="Salary",
        amount="2500",
        category="income",
    )
    created = await form.submit()

    assert created.description == "Salary"
    assert form.draft == TransactionDraft()
    assert [t.id for t in dashboard.transactions] == [created.id]
    assert dashboard.aggregation.summary.total_income == Decimal("2500")


# ── Dashboard ─────────────────────────────────────
@pytest.mark.asyncio
async def test_dashboard_defaults_to_week(api, token):
    dashboard = Dashboard(api, Session(token=token))
    assert dashboard.time_range is TimeRange.WEEK
    assert dashboard.range_label == "Last 7 days"


@pytest.mark.asyncio
async def test_dashboard_sends_selector():
    seen = []

    def handler(request):
        seen.append(request.url.params.get("timeRange"))
        return httpx.Response(200, json=[])

    dashboard = Dashboard(mock_api(handler), Session(token="t"))
    await dashboard.refresh()
    await dashboard.set_time_range("year")
    await dashboard.set_time_range("all")

    assert seen == ["week", "year", None]


@pytest.mark.asyncio
async def test_dashboard_error_state():
    dashboard = Dashboard(
        mock_api(lambda r: httpx.Response(500, json={"error": "Failed to fetch transactions"})),
        Session(token="t"),
    )
    assert not await dashboard.refresh()
    assert dashboard.error == "Failed to fetch transactions"


class SlowApi:
    """Answers each list call only when the test releases it."""

    def __init__(self):
        self.pending: list[tuple[asyncio.Event, list]] = []

    async def list_transactions(self, token, time_range):
        gate = asyncio.Event()
        result = [
            TransactionResponse(
                id=len(self.pending) + 1,
                date=datetime.now(timezone.utc),
                description=str(time_range.value),
                amount=Decimal("1"),
                category="x",
            )
        ]
        self.pending.append((gate, result))
        await gate.wait()
        return result


@pytest.mark.asyncio
async def test_stale_response_is_discarded():
    api = SlowApi()
    dashboard = Dashboard(api, Session(token="t"))

    first = asyncio.create_task(dashboard.set_time_range("year"))
    await asyncio.sleep(0)
    second = asyncio.create_task(dashboard.set_time_range("week"))
    await asyncio.sleep(0)

    # Newer request completes first, the older one arrives late.
    api.pending[1][0].set()
    assert await second is True
    api.pending[0][0].set()
    assert await first is False

    assert [t.description for t in dashboard.transactions] == ["week"]


@pytest.mark.asyncio
async def test_validation_errors_reach_the_client_as_messages(api, token):
    with pytest.raises(ApiError) as exc:
        await api.create_transaction(token, "20240101", "Rent", Decimal("1"), "housing")
    assert exc.value.status_code == 422
    assert "date" in exc.value.message
