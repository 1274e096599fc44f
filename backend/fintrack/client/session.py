"""Client-side session: the bearer token, where it is kept, and its lifecycle.

A :class:`Session` exists only while the user is authenticated. It is
created on login (or when a stored token is accepted by ``/api/profile``)
and dropped on logout or on any failed profile fetch.
"""

import json
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

from fintrack.client.api import ApiClient, ApiError
from fintrack.config import settings
from fintrack.schemas.user import UserResponse

logger = structlog.get_logger()


@dataclass(frozen=True)
class Session:
    token: str
    user: UserResponse | None = None


class TokenStore:
    """Keeps a single bearer token in a small JSON file."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path or settings.token_path)

    def load(self) -> str | None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Unreadable token file, ignoring", path=str(self.path))
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionManager:
    def __init__(self, api: ApiClient, store: TokenStore):
        self.api = api
        self.store = store
        self.session: Session | None = None
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    async def register(self, name: str, email: str, password: str) -> bool:
        """Create an account. Does not log in."""
        try:
            await self.api.register(name, email, password)
        except ApiError as e:
            self.error = e.message
            return False
        except httpx.HTTPError:
            logger.exception("Registration request failed")
            self.error = "Failed to register"
            return False
        self.error = None
        return True

    async def login(self, email: str, password: str) -> Session | None:
        try:
            token = await self.api.login(email, password)
        except ApiError as e:
            self.error = e.message
            return None
        except httpx.HTTPError:
            logger.exception("Login request failed")
            self.error = "Failed to login"
            return None

        self.store.save(token)
        self.session = Session(token=token)
        self.error = None
        await self.restore()
        return self.session

    async def restore(self) -> Session | None:
        """Validate the stored token against ``/api/profile``.

        Any failure clears the stored token and ends the session.
        """
        token = self.store.load()
        if not token:
            self.session = None
            return None

        try:
            user = await self.api.profile(token)
        except ApiError as e:
            logger.info("Profile fetch rejected, logging out", status=e.status_code)
            self.logout()
            return None
        except httpx.HTTPError:
            logger.exception("Failed to fetch user data")
            self.logout()
            return None

        self.session = Session(token=token, user=user)
        return self.session

    def logout(self) -> None:
        self.store.clear()
        self.session = None
