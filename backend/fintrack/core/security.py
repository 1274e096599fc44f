"""Security utilities: password hashing, JWT issuance and validation."""

from datetime import datetime, timedelta, timezone

import bcrypt
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.config import settings
from fintrack.core.database import get_db
from fintrack.core.exceptions import AuthError

logger = structlog.get_logger()


# ── Passwords ─────────────────────────────────────
def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# ── Tokens ────────────────────────────────────────
def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Issue a signed bearer token for ``user_id``."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a bearer token (signature and expiry)."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthError("Invalid token") from e


# ── Auth Dependencies ─────────────────────────────
security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
):
    """FastAPI dependency: validate the bearer token and return the local user."""
    from fintrack.models.user import User

    if credentials is None or not credentials.credentials:
        raise AuthError("Access denied")

    payload = decode_token(credentials.credentials)

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as e:
        raise AuthError("Invalid token") from e

    user = await db.get(User, user_id)
    if user is None:
        logger.info("Token subject no longer exists", user_id=user_id)
        raise AuthError("Invalid token")

    return user
