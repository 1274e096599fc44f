"""Authentication service."""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.exceptions import InvalidCredentialsError, StoreError
from fintrack.core.security import create_access_token, hash_password, verify_password
from fintrack.models.user import User
from fintrack.schemas.user import TokenResponse, UserLogin, UserRegister

logger = structlog.get_logger()


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, data: UserRegister) -> User:
        """Register a new user.

        A duplicate email is reported like any other storage failure.
        """
        try:
            result = await self.db.execute(select(User).where(User.email == data.email))
            if result.scalar_one_or_none():
                logger.info("Registration rejected: email already registered", email=data.email)
                raise StoreError("Registration failed")

            user = User(
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
            )
            self.db.add(user)
            await self.db.flush()
            await self.db.refresh(user)
        except (SQLAlchemyError, ValueError) as e:
            logger.exception("Registration failed", email=data.email)
            raise StoreError("Registration failed") from e

        logger.info("User registered", user_id=user.id)
        return user

    async def login(self, data: UserLogin) -> TokenResponse:
        """Authenticate user and return a bearer token."""
        try:
            result = await self.db.execute(select(User).where(User.email == data.email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception("Login lookup failed")
            raise StoreError("Login failed") from e

        if not user or not verify_password(data.password, user.password_hash):
            raise InvalidCredentialsError()

        return TokenResponse(token=create_access_token(user.id))
