"""Custom exception classes for the application.

Every error leaves the API as ``{"error": <message>}``; see
``fintrack.main`` for the handlers that render them, request validation included.
"""

from fastapi import HTTPException, status


class AuthError(HTTPException):
    """Missing, malformed, expired or otherwise unusable credentials."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password. The two cases are not told apart."""

    def __init__(self):
        super().__init__(detail="Invalid credentials")


class StoreError(HTTPException):
    """A persistence or hashing failure, reported with a fixed message."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )
