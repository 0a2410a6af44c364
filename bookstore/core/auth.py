# bookstore/core/auth.py
from dataclasses import dataclass
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from bookstore.core.config import get_settings
from bookstore.core.errors import AuthenticationError
from bookstore.repositories.user_repo import UserRepository

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so the legacy userId-in-body flow keeps working.
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """
    The only identity the order workflows see.

    source:
      - "token": verified Bearer JWT
      - "user_id": legacy positive userId supplied by the client
    """

    user_id: int
    role: str = "user"
    source: str = "user_id"


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Bearer access token (JWT).

    Verification:
      - signature (AUTH_JWT_ALG using AUTH_JWT_SECRET)
      - expiration time (exp), when present
      - audience is NOT verified

    Raises:
        AuthenticationError: if token auth is not configured or the token
        is invalid/expired.
    """
    settings = get_settings()
    if not settings.AUTH_JWT_SECRET:
        raise AuthenticationError("Token authentication is not configured")
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_token_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedPrincipal | None:
    """
    Resolve a principal from the Authorization header, if any.

    Returns None when no Bearer token was sent.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid sub in token")

    return AuthenticatedPrincipal(
        user_id=user_id,
        role=payload.get("role", "user"),
        source="token",
    )


def resolve_principal(
    session: Session,
    claimed_user_id: int | None,
    token_principal: AuthenticatedPrincipal | None = None,
) -> AuthenticatedPrincipal:
    """
    Turn the caller's identity claims into an AuthenticatedPrincipal.

    Flow:
      1. Verified token wins; a body/query userId must agree with it.
      2. Otherwise fall back to the legacy rule: userId must be positive.
      3. The user row must exist.

    Raises:
        AuthenticationError: for any failed step.
    """
    if token_principal is not None:
        if claimed_user_id is not None and claimed_user_id != token_principal.user_id:
            raise AuthenticationError("userId does not match the authenticated user")
        principal = token_principal
    else:
        if claimed_user_id is None or claimed_user_id <= 0:
            raise AuthenticationError()
        principal = AuthenticatedPrincipal(user_id=claimed_user_id)

    user = user_repo.get_by_id(session, principal.user_id)
    if user is None:
        raise AuthenticationError("Unknown user")

    if principal.source == "user_id":
        principal = AuthenticatedPrincipal(
            user_id=user.id,
            role=user.role,
            source="user_id",
        )
    return principal
