"""
Request Dependencies
====================
Builds the per-request UserSession, backend client and cache handle, and
maps lifecycle rejections onto HTTP errors.

Session headers:
    Authorization   — "Bearer <token>" issued by the login endpoint
    X-User-Role     — customer / developer / admin
    X-Username      — display name

A missing or unknown role answers 401 with Location pointing at the login
entry point.
"""
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException, Request

from bugtracker.core.config import API_BASE_URL, REQUEST_TIMEOUT
from bugtracker.core.constants import LOGIN_PATH
from bugtracker.models.session import UserSession, parse_role
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.lifecycle import TransitionResult
from bugtracker.services.query_cache import QueryCache
from bugtracker.utils.rejection_reasons import (
    INVALID_TARGET,
    INVALID_TRANSITION,
    NETWORK_FAILURE,
    UNAUTHORIZED,
)

REJECTION_STATUS_CODES = {
    UNAUTHORIZED: 403,
    INVALID_TRANSITION: 409,
    INVALID_TARGET: 422,
    NETWORK_FAILURE: 502,
}


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def get_session(
    authorization: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_username: Optional[str] = Header(default=None),
) -> UserSession:
    role = parse_role(x_user_role)
    if role is None:
        raise HTTPException(
            status_code=401,
            detail="Please log in to continue.",
            headers={"Location": LOGIN_PATH},
        )
    return UserSession(role=role, username=x_username or "", token=bearer_token(authorization))


async def get_client(session: UserSession = Depends(get_session)) -> AsyncIterator[BugTrackerClient]:
    async with BugTrackerClient(base_url=API_BASE_URL, token=session.token, timeout=REQUEST_TIMEOUT) as client:
        yield client


def get_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache


def raise_for_rejection(result: TransitionResult) -> None:
    """Raise the HTTPException matching a rejected result; no-op when accepted."""
    if result.ok:
        return
    raise HTTPException(
        status_code=REJECTION_STATUS_CODES.get(result.reason, 400),
        detail={"reason": result.reason, "message": result.message},
    )
