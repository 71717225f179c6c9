"""
POST /auth/login
POST /auth/logout
Exchanges credentials with the backend for a session, and drops a session's
cached reads on logout.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from bugtracker.core.config import API_BASE_URL, REQUEST_TIMEOUT
from bugtracker.models.session import Role, UserSession
from bugtracker.services.api_client import BugTrackerClient, NetworkFailure
from bugtracker.services.query_cache import QueryCache
from bugtracker.api.session import get_cache, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Please enter both username and password.")
        return v


class LoginResponse(BaseModel):
    token: str
    role: Role
    username: str


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    client = BugTrackerClient(base_url=API_BASE_URL, timeout=REQUEST_TIMEOUT)
    try:
        session = await client.login(request.username.strip(), request.password)
    except NetworkFailure as exc:
        if exc.status_code in (400, 401, 403):
            logger.info("Login refused for %s", request.username)
            raise HTTPException(status_code=401, detail="Invalid username or password.")
        raise

    logger.info("User %s logged in as %s", session.username, session.role.value)
    return LoginResponse(token=session.token, role=session.role, username=session.username)


@router.post("/logout")
async def logout(
    session: UserSession = Depends(get_session),
    cache: QueryCache = Depends(get_cache),
):
    cache.clear(session.cache_scope)
    return {"message": "Logged out"}
