"""
GET /dashboard
Welcome data, bug counts and the quick actions for the session's role.
"""
from fastapi import APIRouter, Depends

from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.dashboard import DashboardView, build_dashboard
from bugtracker.api.session import get_cache, get_client, get_session

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard", response_model=DashboardView)
async def get_dashboard(
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    return await build_dashboard(session, client, cache)
