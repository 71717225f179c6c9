"""
GET /admin                 — admin panel (admins only)
PUT /bugs/{id}/assign      — assign a bug to a developer
PUT /bugs/{id}/approve     — approve a resolved bug
"""
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from bugtracker.models.bug_report import BugStatus
from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.admin_panel import AdminPanelView, assign_bug, build_admin_panel
from bugtracker.views.bug_list import change_status
from bugtracker.api.bugs import BugMutationResponse
from bugtracker.api.session import get_cache, get_client, get_session, raise_for_rejection

router = APIRouter(tags=["Admin"])


class AssignRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    developer_id: Optional[Union[int, str]] = Field(default=None, alias="developerId")


@router.get("/admin", response_model=AdminPanelView)
async def get_admin_panel(
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    return await build_admin_panel(session, client, cache)


@router.put("/bugs/{bug_id}/assign", response_model=BugMutationResponse)
async def assign(
    bug_id: str,
    request: AssignRequest,
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    result = await assign_bug(session, client, cache, bug_id, request.developer_id)
    raise_for_rejection(result)
    return BugMutationResponse(bug=result.bug, message=result.message, invalidates=list(result.invalidates))


@router.put("/bugs/{bug_id}/approve", response_model=BugMutationResponse)
async def approve(
    bug_id: str,
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    result = await change_status(session, client, cache, bug_id, BugStatus.APPROVED)
    raise_for_rejection(result)
    return BugMutationResponse(bug=result.bug, message=result.message, invalidates=list(result.invalidates))
