"""
GET  /bugs              — bug list with per-row actions
GET  /bugs/new          — submission form options
POST /bugs              — submit a bug report (customers)
PUT  /bugs/{id}/status  — move a bug to its next status
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bugtracker.models.bug_report import BugReport, BugStatus, NewBugReport
from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.bug_form import BugFormView, build_bug_form, submit_bug
from bugtracker.views.bug_list import BugListView, build_bug_list, change_status
from bugtracker.api.session import get_cache, get_client, get_session, raise_for_rejection

router = APIRouter(prefix="/bugs", tags=["Bugs"])


class StatusChangeRequest(BaseModel):
    status: BugStatus


class BugMutationResponse(BaseModel):
    bug: BugReport | None = None
    message: str = ""
    invalidates: list[str] = []


@router.get("", response_model=BugListView)
async def list_bugs(
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    return await build_bug_list(session, client, cache)


@router.get("/new", response_model=BugFormView)
async def bug_form(session: UserSession = Depends(get_session)):
    return build_bug_form()


@router.post("", response_model=BugMutationResponse, status_code=201)
async def create_bug(
    payload: NewBugReport,
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    result = await submit_bug(session, client, cache, payload)
    raise_for_rejection(result)
    return BugMutationResponse(bug=result.bug, message=result.message, invalidates=list(result.invalidates))


@router.put("/{bug_id}/status", response_model=BugMutationResponse)
async def update_status(
    bug_id: str,
    request: StatusChangeRequest,
    session: UserSession = Depends(get_session),
    client: BugTrackerClient = Depends(get_client),
    cache: QueryCache = Depends(get_cache),
):
    result = await change_status(session, client, cache, bug_id, request.status)
    raise_for_rejection(result)
    return BugMutationResponse(bug=result.bug, message=result.message, invalidates=list(result.invalidates))
