"""
Bug List View
=============
Table of the bugs visible to the session, each row carrying the status
transitions the session's role may trigger on it:

    developer   OPEN → "Start Working", IN_PROGRESS → "Mark Resolved"
    admin       RESOLVED → "Approve Fix"
    customer    (read only)

change_status() is the single entry point for status changes from any view.
"""
import logging
from typing import Optional

from pydantic import BaseModel

from bugtracker.core.constants import (
    NO_BUGS_NOTICE,
    TRANSITION_LABELS,
    UNASSIGNED_LABEL,
    status_color,
)
from bugtracker.models.bug_report import BugId, BugReport, BugStatus, Severity
from bugtracker.models.session import Role, UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.lifecycle import BugLifecycleController, TransitionResult, available_transitions
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.queries import BugNotFound, apply_invalidation, find_bug, load_bugs, load_fresh_bugs

logger = logging.getLogger(__name__)


class BugAction(BaseModel):
    label: str
    status: BugStatus


class BugRow(BaseModel):
    id: BugId
    title: str
    severity: Severity
    status: BugStatus
    status_color: str
    assigned_to: str
    actions: list[BugAction]


class BugListView(BaseModel):
    role: Role
    bugs: list[BugRow]
    notice: str = ""


def actions_for(bug: BugReport, role: Role) -> list[BugAction]:
    return [
        BugAction(label=TRANSITION_LABELS[status], status=status)
        for status in available_transitions(bug.status, role)
    ]


def bug_row(bug: BugReport, role: Role) -> BugRow:
    return BugRow(
        id=bug.id,
        title=bug.title,
        severity=bug.severity,
        status=bug.status,
        status_color=status_color(bug.status),
        assigned_to=bug.assigned_to or UNASSIGNED_LABEL,
        actions=actions_for(bug, role),
    )


async def build_bug_list(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> BugListView:
    bugs = await load_bugs(session, client, cache)
    return BugListView(
        role=session.role,
        bugs=[bug_row(bug, session.role) for bug in bugs],
        notice="" if bugs else NO_BUGS_NOTICE,
    )


async def change_status(
    session: UserSession,
    client: BugTrackerClient,
    cache: QueryCache,
    bug_id: BugId,
    requested: BugStatus,
    controller: Optional[BugLifecycleController] = None,
) -> TransitionResult:
    """Move one bug to ``requested`` as the session's user."""
    bug = find_bug(await load_fresh_bugs(session, client, cache), bug_id)
    if bug is None:
        raise BugNotFound(f"Bug {bug_id} not found")

    controller = controller or BugLifecycleController(store=client)
    result = await controller.apply_transition(bug, requested, session.role)
    apply_invalidation(session, cache, result)
    return result
