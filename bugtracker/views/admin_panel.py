"""
Admin Panel View
================
Admins assign bugs to developers and approve resolved fixes.

Bugs and developers are independent reads; they are fetched concurrently
and the view waits for both before it is built.
"""
import asyncio
import logging
from typing import Optional, Union

from pydantic import BaseModel

from bugtracker.core.constants import ADMIN_ONLY_NOTICE, NO_BUGS_IN_SYSTEM_NOTICE, status_color
from bugtracker.models.bug_report import BugId, BugReport, BugStatus, Severity
from bugtracker.models.developer import Developer
from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.lifecycle import (
    ACTION_ADMIN_PANEL,
    ACTION_ASSIGN_BUG,
    BugLifecycleController,
    TransitionResult,
    can_perform,
)
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.bug_list import BugAction, actions_for
from bugtracker.views.queries import (
    AccessDenied,
    BugNotFound,
    apply_invalidation,
    find_bug,
    load_bugs,
    load_developers,
    load_fresh_bugs,
)

logger = logging.getLogger(__name__)

APPROVAL_APPROVED = "Approved"
APPROVAL_WAITING = "Waiting..."
ASSIGN_PLACEHOLDER = "-- Select Developer --"


class AdminBugRow(BaseModel):
    id: BugId
    title: str
    severity: Severity
    status: BugStatus
    status_color: str
    assigned_to: Optional[str] = None
    assign_placeholder: str
    approval: str = ""
    actions: list[BugAction]


class AdminPanelView(BaseModel):
    bugs: list[AdminBugRow]
    developers: list[Developer]
    notice: str = ""


def _approval_label(bug: BugReport) -> str:
    if bug.status == BugStatus.APPROVED:
        return APPROVAL_APPROVED
    if bug.status == BugStatus.RESOLVED:
        return ""
    return APPROVAL_WAITING


def _require_admin(session: UserSession) -> None:
    if not can_perform(session.role, ACTION_ADMIN_PANEL):
        logger.warning("Admin panel refused for %s (%s)", session.username or "?", session.role.value)
        raise AccessDenied(ADMIN_ONLY_NOTICE)


async def build_admin_panel(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> AdminPanelView:
    _require_admin(session)

    bugs, developers = await asyncio.gather(
        load_bugs(session, client, cache),
        load_developers(session, client, cache),
    )

    rows = [
        AdminBugRow(
            id=bug.id,
            title=bug.title,
            severity=bug.severity,
            status=bug.status,
            status_color=status_color(bug.status),
            assigned_to=bug.assigned_to,
            assign_placeholder=bug.assigned_to or ASSIGN_PLACEHOLDER,
            approval=_approval_label(bug),
            actions=actions_for(bug, session.role),
        )
        for bug in bugs
    ]
    return AdminPanelView(
        bugs=rows,
        developers=list(developers),
        notice="" if bugs else NO_BUGS_IN_SYSTEM_NOTICE,
    )


async def assign_bug(
    session: UserSession,
    client: BugTrackerClient,
    cache: QueryCache,
    bug_id: BugId,
    developer_id: Union[BugId, None],
    controller: Optional[BugLifecycleController] = None,
) -> TransitionResult:
    """Assign one bug to a developer. Role and target checks live in the controller."""
    has_target = developer_id is not None and str(developer_id).strip() != ""
    if has_target and can_perform(session.role, ACTION_ASSIGN_BUG):
        bugs, developers = await asyncio.gather(
            load_fresh_bugs(session, client, cache),
            load_developers(session, client, cache),
        )
    else:
        # The controller refuses before it needs the developer list
        bugs, developers = await load_fresh_bugs(session, client, cache), []
    bug = find_bug(bugs, bug_id)
    if bug is None:
        raise BugNotFound(f"Bug {bug_id} not found")

    controller = controller or BugLifecycleController(store=client)
    result = await controller.assign(bug, developer_id, session.role, developers)
    apply_invalidation(session, cache, result)
    return result
