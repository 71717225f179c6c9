"""
Dashboard View
==============
Landing view after login: who is logged in, bug counts per status, and the
quick actions the role may use.

If the bug list cannot be loaded the dashboard still renders, with zero
counts and a notice.
"""
import logging

from pydantic import BaseModel

from bugtracker.core.constants import BACKEND_DOWN_NOTICE
from bugtracker.models.session import Role, UserSession
from bugtracker.models.stats import Stats
from bugtracker.services.api_client import BugTrackerClient, NetworkFailure
from bugtracker.services.lifecycle import (
    ACTION_ADMIN_PANEL,
    ACTION_SUBMIT_BUG,
    ACTION_VIEW_BUGS,
    can_perform,
    compute_stats,
)
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.queries import load_bugs

logger = logging.getLogger(__name__)

# (action, label, front-end path) in display order
QUICK_ACTIONS = [
    (ACTION_VIEW_BUGS, "View All Bugs", "/bugs"),
    (ACTION_SUBMIT_BUG, "Submit New Bug", "/bugs/new"),
    (ACTION_ADMIN_PANEL, "Admin Panel", "/admin"),
]


class QuickAction(BaseModel):
    action: str
    label: str
    path: str


class DashboardView(BaseModel):
    username: str
    role: Role
    stats: Stats
    quick_actions: list[QuickAction]
    notice: str = ""


def quick_actions_for(role: Role) -> list[QuickAction]:
    return [
        QuickAction(action=action, label=label, path=path)
        for action, label, path in QUICK_ACTIONS
        if can_perform(role, action)
    ]


async def build_dashboard(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> DashboardView:
    notice = ""
    try:
        stats = compute_stats(await load_bugs(session, client, cache))
    except NetworkFailure as exc:
        logger.warning("Could not load bug stats: %s", exc)
        stats = Stats()
        notice = BACKEND_DOWN_NOTICE

    return DashboardView(
        username=session.username,
        role=session.role,
        stats=stats,
        quick_actions=quick_actions_for(session.role),
        notice=notice,
    )
