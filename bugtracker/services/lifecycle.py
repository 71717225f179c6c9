"""
Bug Lifecycle Controller
========================
Owns the status state machine of a bug report and the role checks that gate
every transition and assignment.

State Machine:
    OPEN → IN_PROGRESS → RESOLVED → APPROVED

    - OPEN is set at creation and is not reachable through a transition
    - APPROVED is terminal
    - Each state has exactly one successor; no backward edges
    - Requesting the current status again is a no-op and is rejected

Capability Table:
    Role → set of (from, to) edges that role may take. Every role has an
    entry, so the permission matrix can be inspected and tested on its own:

        developer  OPEN → IN_PROGRESS, IN_PROGRESS → RESOLVED
        admin      RESOLVED → APPROVED
        customer   (none)

    A second table maps roles to page-level actions (view the bug list,
    submit a bug, open the admin panel, assign bugs).

Rejections:
    All local checks run before the storage collaborator is touched. A
    rejected request never reaches the backend. Storage failures come back
    as NETWORK_FAILURE results, never as exceptions.

Query Invalidation:
    Every successful mutation lists the read queries it makes stale in
    TransitionResult.invalidates; the caller re-issues exactly those.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from bugtracker.core.config import ALLOW_ASSIGN_WHEN_APPROVED
from bugtracker.core.constants import QUERY_BUGS
from bugtracker.models.bug_report import BugId, BugReport, BugStatus
from bugtracker.models.developer import Developer
from bugtracker.models.session import Role
from bugtracker.models.stats import Stats
from bugtracker.services.api_client import NetworkFailure
from bugtracker.utils.rejection_reasons import (
    INVALID_TARGET,
    INVALID_TRANSITION,
    NETWORK_FAILURE,
    UNAUTHORIZED,
    get_rejection_message,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
INITIAL_STATUS = BugStatus.OPEN
TERMINAL_STATUS = BugStatus.APPROVED

SUCCESSORS: dict[BugStatus, BugStatus] = {
    BugStatus.OPEN: BugStatus.IN_PROGRESS,
    BugStatus.IN_PROGRESS: BugStatus.RESOLVED,
    BugStatus.RESOLVED: BugStatus.APPROVED,
}

ROLE_TRANSITIONS: dict[Role, frozenset[tuple[BugStatus, BugStatus]]] = {
    Role.CUSTOMER: frozenset(),
    Role.DEVELOPER: frozenset({
        (BugStatus.OPEN, BugStatus.IN_PROGRESS),
        (BugStatus.IN_PROGRESS, BugStatus.RESOLVED),
    }),
    Role.ADMIN: frozenset({
        (BugStatus.RESOLVED, BugStatus.APPROVED),
    }),
}


# ---------------------------------------------------------------------------
# Page actions
# ---------------------------------------------------------------------------
ACTION_VIEW_BUGS = "view_bugs"
ACTION_SUBMIT_BUG = "submit_bug"
ACTION_ADMIN_PANEL = "admin_panel"
ACTION_ASSIGN_BUG = "assign_bug"

ROLE_ACTIONS: dict[Role, frozenset[str]] = {
    Role.CUSTOMER: frozenset({ACTION_VIEW_BUGS, ACTION_SUBMIT_BUG}),
    Role.DEVELOPER: frozenset({ACTION_VIEW_BUGS}),
    Role.ADMIN: frozenset({ACTION_VIEW_BUGS, ACTION_ADMIN_PANEL, ACTION_ASSIGN_BUG}),
}


def can_perform(role: Role, action: str) -> bool:
    return action in ROLE_ACTIONS.get(Role(role), frozenset())


def can_transition(current: BugStatus, requested: BugStatus, role: Role) -> bool:
    """
    True iff ``requested`` is the successor of ``current`` and ``role`` may take that edge.

    A no-op request (requested == current) is always False.
    """
    current, requested, role = BugStatus(current), BugStatus(requested), Role(role)
    if current == requested:
        return False
    if SUCCESSORS.get(current) != requested:
        return False
    return (current, requested) in ROLE_TRANSITIONS.get(role, frozenset())


def available_transitions(current: BugStatus, role: Role) -> list[BugStatus]:
    """Statuses ``role`` may move a bug in ``current`` to (zero or one entry)."""
    successor = SUCCESSORS.get(current)
    if successor is not None and can_transition(current, successor, role):
        return [successor]
    return []


def compute_stats(bugs: Iterable[BugReport]) -> Stats:
    """Count bugs per status. Pure; APPROVED bugs only count towards the total."""
    total = opened = in_progress = resolved = 0
    for bug in bugs:
        total += 1
        if bug.status == BugStatus.OPEN:
            opened += 1
        elif bug.status == BugStatus.IN_PROGRESS:
            in_progress += 1
        elif bug.status == BugStatus.RESOLVED:
            resolved += 1
    return Stats(total=total, open=opened, in_progress=in_progress, resolved=resolved)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass
class TransitionResult:
    """Outcome of a lifecycle action: the updated bug, or why it was refused."""
    bug: Optional[BugReport] = None
    reason: str = ""
    message: str = ""
    invalidates: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.reason

    @classmethod
    def accepted(
        cls, bug: BugReport, message: str = "", invalidates: tuple[str, ...] = (QUERY_BUGS,)
    ) -> "TransitionResult":
        return cls(bug=bug, message=message, invalidates=invalidates)

    @classmethod
    def rejected(cls, reason: str, message: str = "") -> "TransitionResult":
        return cls(reason=reason, message=message or get_rejection_message(reason))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class BugLifecycleController:
    """
    Applies status transitions and assignments on behalf of an actor.

    ``store`` is the bug-storage collaborator. It must provide the async
    methods ``update_status(bug_id, status)``, ``approve_bug(bug_id)`` and
    ``assign_bug(bug_id, developer_id)``, each returning the updated
    BugReport (or None when the backend sends no body) and raising
    NetworkFailure on failure. BugTrackerClient satisfies this.
    """

    def __init__(self, store, allow_assign_when_approved: bool = ALLOW_ASSIGN_WHEN_APPROVED) -> None:
        self.store = store
        self.allow_assign_when_approved = allow_assign_when_approved

    can_transition = staticmethod(can_transition)
    compute_stats = staticmethod(compute_stats)

    async def apply_transition(self, bug: BugReport, requested: BugStatus, role: Role) -> TransitionResult:
        current, requested, role = bug.status, BugStatus(requested), Role(role)
        if requested == current or SUCCESSORS.get(current) != requested:
            logger.info(
                "Rejected transition of bug %s: %s -> %s is not a lifecycle edge",
                bug.id, current.value, requested.value,
            )
            return TransitionResult.rejected(INVALID_TRANSITION)

        if not can_transition(current, requested, role):
            logger.info(
                "Rejected transition of bug %s: role %s may not move %s -> %s",
                bug.id, role.value, current.value, requested.value,
            )
            return TransitionResult.rejected(UNAUTHORIZED)

        updated = bug.with_status(requested)
        try:
            if requested == BugStatus.APPROVED:
                persisted = await self.store.approve_bug(bug.id)
            else:
                persisted = await self.store.update_status(bug.id, requested)
        except NetworkFailure as exc:
            logger.error("Could not persist status of bug %s: %s", bug.id, exc)
            return TransitionResult.rejected(NETWORK_FAILURE)

        logger.info("Bug %s moved %s -> %s", bug.id, current.value, requested.value)
        return TransitionResult.accepted(persisted or updated)

    async def assign(
        self,
        bug: BugReport,
        developer_id: Union[BugId, None],
        role: Role,
        developers: Sequence[Developer],
    ) -> TransitionResult:
        target = "" if developer_id is None else str(developer_id).strip()
        if not target:
            return TransitionResult.rejected(INVALID_TARGET)

        if not can_perform(Role(role), ACTION_ASSIGN_BUG):
            logger.info("Rejected assignment of bug %s: role %s may not assign", bug.id, Role(role).value)
            return TransitionResult.rejected(UNAUTHORIZED)

        developer = next((dev for dev in developers if str(dev.id) == target), None)
        if developer is None:
            logger.info("Rejected assignment of bug %s: unknown developer %r", bug.id, target)
            return TransitionResult.rejected(INVALID_TARGET)

        if bug.status == TERMINAL_STATUS and not self.allow_assign_when_approved:
            return TransitionResult.rejected(
                INVALID_TRANSITION, "Approved bugs can no longer be reassigned."
            )

        try:
            persisted = await self.store.assign_bug(bug.id, developer.id)
        except NetworkFailure as exc:
            logger.error("Could not assign bug %s to %s: %s", bug.id, developer.username, exc)
            return TransitionResult.rejected(NETWORK_FAILURE)

        logger.info("Bug %s assigned to %s", bug.id, developer.username)
        return TransitionResult.accepted(persisted or bug.with_assignee(developer.username))
