"""
Bug Form View
Options for the submission form and the submit action (customers only).
"""
import logging

from pydantic import BaseModel

from bugtracker.core.constants import BUG_SUBMITTED_NOTICE, QUERY_BUGS
from bugtracker.models.bug_report import NewBugReport, Severity
from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient, NetworkFailure
from bugtracker.services.lifecycle import ACTION_SUBMIT_BUG, TransitionResult, can_perform
from bugtracker.services.query_cache import QueryCache
from bugtracker.utils.rejection_reasons import NETWORK_FAILURE, UNAUTHORIZED
from bugtracker.views.queries import apply_invalidation

logger = logging.getLogger(__name__)

SEVERITY_DESCRIPTIONS = {
    Severity.LOW: "Low — minor issue, not urgent",
    Severity.MEDIUM: "Medium — affects some users",
    Severity.HIGH: "High — major feature broken",
    Severity.CRITICAL: "Critical — app is unusable",
}

SUBMIT_FAILED_NOTICE = "Failed to submit bug. Please try again."


class SeverityOption(BaseModel):
    value: Severity
    label: str


class BugFormView(BaseModel):
    default_severity: Severity = Severity.LOW
    severities: list[SeverityOption]


def build_bug_form() -> BugFormView:
    return BugFormView(
        severities=[
            SeverityOption(value=severity, label=label)
            for severity, label in SEVERITY_DESCRIPTIONS.items()
        ]
    )


async def submit_bug(
    session: UserSession,
    client: BugTrackerClient,
    cache: QueryCache,
    payload: NewBugReport,
) -> TransitionResult:
    if not can_perform(session.role, ACTION_SUBMIT_BUG):
        return TransitionResult.rejected(UNAUTHORIZED, "Only customers can submit bug reports.")

    try:
        created = await client.create_bug(payload)
    except NetworkFailure as exc:
        logger.error("Error submitting bug: %s", exc)
        return TransitionResult.rejected(NETWORK_FAILURE, SUBMIT_FAILED_NOTICE)

    logger.info("Bug submitted by %s: %s", session.username or "?", payload.title)
    result = TransitionResult(bug=created, message=BUG_SUBMITTED_NOTICE, invalidates=(QUERY_BUGS,))
    apply_invalidation(session, cache, result)
    return result
