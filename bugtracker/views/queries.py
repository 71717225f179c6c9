"""
Shared view queries and view-level errors.

Reads go through the QueryCache under the session's scope; the loaders are
the client's list methods.
"""
from typing import Optional, Sequence

from bugtracker.core.constants import QUERY_BUGS, QUERY_DEVELOPERS
from bugtracker.models.bug_report import BugId, BugReport
from bugtracker.models.developer import Developer
from bugtracker.models.session import UserSession
from bugtracker.services.api_client import BugTrackerClient
from bugtracker.services.lifecycle import TransitionResult
from bugtracker.services.query_cache import QueryCache


class AccessDenied(Exception):
    """The session's role may not open this view."""


class BugNotFound(LookupError):
    """No bug with the requested id is visible to the session."""


async def load_bugs(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> list[BugReport]:
    return await cache.fetch(session.cache_scope, QUERY_BUGS, client.list_bugs)


async def load_fresh_bugs(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> list[BugReport]:
    """Fetch the bug list past the cache and store it. Mutations check against this."""
    bugs = await client.list_bugs()
    cache.put(session.cache_scope, QUERY_BUGS, bugs)
    return bugs


async def load_developers(session: UserSession, client: BugTrackerClient, cache: QueryCache) -> list[Developer]:
    return await cache.fetch(session.cache_scope, QUERY_DEVELOPERS, client.list_developers)


def find_bug(bugs: Sequence[BugReport], bug_id: BugId) -> Optional[BugReport]:
    wanted = str(bug_id)
    return next((bug for bug in bugs if str(bug.id) == wanted), None)


def apply_invalidation(session: UserSession, cache: QueryCache, result: TransitionResult) -> None:
    """Drop the queries a successful mutation declared stale."""
    if result.ok and result.invalidates:
        cache.invalidate(session.cache_scope, result.invalidates)
