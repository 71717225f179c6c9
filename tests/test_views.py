"""
View Tests
==========
Dashboard, bug list, bug form and admin panel built from a mocked backend
client. Checks role-gated affordances, concurrent reads and query
invalidation after mutations.
"""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from bugtracker.core.constants import (
    ADMIN_ONLY_NOTICE,
    BACKEND_DOWN_NOTICE,
    BUG_SUBMITTED_NOTICE,
    NO_BUGS_IN_SYSTEM_NOTICE,
    NO_BUGS_NOTICE,
)
from bugtracker.models.bug_report import BugReport, BugStatus, NewBugReport, Severity
from bugtracker.models.developer import Developer
from bugtracker.models.session import Role, UserSession
from bugtracker.models.stats import Stats
from bugtracker.services.api_client import NetworkFailure
from bugtracker.services.query_cache import QueryCache
from bugtracker.utils.rejection_reasons import (
    INVALID_TARGET,
    INVALID_TRANSITION,
    NETWORK_FAILURE,
    UNAUTHORIZED,
)
from bugtracker.views.admin_panel import assign_bug, build_admin_panel
from bugtracker.views.bug_form import build_bug_form, submit_bug
from bugtracker.views.bug_list import build_bug_list, change_status
from bugtracker.views.dashboard import build_dashboard
from bugtracker.views.queries import AccessDenied, BugNotFound


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _bugs():
    return [
        BugReport(id=1, title="Crash on save", severity=Severity.CRITICAL, status=BugStatus.OPEN),
        BugReport(id=2, title="Slow search", severity=Severity.MEDIUM, status=BugStatus.IN_PROGRESS,
                  assigned_to="dana"),
        BugReport(id=3, title="Typo in footer", severity=Severity.LOW, status=BugStatus.RESOLVED,
                  assigned_to="lee"),
        BugReport(id=4, title="Broken link", severity=Severity.LOW, status=BugStatus.APPROVED),
    ]


def _developers():
    return [Developer(id=7, username="dana"), Developer(id=8, username="lee")]


def _client(bugs=None, developers=None):
    client = MagicMock()
    client.list_bugs = AsyncMock(return_value=_bugs() if bugs is None else bugs)
    client.list_developers = AsyncMock(return_value=_developers() if developers is None else developers)
    client.create_bug = AsyncMock()
    client.update_status = AsyncMock(return_value=None)
    client.approve_bug = AsyncMock(return_value=None)
    client.assign_bug = AsyncMock(return_value=None)
    return client


def _session(role):
    return UserSession(role=role, username=f"{role.value}-user", token=f"tok-{role.value}")


@pytest.fixture
def cache():
    return QueryCache(ttl=60)


# ===================================================================
# Dashboard
# ===================================================================
def test_dashboard_stats_and_welcome(cache):
    view = asyncio.run(build_dashboard(_session(Role.DEVELOPER), _client(), cache))

    assert view.username == "developer-user"
    assert view.role == Role.DEVELOPER
    assert view.stats == Stats(total=4, open=1, in_progress=1, resolved=1)
    assert view.notice == ""


@pytest.mark.parametrize("role, labels", [
    (Role.CUSTOMER, ["View All Bugs", "Submit New Bug"]),
    (Role.DEVELOPER, ["View All Bugs"]),
    (Role.ADMIN, ["View All Bugs", "Admin Panel"]),
])
def test_dashboard_quick_actions_by_role(cache, role, labels):
    view = asyncio.run(build_dashboard(_session(role), _client(), cache))
    assert [a.label for a in view.quick_actions] == labels


def test_dashboard_renders_when_backend_down(cache):
    client = _client()
    client.list_bugs.side_effect = NetworkFailure("GET /bugs failed")

    view = asyncio.run(build_dashboard(_session(Role.CUSTOMER), client, cache))

    assert view.stats == Stats()
    assert view.notice == BACKEND_DOWN_NOTICE


# ===================================================================
# Bug list
# ===================================================================
def test_bug_list_developer_actions(cache):
    view = asyncio.run(build_bug_list(_session(Role.DEVELOPER), _client(), cache))
    actions = {row.id: [a.label for a in row.actions] for row in view.bugs}

    assert actions == {1: ["Start Working"], 2: ["Mark Resolved"], 3: [], 4: []}


def test_bug_list_admin_sees_approve_only(cache):
    view = asyncio.run(build_bug_list(_session(Role.ADMIN), _client(), cache))
    actions = {row.id: [a.status for a in row.actions] for row in view.bugs}

    assert actions == {1: [], 2: [], 3: [BugStatus.APPROVED], 4: []}


def test_bug_list_customer_is_read_only(cache):
    view = asyncio.run(build_bug_list(_session(Role.CUSTOMER), _client(), cache))
    assert all(row.actions == [] for row in view.bugs)


def test_bug_list_row_presentation(cache):
    view = asyncio.run(build_bug_list(_session(Role.CUSTOMER), _client(), cache))
    first, second = view.bugs[0], view.bugs[1]

    assert first.assigned_to == "Unassigned"
    assert first.status_color == "#e74c3c"
    assert second.assigned_to == "dana"


def test_bug_list_empty_notice(cache):
    view = asyncio.run(build_bug_list(_session(Role.CUSTOMER), _client(bugs=[]), cache))
    assert view.bugs == []
    assert view.notice == NO_BUGS_NOTICE


def test_bug_list_network_failure_propagates(cache):
    client = _client()
    client.list_bugs.side_effect = NetworkFailure("down")
    with pytest.raises(NetworkFailure):
        asyncio.run(build_bug_list(_session(Role.CUSTOMER), client, cache))


def test_change_status_invalidates_bug_query(cache):
    session = _session(Role.DEVELOPER)
    client = _client()

    async def run_test():
        await build_bug_list(session, client, cache)
        result = await change_status(session, client, cache, "1", BugStatus.IN_PROGRESS)
        await build_bug_list(session, client, cache)
        return result

    result = asyncio.run(run_test())

    assert result.ok
    client.update_status.assert_awaited_once_with(1, BugStatus.IN_PROGRESS)
    # initial load, fresh check before the change, reload after invalidation
    assert client.list_bugs.await_count == 3


def test_rejected_change_keeps_cache(cache):
    session = _session(Role.CUSTOMER)
    client = _client()

    async def run_test():
        await build_bug_list(session, client, cache)
        result = await change_status(session, client, cache, 1, BugStatus.IN_PROGRESS)
        await build_bug_list(session, client, cache)
        return result

    result = asyncio.run(run_test())

    assert result.reason == UNAUTHORIZED
    client.update_status.assert_not_awaited()
    # the fresh check refilled the cache, so the reload hits it
    assert client.list_bugs.await_count == 2


def test_change_status_checks_fresh_status_not_cached_copy(cache):
    session = _session(Role.ADMIN)
    cache.put(session.cache_scope, "bugs", _bugs())
    moved_on = [bug.with_status(BugStatus.RESOLVED) if bug.id == 2 else bug for bug in _bugs()]
    client = _client(bugs=moved_on)

    result = asyncio.run(change_status(session, client, cache, 2, BugStatus.APPROVED))

    assert result.ok
    client.approve_bug.assert_awaited_once_with(2)


def test_change_status_unknown_bug(cache):
    with pytest.raises(BugNotFound):
        asyncio.run(change_status(_session(Role.DEVELOPER), _client(), cache, 99, BugStatus.IN_PROGRESS))


def test_change_status_no_op(cache):
    client = _client()
    result = asyncio.run(change_status(_session(Role.ADMIN), client, cache, 4, BugStatus.APPROVED))
    assert result.reason == INVALID_TRANSITION
    client.approve_bug.assert_not_awaited()


# ===================================================================
# Bug form
# ===================================================================
def test_bug_form_options():
    form = build_bug_form()
    assert form.default_severity == Severity.LOW
    assert [o.value for o in form.severities] == list(Severity)


def test_submit_bug_as_customer(cache):
    session = _session(Role.CUSTOMER)
    client = _client()
    created = BugReport(id=5, title="New bug", description="Details")
    client.create_bug.return_value = created
    cache.put(session.cache_scope, "bugs", _bugs())

    payload = NewBugReport(title="New bug", description="Details", severity=Severity.HIGH)
    result = asyncio.run(submit_bug(session, client, cache, payload))

    assert result.ok
    assert result.bug is created
    assert result.message == BUG_SUBMITTED_NOTICE
    assert cache.get(session.cache_scope, "bugs") is None


@pytest.mark.parametrize("role", [Role.DEVELOPER, Role.ADMIN])
def test_submit_bug_refused_for_staff(cache, role):
    client = _client()
    payload = NewBugReport(title="t", description="d")
    result = asyncio.run(submit_bug(_session(role), client, cache, payload))
    assert result.reason == UNAUTHORIZED
    client.create_bug.assert_not_awaited()


def test_submit_bug_network_failure(cache):
    client = _client()
    client.create_bug.side_effect = NetworkFailure("POST /bugs failed with HTTP 500", status_code=500)
    payload = NewBugReport(title="t", description="d")

    result = asyncio.run(submit_bug(_session(Role.CUSTOMER), client, cache, payload))

    assert result.reason == NETWORK_FAILURE
    assert result.message == "Failed to submit bug. Please try again."


# ===================================================================
# Admin panel
# ===================================================================
@pytest.mark.parametrize("role", [Role.CUSTOMER, Role.DEVELOPER])
def test_admin_panel_refused_for_non_admin(cache, role):
    client = _client()
    with pytest.raises(AccessDenied, match=ADMIN_ONLY_NOTICE):
        asyncio.run(build_admin_panel(_session(role), client, cache))
    client.list_bugs.assert_not_awaited()


def test_admin_panel_fetches_bugs_and_developers_concurrently(cache):
    started = []

    async def run_test():
        gate = asyncio.Event()

        async def slow_bugs():
            started.append("bugs")
            await gate.wait()
            return _bugs()

        async def slow_developers():
            started.append("developers")
            gate.set()
            return _developers()

        client = _client()
        client.list_bugs = AsyncMock(side_effect=slow_bugs)
        client.list_developers = AsyncMock(side_effect=slow_developers)
        return await asyncio.wait_for(build_admin_panel(_session(Role.ADMIN), client, cache), timeout=5)

    view = asyncio.run(run_test())

    assert sorted(started) == ["bugs", "developers"]
    assert len(view.bugs) == 4
    assert [d.username for d in view.developers] == ["dana", "lee"]


def test_admin_panel_rows(cache):
    view = asyncio.run(build_admin_panel(_session(Role.ADMIN), _client(), cache))
    rows = {row.id: row for row in view.bugs}

    assert rows[1].assign_placeholder == "-- Select Developer --"
    assert rows[2].assign_placeholder == "dana"
    assert rows[1].approval == "Waiting..."
    assert rows[3].approval == ""
    assert [a.label for a in rows[3].actions] == ["Approve Fix"]
    assert rows[4].approval == "Approved"


def test_assign_bug_invalidates_bugs_only(cache):
    session = _session(Role.ADMIN)
    client = _client()

    async def run_test():
        await build_admin_panel(session, client, cache)
        result = await assign_bug(session, client, cache, 1, "8")
        await build_admin_panel(session, client, cache)
        return result

    result = asyncio.run(run_test())

    assert result.ok
    assert result.bug.assigned_to == "lee"
    client.assign_bug.assert_awaited_once_with(1, 8)
    assert client.list_bugs.await_count == 3
    assert client.list_developers.await_count == 1


def test_admin_panel_empty_notice(cache):
    view = asyncio.run(build_admin_panel(_session(Role.ADMIN), _client(bugs=[]), cache))
    assert view.notice == NO_BUGS_IN_SYSTEM_NOTICE


def test_assign_checks_fresh_bug_not_cached_copy(cache):
    session = _session(Role.ADMIN)
    cache.put(session.cache_scope, "bugs", [])
    client = _client()

    result = asyncio.run(assign_bug(session, client, cache, 1, "7"))

    assert result.ok
    client.assign_bug.assert_awaited_once_with(1, 7)


@pytest.mark.parametrize("role", list(Role))
def test_assign_empty_developer_for_any_role(cache, role):
    client = _client()
    result = asyncio.run(assign_bug(_session(role), client, cache, 1, ""))
    assert result.reason == INVALID_TARGET
    client.assign_bug.assert_not_awaited()
    client.list_developers.assert_not_awaited()


def test_assign_by_developer_is_unauthorized(cache):
    client = _client()
    result = asyncio.run(assign_bug(_session(Role.DEVELOPER), client, cache, 1, "7"))
    assert result.reason == UNAUTHORIZED
    client.assign_bug.assert_not_awaited()


def test_assign_unknown_developer(cache):
    client = _client()
    result = asyncio.run(assign_bug(_session(Role.ADMIN), client, cache, 1, "42"))
    assert result.reason == INVALID_TARGET
    client.assign_bug.assert_not_awaited()
