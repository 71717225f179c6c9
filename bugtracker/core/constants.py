"""
Constants
Centralised storage for query names, status colours and UI notices.
"""
from bugtracker.models.bug_report import BugStatus

# Named read queries held by the query cache
QUERY_BUGS = "bugs"
QUERY_DEVELOPERS = "developers"

LOGIN_PATH = "/auth/login"

# Badge colour per status
STATUS_COLORS = {
    BugStatus.OPEN: "#e74c3c",
    BugStatus.IN_PROGRESS: "#f39c12",
    BugStatus.RESOLVED: "#2ecc71",
    BugStatus.APPROVED: "#3498db",
}
UNKNOWN_STATUS_COLOR = "#999"

# Button label per target status
TRANSITION_LABELS = {
    BugStatus.IN_PROGRESS: "Start Working",
    BugStatus.RESOLVED: "Mark Resolved",
    BugStatus.APPROVED: "Approve Fix",
}

UNASSIGNED_LABEL = "Unassigned"
NO_BUGS_NOTICE = "No bugs reported yet."
NO_BUGS_IN_SYSTEM_NOTICE = "No bugs in the system yet."
BUG_SUBMITTED_NOTICE = "Bug submitted successfully! Our team will review it soon."
ADMIN_ONLY_NOTICE = "Access denied. Admins only!"
BACKEND_DOWN_NOTICE = "Failed to load data. Make sure the backend is running."


def status_color(status: BugStatus) -> str:
    return STATUS_COLORS.get(status, UNKNOWN_STATUS_COLOR)
