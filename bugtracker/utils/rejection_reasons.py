"""
Rejection Reasons
=================
Standardised constants for why a lifecycle action was refused.

Used by TransitionResult.reason to give views and the HTTP layer clean,
machine-readable rejection reasons. UNAUTHORIZED, INVALID_TRANSITION and
INVALID_TARGET are decided locally before any network call and are never
retried. NETWORK_FAILURE means the backend was unreachable or answered
with a non-2xx status; the user re-triggers the action manually.
"""


# ---------------------------------------------------------------------------
# Rejection Reason Constants
# ---------------------------------------------------------------------------
UNAUTHORIZED = "UNAUTHORIZED"
INVALID_TRANSITION = "INVALID_TRANSITION"
INVALID_TARGET = "INVALID_TARGET"
NETWORK_FAILURE = "NETWORK_FAILURE"

# All valid reasons (for validation)
ALL_REJECTION_REASONS = frozenset({
    UNAUTHORIZED,
    INVALID_TRANSITION,
    INVALID_TARGET,
    NETWORK_FAILURE,
})

# Reasons resolved without contacting the backend
LOCAL_REJECTION_REASONS = frozenset({
    UNAUTHORIZED,
    INVALID_TRANSITION,
    INVALID_TARGET,
})


# ---------------------------------------------------------------------------
# User-facing notices (maps reason → message)
# ---------------------------------------------------------------------------
REJECTION_MESSAGES = {
    UNAUTHORIZED: "You are not allowed to perform this action.",
    INVALID_TRANSITION: "This bug cannot move to the requested status.",
    INVALID_TARGET: "Please select a valid developer.",
    NETWORK_FAILURE: "Could not reach the bug tracker. Please try again.",
}


def get_rejection_message(reason: str) -> str:
    """
    Map a rejection reason to the notice shown to the user.

    Parameters
    ----------
    reason : str
        One of the rejection reason constants.

    Returns
    -------
    str
        Human-readable notice; a generic one for unknown reasons.
    """
    return REJECTION_MESSAGES.get(reason, "Something went wrong. Please try again.")
