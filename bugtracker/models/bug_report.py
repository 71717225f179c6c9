"""
Bug Report Model
================
Pydantic models for bug reports as exchanged with the bug-tracking backend.

Fields:
    id              — opaque, server-assigned identifier (never changes)
    title           — short summary, non-empty
    description     — free text written by the customer
    severity        — LOW / MEDIUM / HIGH / CRITICAL, fixed at creation
    status          — OPEN / IN_PROGRESS / RESOLVED / APPROVED
    assigned_to     — developer display name, None until assigned

The backend speaks camelCase (``assignedTo``). Models accept either the alias
or the field name and are dumped ``by_alias`` when sent back to the backend.
"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

BugId = Union[int, str]


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class BugStatus(str, Enum):
    """Lifecycle stage. Order of declaration is the lifecycle order."""
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    APPROVED = "APPROVED"


class BugReport(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: BugId
    title: str
    description: str = ""
    severity: Severity = Severity.LOW
    status: BugStatus = BugStatus.OPEN
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")

    def with_status(self, status: BugStatus) -> "BugReport":
        return self.model_copy(update={"status": status})

    def with_assignee(self, assignee: str) -> "BugReport":
        return self.model_copy(update={"assigned_to": assignee})


class NewBugReport(BaseModel):
    """Payload of the bug submission form (``POST /bugs``)."""
    title: str
    description: str
    severity: Severity = Severity.LOW

    @field_validator("title", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Please fill in both the title and description.")
        return v.strip()
