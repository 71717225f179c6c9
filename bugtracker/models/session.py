"""
User Session Model
==================
The authenticated user as handed out by the login endpoint.

A session is immutable and is passed explicitly into every component that
needs authorization context; nothing in the package reads ambient session
state.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Role(str, Enum):
    CUSTOMER = "customer"
    DEVELOPER = "developer"
    ADMIN = "admin"


def parse_role(value: Optional[str]) -> Optional[Role]:
    """Return the Role for ``value`` (case-insensitive), or None if unknown."""
    if not value:
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


class UserSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    username: str = ""
    token: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        if isinstance(v, str) and not isinstance(v, Role):
            return v.strip().lower()
        return v

    @property
    def cache_scope(self) -> str:
        """Key under which this session's reads are cached."""
        return self.token or f"{self.role.value}:{self.username}"
