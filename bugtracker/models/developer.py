"""
Developer Model
Assignment targets returned by ``GET /users/developers``.
"""
from pydantic import BaseModel, ConfigDict

from bugtracker.models.bug_report import BugId


class Developer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: BugId
    username: str
