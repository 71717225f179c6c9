"""
Stats Model
Bug counts shown on the dashboard.
"""
from pydantic import BaseModel, ConfigDict


class Stats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
