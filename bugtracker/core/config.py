"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    BUGTRACKER_API_URL                     — Base URL of the bug-tracking REST backend
                                             (default: http://localhost:8080/api)
    BUGTRACKER_REQUEST_TIMEOUT             — Seconds before a backend call is abandoned (default: 10)
    BUGTRACKER_ALLOW_ASSIGN_WHEN_APPROVED  — Allow (re)assigning bugs that are already
                                             APPROVED (default: true)
    BUGTRACKER_QUERY_CACHE_TTL             — Seconds a cached read stays fresh (default: 30)
    BUGTRACKER_LOG_DIR                     — Directory for the daily log file (default: logs)
    BUGTRACKER_CORS_ORIGINS                — Comma-separated origins allowed to call the service

Assignment Policy:
    The backend has always accepted assignment at any status, including
    APPROVED. BUGTRACKER_ALLOW_ASSIGN_WHEN_APPROVED=false locks assignment
    once a fix is approved.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


API_BASE_URL = os.getenv("BUGTRACKER_API_URL", "http://localhost:8080/api")
REQUEST_TIMEOUT = float(os.getenv("BUGTRACKER_REQUEST_TIMEOUT", 10))

ALLOW_ASSIGN_WHEN_APPROVED = _env_flag("BUGTRACKER_ALLOW_ASSIGN_WHEN_APPROVED", True)

QUERY_CACHE_TTL = float(os.getenv("BUGTRACKER_QUERY_CACHE_TTL", 30))

LOG_DIR = os.getenv("BUGTRACKER_LOG_DIR", "logs")

CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv(
        "BUGTRACKER_CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]
