"""Clover - concurrent mini-app game session runner."""

from .auth import SessionToken, acquire_token, extract_auth_payload
from .config import Settings, load_settings
from .orchestrator import Orchestrator, RunSummary
from .session import SessionDriver, SessionResult, SessionState

__version__ = "0.1.0"

__all__ = [
    "Orchestrator",
    "RunSummary",
    "SessionDriver",
    "SessionResult",
    "SessionState",
    "SessionToken",
    "Settings",
    "acquire_token",
    "extract_auth_payload",
    "load_settings",
]
