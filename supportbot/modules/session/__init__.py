"""
Session Module - Black Box Interface

Purpose: Manage support session lifecycle
Interface: start_support_session(), end_session(), recover()
Hidden: Channel allocation, event subscriptions, log persistence, teardown

Replaceable with any session backend that honours the same lifecycle.
"""

from .errors import InternalError, NoChannelAvailableError
from .manager import ACTIVE_SESSIONS_KEY, SessionManager
from .record import SessionRecord
from .recovery import RecoveryPipeline
from .session import ChannelListener, SessionSettings, SupportSession

__all__ = [
    "SessionManager",
    "SupportSession",
    "SessionSettings",
    "ChannelListener",
    "SessionRecord",
    "RecoveryPipeline",
    "NoChannelAvailableError",
    "InternalError",
    "ACTIVE_SESSIONS_KEY",
]
