"""
Supportbot HTTP data models.

These models define the structure of data returned by the
monitoring endpoints.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Lifecycle state of a support session."""

    NEW = "new"
    STARTED = "started"
    ENDED = "ended"


class ActiveSessionResponse(BaseModel):
    """A support session currently holding a channel."""

    channel: str
    staff: str
    user: str
    reason: str
    status: SessionStatus
    started_at: str = Field(..., description="Session start time (ISO-8601, UTC)")
    log_lines: int = Field(..., description="Number of lines logged so far", ge=0)

    @classmethod
    def from_session(cls, session) -> "ActiveSessionResponse":
        if session.ended:
            status = SessionStatus.ENDED
        elif session.started:
            status = SessionStatus.STARTED
        else:
            status = SessionStatus.NEW
        return cls(
            channel=session.channel,
            staff=session.staff_nick,
            user=session.user_nick,
            reason=session.reason,
            status=status,
            started_at=session.start_time,
            log_lines=len(session.log),
        )


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str
    redis: str
    sessions: str
    active_sessions: int = 0
    version: Optional[str] = None
