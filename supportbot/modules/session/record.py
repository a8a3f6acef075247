"""
Persisted form of a support session.

Only durable fields are stored. Hook disposers and the started/ended
flags are rebuilt when a session is reconstructed.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


def record_key(channel: str) -> str:
    return f"session::{channel}"


@dataclass
class SessionRecord:
    channel: str
    staff: str
    user: str
    reason: str
    time: str
    color: str
    log: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["log"] = list(self.log)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Create from dictionary (e.g., from JSON)."""
        # Older records used "chan" for the channel
        channel = data.get("channel") or data.get("chan")
        if not channel:
            raise ValueError("Session record has no channel")
        return cls(
            channel=channel,
            staff=data.get("staff", ""),
            user=data.get("user", ""),
            reason=data.get("reason", ""),
            time=data.get("time", ""),
            color=data.get("color", ""),
            log=list(data.get("log") or []),
        )

    @property
    def key(self) -> str:
        return record_key(self.channel)
