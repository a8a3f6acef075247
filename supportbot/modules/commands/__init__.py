"""
Commands Module - Black Box Interface

Purpose: Staff-facing chat commands
Interface: listen_for_staff_sessions()
Hidden: Command matching, reply formatting

Each listener returns the disposer of its hook.
"""

from .sessions import SESSIONS_COMMAND, format_session_lines, listen_for_staff_sessions

__all__ = ["listen_for_staff_sessions", "format_session_lines", "SESSIONS_COMMAND"]
