import logging
import re
from typing import List

from supportbot.modules.chat import ChatClient, Disposer, MessageEvent, space_nick
from supportbot.modules.session import SessionManager

logger = logging.getLogger("supportbot.commands.sessions")

SESSIONS_COMMAND = re.compile(r"^!sessions", re.IGNORECASE)


def format_session_lines(manager: SessionManager) -> List[str]:
    """One line per active session, or a single 'No active sessions' line."""
    sessions = manager.list_active_sessions()
    if not sessions:
        return ["No active sessions"]
    return [
        f"{sess.channel} - {space_nick(sess.staff_nick)} helping {space_nick(sess.user_nick)}"
        for sess in sessions
    ]


def listen_for_staff_sessions(
    chat: ChatClient, manager: SessionManager, staff_channel: str
) -> Disposer:
    """Answer `!sessions` in the staff channel with the active session list."""

    async def on_sessions(event: MessageEvent):
        logger.debug(f"Staff sessions request from nick {event.nick}")
        for line in format_session_lines(manager):
            if event.reply:
                await event.reply(line)
            else:
                await chat.message(staff_channel, line)

    return chat.add_message_hook_in_channel(staff_channel, SESSIONS_COMMAND, on_sessions)
