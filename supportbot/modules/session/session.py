"""
Support session state machine.

A session moves New -> Started -> Ended. Sessions built by allocation
start as New and become Started once both parties have been joined;
sessions rebuilt from a stored record are Started immediately.

Every appended log line synchronously persists the full session
snapshot, so the stored record is never behind the in-memory log.
"""

import asyncio
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from supportbot.modules.chat import (
    ChatClient,
    Disposer,
    MessageEvent,
    WaitingQueue,
    irc_color_func,
    random_irc_color,
    release,
    space_nick,
)

from .errors import InternalError
from .record import SessionRecord, record_key

logger = logging.getLogger("supportbot.session")

UPLOAD_FAILED_NOTICE = "I could not properly upload the logs, but they should be saved locally."

ChannelListener = Callable[[str], Disposer]


@dataclass
class SessionSettings:
    """Channels and paths shared by every session."""

    user_support_channel: str
    support_log_channel: str
    logs_dir: Path


def log_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp prefix for a log line, e.g. 2024-01-02 03:04:05 UTC."""
    now = now or datetime.now(UTC)
    return now.strftime("%Y-%m-%d %H:%M:%S UTC")


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and Z suffix."""
    now = now or datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def paste_token() -> str:
    """Random 16 character URL-safe access key."""
    return secrets.token_urlsafe(32)[:16]


async def evict_occupants(chat: ChatClient, channel: str, best_effort: bool = False) -> None:
    """
    Kick every nick except ourselves out of a channel.

    Args:
        chat: Chat client
        channel: Channel to empty
        best_effort: Log and continue on a failed kick instead of raising
    """
    for nick in list(chat.channel_state.get(channel.lower(), set())):
        if chat.is_me(nick):
            continue
        try:
            await chat.kick(channel, nick)
        except Exception as e:
            if not best_effort:
                raise
            logger.error(f"Failed to kick {nick} from {channel}: {e}")


class SupportSession:
    """One staff member helping one user in a dedicated channel."""

    def __init__(
        self,
        *,
        chat: ChatClient,
        store,
        paste,
        settings: SessionSettings,
        channel: str,
        staff_nick: str,
        user_nick: str,
        reason: str,
        start_time: str,
        color: str,
        log: List[str],
        removal_callback: Disposer,
        queue: Optional[WaitingQueue] = None,
        channel_listeners: Sequence[ChannelListener] = (),
    ):
        self.chat = chat
        self.store = store
        self.paste = paste
        self.settings = settings
        self.queue = queue

        self.channel = channel
        self.staff_nick = staff_nick
        self.user_nick = user_nick
        self.reason = reason
        self.start_time = start_time
        self.color = color
        self.log = log

        # Released in registration order during teardown
        self.disposers: List[Disposer] = [removal_callback]
        self.started = False
        self.ended = False
        self._ending = False

        self._subscribe(channel_listeners)

    @classmethod
    def new_session(
        cls,
        channel: str,
        staff_nick: str,
        user_nick: str,
        reason: str,
        removal_callback: Disposer,
        **deps,
    ) -> "SupportSession":
        """Build a fresh session that still has to be started."""
        return cls(
            channel=channel,
            staff_nick=staff_nick,
            user_nick=user_nick,
            reason=reason,
            start_time=iso_timestamp(),
            color=random_irc_color(),
            log=[],
            removal_callback=removal_callback,
            **deps,
        )

    @classmethod
    async def from_record(
        cls, record: SessionRecord, removal_callback: Disposer, **deps
    ) -> "SupportSession":
        """Rebuild a session from its stored record; it is assumed to be live."""
        session = cls(
            channel=record.channel,
            staff_nick=record.staff,
            user_nick=record.user,
            reason=record.reason,
            start_time=record.time,
            color=record.color,
            log=list(record.log),
            removal_callback=removal_callback,
            **deps,
        )
        session.started = True
        if session.chat.joined:
            await session.log_msg("--- Reconnected to IRC ---")
        return session

    @property
    def key(self) -> str:
        return record_key(self.channel)

    @property
    def is_active(self) -> bool:
        return not self.ended and not self._ending

    def _in_channel(self, channel: str) -> bool:
        return channel.lower() == self.channel.lower()

    def _guarded(self, handler):
        """
        Wrap an event handler so a failure is logged instead of reaching the
        chat client's dispatcher. Handlers are ignored once teardown began.
        """

        async def wrapper(*args):
            if not self.is_active:
                return
            try:
                await handler(*args)
            except Exception as e:
                logger.error(f"Error handling event for session in {self.channel}: {e}")

        return wrapper

    def _subscribe(self, channel_listeners: Sequence[ChannelListener]) -> None:
        async def on_message(event: MessageEvent):
            await self.log_msg(f"{event.nick}: {event.message}")

        async def on_disconnect():
            await self.log_msg("--- Disconnected from IRC ---")

        async def on_connect():
            await self.log_msg("--- Reconnected to IRC ---")
            if self.started:
                await self.check_if_in_progress()

        async def on_join(nick: str, channel: str):
            if self._in_channel(channel):
                await self.log_msg(f"{nick} has joined.")

        async def on_leave(nick: str, channel: str, leave_type: str):
            if self._in_channel(channel):
                await self.log_msg(f"{nick} has left ({leave_type}).")
                if self.started:
                    await self.check_if_in_progress()

        async def on_rename(old_nick: str, new_nick: str):
            changed = False
            if self.staff_nick.lower() == old_nick.lower():
                self.staff_nick = new_nick
                changed = True
            if self.user_nick.lower() == old_nick.lower():
                self.user_nick = new_nick
                changed = True
            if changed:
                # Saves the updated nicks along with the line
                await self.log_msg(f"{old_nick} has changed their nick to {new_nick}.")

        for listener in channel_listeners:
            self.disposers.append(listener(self.channel))

        chat = self.chat
        self.disposers.append(
            chat.add_message_hook_in_channel(self.channel, re.compile(".*"), self._guarded(on_message))
        )
        self.disposers.append(chat.add_connect_handler(self._guarded(on_connect)))
        self.disposers.append(chat.add_disconnect_handler(self._guarded(on_disconnect)))
        self.disposers.append(chat.add_user_join_handler(self._guarded(on_join)))
        self.disposers.append(chat.add_user_leave_handler(self._guarded(on_leave)))
        self.disposers.append(chat.add_user_rename_handler(self._guarded(on_rename)))

    async def start_new_session(self, user_ip: str, announce: bool) -> None:
        """
        Bring a new session live.

        Raises:
            InternalError: On any failure; the caller must end the session
        """
        chat = self.chat
        try:
            # The channel must be empty before the session begins
            await evict_occupants(chat, self.channel)

            if announce:
                next_nick = self.queue.next_nick() if self.queue else None
                text = f"Now helping {self.user_nick}."
                if next_nick:
                    text += f" Next in queue: {next_nick}"
                await chat.message(self.settings.user_support_channel, text)

            await chat.notice(
                self.staff_nick,
                f"Starting support session for {self.user_nick} in {self.channel}, user IP: {user_ip}",
            )
            await chat.kick(self.settings.user_support_channel, self.user_nick)

            await self.log_msg(
                f"Beginning support conversation between {self.user_nick} and "
                f"{self.staff_nick} in {self.channel}. Reason: {self.reason}"
            )

            await chat.join(self.channel, self.staff_nick)
            await chat.join(self.channel, self.user_nick)
            await chat.notice(
                self.user_nick,
                f"{self.user_nick}, you are now being helped by {self.staff_nick} in {self.channel}",
            )
            self.started = True
        except Exception as e:
            logger.error(f"Unexpected error starting new support session: {e}")
            raise InternalError() from e

    def _sanitize(self, msg: str) -> str:
        for nick in (self.user_nick, self.staff_nick):
            if nick:
                msg = re.sub(re.escape(nick), space_nick(nick), msg, flags=re.IGNORECASE)
        return msg

    async def log_msg(self, msg: str) -> None:
        """
        Append a timestamped line, mirror it to the log channel and persist
        the whole session.

        Raises:
            Store errors from the persistence write
        """
        self.log.append(f"{log_timestamp()} | {msg}")

        colorize = irc_color_func(self.color)
        try:
            await self.chat.message(
                self.settings.support_log_channel,
                f"{colorize(self.channel)} - {self._sanitize(msg)}",
            )
        except Exception as e:
            logger.warning(f"Unable to send message to log channel: {e}")

        await self.save_to_state()

    async def check_if_in_progress(self) -> None:
        """End the session if the staff member or the user left the channel."""
        users = {nick.lower() for nick in self.chat.channel_state.get(self.channel.lower(), set())}
        if self.staff_nick.lower() not in users or self.user_nick.lower() not in users:
            await self.end_session()

    async def _archive_log(self) -> None:
        log_str = "\n".join(self.log)
        log_name = f"{self.channel} {iso_timestamp()} {self.user_nick} {self.staff_nick}.log"
        log_path = Path(self.settings.logs_dir) / log_name

        try:
            await asyncio.to_thread(log_path.write_text, log_str, encoding="utf-8")
        except Exception as e:
            logger.error(f"Unexpected error writing log file '{log_path}': {e}")

        paste_url = ""
        try:
            if self.paste is None:
                raise RuntimeError("no paste service")
            paste_url = await self.paste.create_paste(log_name, log_str, paste_token())
        except Exception as e:
            logger.error(f"Error uploading session log: {e}")

        outcome = f"A log can be found at {paste_url}" if paste_url else UPLOAD_FAILED_NOTICE
        try:
            await self.chat.message(
                self.settings.support_log_channel,
                f"Support conversation in {self.channel} between {space_nick(self.user_nick)} "
                f"and {space_nick(self.staff_nick)} complete. {outcome}",
            )
        except Exception as e:
            logger.error(f"Error sending message to log channel: {e}")

    async def end_session(self) -> None:
        """
        Tear the session down. Runs once; later calls are no-ops.

        No step escalates: each is logged and skipped on failure so the
        session always ends up marked as ended.
        """
        if not self.is_active:
            return
        self._ending = True
        try:
            if self.started:
                await self._archive_log()

            await evict_occupants(self.chat, self.channel, best_effort=True)

            for disposer in self.disposers:
                try:
                    await release(disposer)
                except Exception as e:
                    logger.error(f"Exception when calling session cleanup callback: {e}")

            try:
                await self.store.delete(self.key)
            except Exception as e:
                logger.error(f"Failed to remove session from state: {e}")

            logger.info(
                f"Support session for {self.user_nick} with {self.staff_nick} "
                f"in {self.channel} has ended"
            )
        finally:
            self.ended = True

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            channel=self.channel,
            staff=self.staff_nick,
            user=self.user_nick,
            reason=self.reason,
            time=self.start_time,
            color=self.color,
            log=list(self.log),
        )

    async def save_to_state(self) -> None:
        await self.store.put(self.key, self.to_record().to_dict())


__all__ = ["SupportSession", "SessionSettings", "evict_occupants"]
