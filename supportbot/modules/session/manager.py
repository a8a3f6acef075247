"""
Session registry and channel allocator.

Owns the pool of session channels and the map of channel -> live session.
A channel becomes free again only through the removal callback handed to
its session, which the session releases while ending.
"""

import logging
from typing import Dict, List, Optional, Sequence

from supportbot.modules.chat import CallbackDisposer, ChatClient, WaitingQueue

from .errors import InternalError, NoChannelAvailableError
from .record import SessionRecord
from .session import ChannelListener, SessionSettings, SupportSession

logger = logging.getLogger("supportbot.session.manager")

ACTIVE_SESSIONS_KEY = "sessions::activeSessions"


class SessionManager:
    def __init__(
        self,
        chat: ChatClient,
        store,
        paste,
        settings: SessionSettings,
        channels: Sequence[str],
        queue: Optional[WaitingQueue] = None,
        channel_listeners: Sequence[ChannelListener] = (),
    ):
        """
        Initialize session manager.

        Args:
            chat: Chat protocol client
            store: Key-value store (StateStore)
            paste: Paste service used to publish ended session logs
            settings: Channels and paths shared by every session
            channels: Ordered pool of channels eligible for sessions
            queue: Optional waiting queue, used to announce the next user
            channel_listeners: Extra per-channel hooks to install on each session
        """
        self.chat = chat
        self.store = store
        self.paste = paste
        self.settings = settings
        self.channels = list(channels)
        self.queue = queue
        self.channel_listeners = list(channel_listeners)
        self.active_sessions: Dict[str, SupportSession] = {}
        self.ready = False

    def _session_deps(self) -> dict:
        return {
            "chat": self.chat,
            "store": self.store,
            "paste": self.paste,
            "settings": self.settings,
            "queue": self.queue,
            "channel_listeners": self.channel_listeners,
        }

    def _free_channel(self) -> Optional[str]:
        for chan in self.channels:
            if chan not in self.active_sessions:
                return chan
        return None

    def _removal_callback(self, channel: str) -> CallbackDisposer:
        """One-shot disposer that frees the channel and rewrites the index."""
        fired = False

        async def remove():
            nonlocal fired
            if fired:
                return
            fired = True
            self.active_sessions.pop(channel, None)
            await self.save_index()

        return CallbackDisposer(remove)

    async def start_support_session(
        self, user_nick: str, staff_nick: str, reason: str, announce: bool, ip: str
    ) -> SupportSession:
        """
        Start helping a user in the first free pool channel.

        Args:
            user_nick: Nick of the user being helped
            staff_nick: Nick of the staff member helping
            reason: Why the user asked for help
            announce: Announce the session in the user support channel
            ip: User IP, sent privately to the staff member

        Returns:
            The started session

        Raises:
            NoChannelAvailableError: Every pool channel is occupied
            InternalError: The session could not be started

        Logic:
        1. Pick the first pool channel without a session
        2. Reserve it so no other start can pick it
        3. Start the session and persist the active session index
        4. On any failure end the session, which frees the channel
        """
        chan = self._free_channel()
        if not chan:
            raise NoChannelAvailableError()

        logger.info(f"Starting support session for {user_nick} with {staff_nick} in {chan}")
        session = SupportSession.new_session(
            chan, staff_nick, user_nick, reason, self._removal_callback(chan), **self._session_deps()
        )
        self.active_sessions[chan] = session

        try:
            await session.start_new_session(ip, announce)
            await self.save_index()
        except Exception as e:
            cause = e.__cause__ if isinstance(e, InternalError) else e
            logger.error(f"Error starting new session in {chan}: {cause}")
            await session.end_session()
            if isinstance(e, InternalError):
                raise
            raise InternalError() from e

        return session

    async def restore_session(self, record: SessionRecord) -> SupportSession:
        """Register a session rebuilt from its stored record."""
        logger.info(f"Resuming session in {record.channel}")
        session = await SupportSession.from_record(
            record, self._removal_callback(record.channel), **self._session_deps()
        )
        self.active_sessions[record.channel] = session
        return session

    async def end_session(self, channel: str) -> bool:
        """
        End the session in a channel on request.

        Returns:
            True if a session was ended
        """
        session = self.active_sessions.get(channel)
        if not session or not session.is_active:
            return False
        await session.end_session()
        return True

    def get_session(self, channel: str) -> Optional[SupportSession]:
        return self.active_sessions.get(channel)

    def list_active_sessions(self) -> List[SupportSession]:
        return [sess for sess in self.active_sessions.values() if not sess.ended]

    async def save_index(self) -> None:
        """Persist the channels of every non-ended session."""
        active = [chan for chan, sess in self.active_sessions.items() if not sess.ended]
        await self.store.put(ACTIVE_SESSIONS_KEY, active)

    async def recover(self) -> List[SupportSession]:
        """Rebuild sessions from the store. Must run once at startup."""
        from .recovery import RecoveryPipeline

        return await RecoveryPipeline(self).run()
