"""
Startup recovery.

The steps are order dependent and run as an explicit pipeline:
load index -> restore each session and check its liveness -> sweep idle
channels.
"""

import logging
from typing import List

from supportbot.modules.storage import NotFoundError

from .manager import ACTIVE_SESSIONS_KEY, SessionManager
from .record import SessionRecord, record_key
from .session import SupportSession, evict_occupants

logger = logging.getLogger("supportbot.session.recovery")


class RecoveryPipeline:
    def __init__(self, manager: SessionManager):
        self.manager = manager
        self.store = manager.store

    async def run(self) -> List[SupportSession]:
        """
        Run every recovery step in order.

        Returns:
            Sessions that survived the liveness check

        Raises:
            Any store error other than NotFoundError; recovery is aborted
        """
        channels = await self.load_index()
        sessions = await self.restore_sessions(channels)
        await self.sweep_idle_channels()
        await self.manager.save_index()

        self.manager.ready = True
        survivors = [sess for sess in sessions if not sess.ended]
        logger.info(f"Recovered {len(survivors)} of {len(channels)} support sessions")
        return survivors

    async def load_index(self) -> List[str]:
        try:
            return list(await self.store.get(ACTIVE_SESSIONS_KEY))
        except NotFoundError:
            # No sessions were ever saved
            return []

    async def restore_sessions(self, channels: List[str]) -> List[SupportSession]:
        """Rebuild each indexed session, checking its liveness right away."""
        sessions = []
        seen = set()
        for entry in channels:
            # Older indexes listed record keys rather than channels
            chan = entry.removeprefix("session::")
            if chan in seen:
                logger.warning(f"Duplicate index entry for {chan}, skipping")
                continue
            seen.add(chan)

            try:
                data = await self.store.get(record_key(chan))
            except NotFoundError:
                logger.info(f"Session in {chan} already ended, skipping")
                continue
            record = SessionRecord.from_dict(data)
            session = await self.manager.restore_session(record)
            sessions.append(session)
            await self.check_liveness(session)
        return sessions

    async def check_liveness(self, session: SupportSession) -> None:
        # An abandoned session ends and unregisters itself here
        await session.check_if_in_progress()

    async def sweep_idle_channels(self) -> None:
        for chan in self.manager.channels:
            if chan not in self.manager.active_sessions:
                await evict_occupants(self.manager.chat, chan, best_effort=True)
