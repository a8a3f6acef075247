"""
Shared pytest fixtures for Supportbot tests.

This module provides common fixtures including:
- FakeRedis: in-memory stand-in for the async Redis client
- FakeChatClient: records sends and lets tests dispatch IRC events
- Session manager wiring with a mocked paste service
"""

import os
import re
import sys
from typing import Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from supportbot.modules.chat import CallbackDisposer, MessageEvent
from supportbot.modules.session import SessionManager, SessionSettings
from supportbot.modules.storage import StateStore


# =============================================================================
# Redis Fake
# =============================================================================


class FakeRedis:
    """Dict-backed subset of redis.asyncio.Redis (decode_responses=True)."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# Chat Client Fake
# =============================================================================


class FakeChatClient:
    """
    In-memory IRC client.

    Sends are recorded, never delivered. Events are only dispatched when a
    test calls one of the emit_* helpers, mirroring serialized dispatch.
    """

    def __init__(self, nick: str = "SupportBot"):
        self.nick = nick
        self.joined = True
        self.channel_state: Dict[str, Set[str]] = {}
        self.sent: List[Tuple[str, str, str]] = []
        self.kicks: List[Tuple[str, str]] = []
        self.joins: List[Tuple[str, str]] = []
        self.fail_on: Set[str] = set()

        self.message_hooks: List[tuple] = []
        self.connect_handlers: List = []
        self.disconnect_handlers: List = []
        self.join_handlers: List = []
        self.leave_handlers: List = []
        self.rename_handlers: List = []

    # -- hook registration ---------------------------------------------------

    def _register(self, registry: List, entry) -> CallbackDisposer:
        registry.append(entry)

        def remove():
            if entry in registry:
                registry.remove(entry)

        return CallbackDisposer(remove)

    def add_message_hook_in_channel(self, channel, pattern, handler):
        return self._register(self.message_hooks, (channel, pattern, handler))

    def add_connect_handler(self, handler):
        return self._register(self.connect_handlers, handler)

    def add_disconnect_handler(self, handler):
        return self._register(self.disconnect_handlers, handler)

    def add_user_join_handler(self, handler):
        return self._register(self.join_handlers, handler)

    def add_user_leave_handler(self, handler):
        return self._register(self.leave_handlers, handler)

    def add_user_rename_handler(self, handler):
        return self._register(self.rename_handlers, handler)

    @property
    def hook_count(self) -> int:
        return sum(
            len(r)
            for r in (
                self.message_hooks,
                self.connect_handlers,
                self.disconnect_handlers,
                self.join_handlers,
                self.leave_handlers,
                self.rename_handlers,
            )
        )

    # -- primitives ----------------------------------------------------------

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise RuntimeError(f"{op} failed")

    def is_me(self, nick: str) -> bool:
        return nick.lower() == self.nick.lower()

    def occupy(self, channel: str, *nicks: str) -> None:
        """Put nicks in a channel without dispatching events."""
        self.channel_state.setdefault(channel.lower(), set()).update(n.lower() for n in nicks)

    async def kick(self, channel: str, nick: str) -> None:
        self._maybe_fail("kick")
        self.kicks.append((channel, nick))
        self.channel_state.get(channel.lower(), set()).discard(nick.lower())

    async def join(self, channel: str, nick: str) -> None:
        self._maybe_fail("join")
        self.joins.append((channel, nick))
        self.occupy(channel, nick)

    async def message(self, target: str, text: str) -> None:
        self._maybe_fail("message")
        self.sent.append(("message", target, text))

    async def notice(self, target: str, text: str) -> None:
        self._maybe_fail("notice")
        self.sent.append(("notice", target, text))

    def messages_to(self, target: str) -> List[str]:
        return [text for kind, tgt, text in self.sent if kind == "message" and tgt == target]

    def notices_to(self, target: str) -> List[str]:
        return [text for kind, tgt, text in self.sent if kind == "notice" and tgt == target]

    # -- event dispatch ------------------------------------------------------

    async def emit_message(self, channel: str, nick: str, text: str) -> None:
        for chan, pattern, handler in list(self.message_hooks):
            if chan.lower() == channel.lower() and re.search(pattern, text):
                await handler(MessageEvent(nick=nick, channel=channel, message=text))

    async def emit_join(self, nick: str, channel: str) -> None:
        self.occupy(channel, nick)
        for handler in list(self.join_handlers):
            await handler(nick, channel)

    async def emit_leave(self, nick: str, channel: str, leave_type: str = "part") -> None:
        self.channel_state.get(channel.lower(), set()).discard(nick.lower())
        for handler in list(self.leave_handlers):
            await handler(nick, channel, leave_type)

    async def emit_rename(self, old_nick: str, new_nick: str) -> None:
        for users in self.channel_state.values():
            if old_nick.lower() in users:
                users.discard(old_nick.lower())
                users.add(new_nick.lower())
        for handler in list(self.rename_handlers):
            await handler(old_nick, new_nick)

    async def emit_disconnect(self) -> None:
        self.joined = False
        for handler in list(self.disconnect_handlers):
            await handler()

    async def emit_connect(self) -> None:
        self.joined = True
        for handler in list(self.connect_handlers):
            await handler()


class FakeQueue:
    def __init__(self, nicks: Optional[List[str]] = None):
        self.nicks = nicks or []

    def next_nick(self) -> Optional[str]:
        return self.nicks[0] if self.nicks else None


# =============================================================================
# Fixtures
# =============================================================================

POOL = ["#help-1", "#help-2"]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return StateStore(fake_redis)


@pytest.fixture
def chat():
    return FakeChatClient()


@pytest.fixture
def waiting_queue():
    return FakeQueue()


@pytest.fixture
def paste():
    paste = AsyncMock()
    paste.create_paste = AsyncMock(return_value="https://paste.example/abc")
    return paste


@pytest.fixture
def settings(tmp_path):
    return SessionSettings(
        user_support_channel="#support",
        support_log_channel="#support-logs",
        logs_dir=tmp_path,
    )


@pytest.fixture
def manager(chat, store, paste, settings, waiting_queue):
    return SessionManager(chat, store, paste, settings, POOL, queue=waiting_queue)
