"""Chat protocol interfaces following Black Box Design principles."""
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Pattern, Protocol, Set, Union


class Disposer(Protocol):
    """Handle returned by every hook registration."""

    def release(self) -> Union[None, Awaitable[None]]:
        """Unregister the hook. May return an awaitable."""
        ...


class CallbackDisposer:
    """Disposer backed by a plain callable (sync or async)."""

    def __init__(self, callback: Callable[[], Any]):
        self._callback = callback

    def release(self):
        return self._callback()


async def release(disposer: Disposer) -> None:
    """Release a disposer, awaiting it when the release is asynchronous."""
    result = disposer.release()
    if inspect.isawaitable(result):
        await result


@dataclass
class MessageEvent:
    """A message received in a channel."""

    nick: str
    channel: str
    message: str
    reply: Optional[Callable[[str], Awaitable[None]]] = None


MessageHandler = Callable[[MessageEvent], Awaitable[None]]
ConnectionHandler = Callable[[], Awaitable[None]]
JoinHandler = Callable[[str, str], Awaitable[None]]
LeaveHandler = Callable[[str, str, str], Awaitable[None]]
RenameHandler = Callable[[str, str], Awaitable[None]]


class ChatClient(Protocol):
    """
    Protocol for the IRC client collaborator.

    Events are dispatched one at a time; a handler runs to completion
    before the next one starts.
    """

    joined: bool
    # Lower-cased channel name -> set of lower-cased nicks currently present
    channel_state: Dict[str, Set[str]]

    def is_me(self, nick: str) -> bool:
        ...

    def add_message_hook_in_channel(
        self, channel: str, pattern: Pattern, handler: MessageHandler
    ) -> Disposer:
        ...

    def add_connect_handler(self, handler: ConnectionHandler) -> Disposer:
        ...

    def add_disconnect_handler(self, handler: ConnectionHandler) -> Disposer:
        ...

    def add_user_join_handler(self, handler: JoinHandler) -> Disposer:
        ...

    def add_user_leave_handler(self, handler: LeaveHandler) -> Disposer:
        ...

    def add_user_rename_handler(self, handler: RenameHandler) -> Disposer:
        ...

    async def kick(self, channel: str, nick: str) -> None:
        ...

    async def join(self, channel: str, nick: str) -> None:
        """Force-join (SAJOIN) a nick into a channel."""
        ...

    async def message(self, target: str, text: str) -> None:
        ...

    async def notice(self, target: str, text: str) -> None:
        ...


class WaitingQueue(Protocol):
    """Read-only view of the queue of users waiting for help."""

    def next_nick(self) -> Optional[str]:
        """Nick of the next waiting user, or None when the queue is empty."""
        ...
