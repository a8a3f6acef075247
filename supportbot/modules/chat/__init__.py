"""
Chat Module - Black Box Interface

Purpose: Describe the chat protocol collaborators the core depends on
Interface: ChatClient, WaitingQueue, MessageEvent, Disposer
Hidden: Connection management, event dispatch, channel tracking

Any IRC (or IRC-like) client satisfying ChatClient can be plugged in.
"""

from .formatting import irc_color_func, random_irc_color, space_nick
from .interfaces import (
    CallbackDisposer,
    ChatClient,
    Disposer,
    MessageEvent,
    WaitingQueue,
    release,
)

__all__ = [
    "ChatClient",
    "WaitingQueue",
    "MessageEvent",
    "Disposer",
    "CallbackDisposer",
    "release",
    "space_nick",
    "random_irc_color",
    "irc_color_func",
]
