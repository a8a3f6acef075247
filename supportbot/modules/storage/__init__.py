"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: connect(), get(), put(), delete()
Hidden: Redis specifics, connection pooling, serialization

Can be replaced with any storage backend without affecting other modules.
"""

from .store import NotFoundError, StateStore, StorageModule

__all__ = ["StorageModule", "StateStore", "NotFoundError"]
