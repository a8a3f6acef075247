"""
Supportbot - IRC Support Session System

Pairs a staff helper with a user in a dedicated IRC channel, logs the
conversation, and survives restarts and reconnects.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- config: Environment-driven configuration
- storage: Key-value persistence abstraction
- chat: Chat protocol collaborator interfaces
- paste: Log upload service client
- session: Support session lifecycle management
- commands: Staff-facing chat commands
- api: HTTP health and monitoring models
"""

__version__ = "1.0.0"
