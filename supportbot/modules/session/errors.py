"""Errors raised by the session module."""


class NoChannelAvailableError(Exception):
    """Every channel in the pool already hosts a session."""

    def __init__(self, message: str = "All available support channels are in use!"):
        super().__init__(message)


class InternalError(Exception):
    """Generic failure surfaced to callers; the real cause is only logged."""

    def __init__(self, message: str = "Internal Error"):
        super().__init__(message)
