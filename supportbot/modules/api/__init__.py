"""
API Module - Black Box Interface

Purpose: HTTP response models for health and monitoring
Interface: ActiveSessionResponse, HealthResponse
Hidden: Conversion from in-memory sessions

The API module only describes data - it contains no business logic.
"""

from .models import ActiveSessionResponse, HealthResponse, SessionStatus

__all__ = ["ActiveSessionResponse", "HealthResponse", "SessionStatus"]
