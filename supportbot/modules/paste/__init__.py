"""
Paste Module - Black Box Interface

Purpose: Upload finished session logs to a paste service
Interface: create_paste(), close()
Hidden: HTTP transport, authentication headers, response parsing

Can be replaced with any paste backend returning a URL.
"""

from .paste import PasteError, PasteModule

__all__ = ["PasteModule", "PasteError"]
