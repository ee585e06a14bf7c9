"""
Error taxonomy shared by the store backends, the service layer and the
HTTP error handlers.

``InvalidInput`` maps to HTTP 400, ``StoreUnavailable`` to HTTP 500.
``CorruptState`` never reaches a client: stores and the service treat it
as "no data yet" and log it.
"""

from __future__ import annotations


class HeadlineError(Exception):
    """Base class for all headline backend errors."""


class InvalidInput(HeadlineError):
    """The submitted headline is missing, not a string, or blank."""


class StoreUnavailable(HeadlineError):
    """The persistence layer (disk or remote call) failed or timed out."""


class CorruptState(HeadlineError):
    """Stored data could not be decoded into headline entries."""
