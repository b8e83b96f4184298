# skydb/errors.py
"""
SkyDB Error Taxonomy

    SkyDBError
    ├── IntegrityError   signature verification failed, data must not be used
    ├── NotFoundError    key or blob absent (expected, callers branch on it)
    ├── TransportError   network/portal failure, distinct from NotFound
    ├── ConflictError    a racing writer kept winning until retries ran out
    └── EncodingError    malformed FileID / entry (programmer error)
"""

from __future__ import annotations

from typing import Optional


class SkyDBError(Exception):
    """Base SkyDB error."""
    pass


class IntegrityError(SkyDBError):
    """Registry entry failed signature or key verification."""
    def __init__(self, message: str, data_key: Optional[bytes] = None):
        self.data_key = data_key
        super().__init__(message)


class NotFoundError(SkyDBError):
    """Requested registry entry or blob does not exist."""
    pass


class TransportError(SkyDBError):
    """Registry transport or blob store failure."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ConflictError(SkyDBError):
    """Update kept losing against a concurrent writer."""
    def __init__(self, attempts: int, revision: int):
        self.attempts = attempts
        self.revision = revision
        super().__init__(
            f"Registry update rejected after {attempts} attempt(s), "
            f"last revision tried: {revision}"
        )


class EncodingError(SkyDBError, ValueError):
    """Malformed FileID, credentials or entry payload."""
    pass
