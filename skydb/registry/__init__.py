# skydb/registry/__init__.py
"""
SkyDB Registry Layer

Signed, versioned key-value entries pointing at blobs.

Components:
    RegistryEntry / SignedRegistryEntry: Entry types and canonical encoding
    RegistryTransport: Abstract lookup/update interface
    MemoryRegistryTransport: In-process registry with the remote rules
    RegistrySession: get_file / set_file with conflict retry

Usage:
    from skydb.registry import RegistrySession, MemoryRegistryTransport
    from skydb.blob import MemoryBlobStore

    session = RegistrySession(MemoryRegistryTransport(), MemoryBlobStore())
    await session.set_file(user, file_id, b"hello")
"""

from .entry import (
    RegistryEntry,
    SignedRegistryEntry,
    MAX_REVISION,
    encode_entry,
    sign_entry,
    verify_entry,
)

from .transport import (
    RegistryTransport,
    MemoryRegistryTransport,
    TransportCall,
    UpdateStatus,
)

from .session import (
    RegistrySession,
    SessionState,
    DEFAULT_MAX_ATTEMPTS,
)

__all__ = [
    # Entries
    "RegistryEntry",
    "SignedRegistryEntry",
    "MAX_REVISION",
    "encode_entry",
    "sign_entry",
    "verify_entry",
    # Transport
    "RegistryTransport",
    "MemoryRegistryTransport",
    "TransportCall",
    "UpdateStatus",
    # Session
    "RegistrySession",
    "SessionState",
    "DEFAULT_MAX_ATTEMPTS",
]
