# skydb/__init__.py
"""
SkyDB: Signed Registry Entries over Content-Addressed Storage

Mutable, signed pointers to immutable blobs:
- Deterministic Ed25519 identities derived from credentials
- Canonical FileID → DataKey encoding
- Signed, revisioned registry entries
- Optimistic-concurrency read-modify-write with bounded conflict retry

Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │  skydb                                                   │
    │  ├── identity/      # User, derive_identity              │
    │  ├── wire/          # FileID, DataKey codec              │
    │  ├── registry/      # Entries, transport, session        │
    │  ├── blob/          # SkyFile, blob stores               │
    │  ├── portal/        # HTTP registry + blob store (httpx) │
    │  └── client.py      # SkynetClient                       │
    └──────────────────────────────────────────────────────────┘

Quick Start:
    import skydb

    user = skydb.derive_identity("john.doe@example.com", "supersecret")
    fid = skydb.build_file_id("SkySkapp", skydb.FileType.PUBLIC_UNENCRYPTED, "foo.txt")

    async with skydb.SkynetClient.connect() as client:
        skylink = await client.set_file(user, fid, b"thisistext")
        data = await client.get_file(user, fid)
"""

__version__ = "0.1.0"

# =============================================================================
# Errors
# =============================================================================

from .errors import (
    SkyDBError,
    IntegrityError,
    NotFoundError,
    TransportError,
    ConflictError,
    EncodingError,
)

# =============================================================================
# Identity / Wire
# =============================================================================

from .identity import User, derive_identity

from .wire import (
    FileID,
    FileType,
    build_file_id,
    encode_file_id,
    decode_file_id,
)

# =============================================================================
# Registry / Blob
# =============================================================================

from .registry import (
    RegistryEntry,
    SignedRegistryEntry,
    encode_entry,
    sign_entry,
    verify_entry,
    RegistryTransport,
    MemoryRegistryTransport,
    UpdateStatus,
    RegistrySession,
    SessionState,
)

from .blob import (
    SkyFile,
    BlobStore,
    MemoryBlobStore,
    FileSystemBlobStore,
    compute_locator,
)

# =============================================================================
# Portal / Client
# =============================================================================

from .portal import PortalConfig, PortalRegistryTransport, PortalBlobStore
from .client import SkynetClient

__all__ = [
    "__version__",
    # Errors
    "SkyDBError",
    "IntegrityError",
    "NotFoundError",
    "TransportError",
    "ConflictError",
    "EncodingError",
    # Identity
    "User",
    "derive_identity",
    # Wire
    "FileID",
    "FileType",
    "build_file_id",
    "encode_file_id",
    "decode_file_id",
    # Registry
    "RegistryEntry",
    "SignedRegistryEntry",
    "encode_entry",
    "sign_entry",
    "verify_entry",
    "RegistryTransport",
    "MemoryRegistryTransport",
    "UpdateStatus",
    "RegistrySession",
    "SessionState",
    # Blob
    "SkyFile",
    "BlobStore",
    "MemoryBlobStore",
    "FileSystemBlobStore",
    "compute_locator",
    # Portal / Client
    "PortalConfig",
    "PortalRegistryTransport",
    "PortalBlobStore",
    "SkynetClient",
]
