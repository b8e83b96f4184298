# skydb/registry/entry.py
"""
SkyDB Registry: Entries, Signing and Verification

A registry entry maps (public key, DataKey) to a data pointer plus a
revision counter. The registry authenticates writes by signature only, so
the signed bytes must be reproducible bit-for-bit by any verifier.

Signed Payload (all integers u64 little-endian):
    ┌──────────────┬──────────┬──────────┬──────┬──────────┐
    │ len(data_key)│ data_key │ len(data)│ data │ revision │
    │      8B      │    var   │    8B    │  var │    8B    │
    └──────────────┴──────────┴──────────┴──────┴──────────┘

Usage:
    entry = RegistryEntry(data_key=fid.to_bytes(), data=b"CABAB...", revision=0)
    signed = sign_entry(entry, user)
    verify_entry(signed, user.public_key)  # True
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import EncodingError
from ..identity.core import SIGNATURE_SIZE, verify_signature

if TYPE_CHECKING:
    from ..identity.core import User


# =============================================================================
# Constants
# =============================================================================

MAX_REVISION = 2**64 - 1

_U64 = struct.Struct("<Q")


def _check_revision(revision: int) -> None:
    if not isinstance(revision, int) or isinstance(revision, bool):
        raise EncodingError(f"Revision must be an integer, got {type(revision).__name__}")
    if revision < 0 or revision > MAX_REVISION:
        raise EncodingError(f"Revision out of u64 range: {revision}")


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class RegistryEntry:
    """
    Unsigned registry entry.

    Attributes:
        data_key: Canonical FileID encoding (the "tweak")
        data: Content locator bytes (e.g. a skylink)
        revision: u64 optimistic-concurrency counter
    """
    data_key: bytes
    data: bytes
    revision: int

    def __post_init__(self):
        _check_revision(self.revision)

    def next(self, data: bytes) -> "RegistryEntry":
        """Successor entry carrying `data` at revision + 1."""
        if self.revision == MAX_REVISION:
            raise EncodingError("Revision counter exhausted, entry cannot be updated")
        return RegistryEntry(self.data_key, data, self.revision + 1)


@dataclass(frozen=True)
class SignedRegistryEntry(RegistryEntry):
    """Registry entry with its Ed25519 signature."""
    signature: bytes = b""

    @property
    def entry(self) -> RegistryEntry:
        """The unsigned part."""
        return RegistryEntry(self.data_key, self.data, self.revision)

    @property
    def locator(self) -> str:
        """Data pointer decoded as a content locator string."""
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Entry data is not a valid locator: {e}") from e


# =============================================================================
# Encoding / Signing
# =============================================================================

def encode_entry(entry: RegistryEntry) -> bytes:
    """Canonical signed payload of an entry."""
    _check_revision(entry.revision)
    return b"".join((
        _U64.pack(len(entry.data_key)),
        bytes(entry.data_key),
        _U64.pack(len(entry.data)),
        bytes(entry.data),
        _U64.pack(entry.revision),
    ))


def sign_entry(entry: RegistryEntry, user: "User") -> SignedRegistryEntry:
    """Sign an entry with the user's private key."""
    signature = user.sign(encode_entry(entry))
    if len(signature) != SIGNATURE_SIZE:
        raise EncodingError(f"Unexpected signature size: {len(signature)}")
    return SignedRegistryEntry(
        data_key=entry.data_key,
        data=entry.data,
        revision=entry.revision,
        signature=signature,
    )


def verify_entry(signed: SignedRegistryEntry, public_key: bytes) -> bool:
    """
    Check an entry's signature against a public key.

    Pure function of (payload, signature, public key). Returns False for a
    tampered payload, a foreign key, or a missing/short signature.
    """
    try:
        payload = encode_entry(signed)
    except EncodingError:
        return False
    return verify_signature(public_key, payload, signed.signature)
