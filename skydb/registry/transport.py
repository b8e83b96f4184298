# skydb/registry/transport.py
"""
SkyDB Registry: Transport Interface

The session talks to the registry only through `RegistryTransport`:

    lookup(public_key, data_key) -> SignedRegistryEntry | None
    update(signed_entry, public_key) -> UpdateStatus.OK | UpdateStatus.CONFLICT

Both raise TransportError for network/portal failures. `None` means the key
does not exist; it is never used to report a failure.

Usage:
    registry = MemoryRegistryTransport()
    status = await registry.update(signed, user.public_key)
    entry = await registry.lookup(user.public_key, signed.data_key)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from ..errors import TransportError
from .entry import SignedRegistryEntry, verify_entry

logger = logging.getLogger("skydb.registry")


class UpdateStatus(IntEnum):
    """Registry answer to an update."""
    OK = 0
    CONFLICT = 1  # revision not strictly greater than the stored one


# =============================================================================
# Registry Transport (Abstract)
# =============================================================================

class RegistryTransport(ABC):
    """Abstract registry transport."""

    @abstractmethod
    async def lookup(
        self,
        public_key: bytes,
        data_key: bytes,
    ) -> Optional[SignedRegistryEntry]:
        """
        Fetch the current entry for (public_key, data_key).

        Returns:
            The stored signed entry, or None if the key does not exist

        Raises:
            TransportError: Network failure, timeout or malformed response
        """
        pass

    @abstractmethod
    async def update(
        self,
        entry: SignedRegistryEntry,
        public_key: bytes,
    ) -> UpdateStatus:
        """
        Submit a signed entry.

        Raises:
            TransportError: Network failure or rejected submission
        """
        pass


# =============================================================================
# Memory Registry (for testing without a portal)
# =============================================================================

@dataclass
class TransportCall:
    """Recorded transport call."""
    method: str
    public_key: bytes
    data_key: bytes
    revision: Optional[int] = None


class MemoryRegistryTransport(RegistryTransport):
    """
    In-memory registry with the remote registry's accept/reject rules.

    - Updates with a bad signature are rejected (TransportError)
    - Updates whose revision is not strictly greater are CONFLICT
    - Every call is recorded in `calls`

    Fault injection:
        fail_lookups: next N lookups raise TransportError
        conflicts: next N updates answer CONFLICT regardless of revision
    """

    def __init__(self):
        self._entries: Dict[Tuple[bytes, bytes], SignedRegistryEntry] = {}
        self.calls: List[TransportCall] = []
        self.fail_lookups = 0
        self.conflicts = 0

    def lookups(self) -> List[TransportCall]:
        return [c for c in self.calls if c.method == "lookup"]

    def updates(self) -> List[TransportCall]:
        return [c for c in self.calls if c.method == "update"]

    def put_entry(self, public_key: bytes, entry: SignedRegistryEntry) -> None:
        """Store an entry directly, bypassing all checks."""
        self._entries[(public_key, entry.data_key)] = entry

    def get_entry(self, public_key: bytes, data_key: bytes) -> Optional[SignedRegistryEntry]:
        return self._entries.get((public_key, data_key))

    async def lookup(
        self,
        public_key: bytes,
        data_key: bytes,
    ) -> Optional[SignedRegistryEntry]:
        self.calls.append(TransportCall("lookup", public_key, data_key))
        if self.fail_lookups > 0:
            self.fail_lookups -= 1
            raise TransportError("Injected lookup failure", status_code=500)
        return self._entries.get((public_key, data_key))

    async def update(
        self,
        entry: SignedRegistryEntry,
        public_key: bytes,
    ) -> UpdateStatus:
        self.calls.append(
            TransportCall("update", public_key, entry.data_key, entry.revision)
        )
        if not verify_entry(entry, public_key):
            raise TransportError("Registry rejected entry: invalid signature", status_code=400)
        if self.conflicts > 0:
            self.conflicts -= 1
            return UpdateStatus.CONFLICT

        current = self._entries.get((public_key, entry.data_key))
        if current is not None and entry.revision <= current.revision:
            logger.debug(
                f"Rejecting revision {entry.revision} (stored: {current.revision})"
            )
            return UpdateStatus.CONFLICT

        self._entries[(public_key, entry.data_key)] = entry
        return UpdateStatus.OK
