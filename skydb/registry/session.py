# skydb/registry/session.py
"""
SkyDB Registry: Session

Read-modify-write of registry entries with optimistic concurrency.

Write path (set_file):
    START → UPLOADING → LOOKING_UP → {FOUND, NOT_FOUND, LOOKUP_FAILED}
          → SIGNING → SUBMITTING → {DONE, CONFLICT, FAILED}
    CONFLICT loops back to LOOKING_UP until `max_attempts` updates were tried.

    Revision policy after the lookup:
        FOUND          previous revision + 1
        NOT_FOUND      0
        LOOKUP_FAILED  0  (availability over safety: a spurious failure on an
                          existing key submits revision 0, which the registry
                          answers with CONFLICT, so the retry loop re-reads)

Read path (get_file):
    START → LOOKING_UP → {FOUND → DONE, NOT_FOUND → DONE, LOOKUP_FAILED → FAILED}

Usage:
    session = RegistrySession(registry=MemoryRegistryTransport(),
                              blobs=MemoryBlobStore())
    locator = await session.set_file(user, file_id, b"hello")
    data = await session.get_file(user, file_id)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, Dict, Optional, Tuple, Union

from ..blob.store import BlobStore, ContentLocator, SkyFile
from ..errors import ConflictError, IntegrityError, SkyDBError, TransportError
from ..identity.core import User
from ..wire.file_id import FileID, encode_file_id
from .entry import RegistryEntry, SignedRegistryEntry, sign_entry, verify_entry
from .transport import RegistryTransport, UpdateStatus

logger = logging.getLogger("skydb.session")


# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_ATTEMPTS = 3

Owner = Union[User, bytes]


class SessionState(Enum):
    """Per-operation session state."""
    START = "start"
    LOOKING_UP = "looking_up"
    FOUND = "found"
    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"
    UPLOADING = "uploading"
    SIGNING = "signing"
    SUBMITTING = "submitting"
    DONE = "done"
    CONFLICT = "conflict"
    FAILED = "failed"


TERMINAL_STATES = frozenset({SessionState.DONE, SessionState.FAILED})

TransitionHook = Callable[[SessionState, SessionState], None]


class _Operation:
    """State tracker for one get_file / set_file call."""

    def __init__(self, name: str, hook: Optional[TransitionHook] = None):
        self.name = name
        self.state = SessionState.START
        self._hook = hook

    def to(self, state: SessionState) -> None:
        logger.debug(f"{self.name}: {self.state.value} -> {state.value}")
        previous, self.state = self.state, state
        if self._hook is not None:
            self._hook(previous, state)

    def fail(self) -> None:
        if self.state not in TERMINAL_STATES:
            self.to(SessionState.FAILED)


def _public_key(owner: Owner) -> bytes:
    return owner.public_key if isinstance(owner, User) else bytes(owner)


# =============================================================================
# RegistrySession
# =============================================================================

class RegistrySession:
    """
    Orchestrates lookup → revision → sign → update against injected
    registry and blob store implementations.

    Same-key writes issued from one process are queued on a per-key lock;
    writers in other processes are arbitrated by the registry alone.
    """

    def __init__(
        self,
        registry: RegistryTransport,
        blobs: BlobStore,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        on_transition: Optional[TransitionHook] = None,
    ):
        """
        Initialize session.

        Args:
            registry: Registry transport
            blobs: Blob store for file bodies
            max_attempts: Update attempts before ConflictError (>= 1)
            on_transition: Called with (old, new) on every state change
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._registry = registry
        self._blobs = blobs
        self.max_attempts = max_attempts
        self._on_transition = on_transition

        # (public_key, data_key) -> (lock, holders)
        self._locks: Dict[Tuple[bytes, bytes], Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _key_lock(self, key: Tuple[bytes, bytes]) -> AsyncIterator[None]:
        lock, holders = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, holders + 1)
        try:
            async with lock:
                yield
        finally:
            lock, holders = self._locks[key]
            if holders <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, holders - 1)

    # =========================================================================
    # Lookup
    # =========================================================================

    async def _lookup_verified(
        self,
        public_key: bytes,
        data_key: bytes,
    ) -> Optional[SignedRegistryEntry]:
        entry = await self._registry.lookup(public_key, data_key)
        if entry is None:
            return None
        if entry.data_key != data_key:
            raise IntegrityError("Registry returned an entry for a different key", data_key)
        if not verify_entry(entry, public_key):
            raise IntegrityError("Registry entry signature verification failed", data_key)
        return entry

    async def get_entry(self, owner: Owner, file_id: FileID) -> Optional[SignedRegistryEntry]:
        """
        Fetch and verify the current entry without touching the blob store.

        Returns:
            Verified entry, or None if the key does not exist

        Raises:
            IntegrityError: Entry failed verification
            TransportError: Lookup failed
        """
        op = _Operation("get_entry", self._on_transition)
        try:
            entry = await self._lookup(op, _public_key(owner), encode_file_id(file_id))
            op.to(SessionState.DONE)
            return entry
        except SkyDBError:
            op.fail()
            raise

    async def get_file(self, owner: Owner, file_id: FileID) -> Optional[bytes]:
        """
        Resolve a file through the registry.

        Args:
            owner: The User, or a raw 32-byte public key to read another
                   user's file
            file_id: File to resolve

        Returns:
            File bytes, or None if no entry exists

        Raises:
            IntegrityError: Entry failed verification (blob store untouched)
            TransportError: Lookup or download failed
            NotFoundError: Entry points at a blob the store does not have
        """
        op = _Operation("get_file", self._on_transition)
        try:
            entry = await self._lookup(op, _public_key(owner), encode_file_id(file_id))
            if entry is None:
                op.to(SessionState.DONE)
                return None
            data = await self._blobs.get(entry.locator)
            op.to(SessionState.DONE)
            return data
        except SkyDBError:
            op.fail()
            raise

    async def _lookup(
        self,
        op: _Operation,
        public_key: bytes,
        data_key: bytes,
    ) -> Optional[SignedRegistryEntry]:
        op.to(SessionState.LOOKING_UP)
        try:
            entry = await self._lookup_verified(public_key, data_key)
        except TransportError:
            op.to(SessionState.LOOKUP_FAILED)
            raise
        except asyncio.TimeoutError as e:
            op.to(SessionState.LOOKUP_FAILED)
            raise TransportError("Registry lookup timed out") from e
        op.to(SessionState.FOUND if entry is not None else SessionState.NOT_FOUND)
        return entry

    # =========================================================================
    # Write
    # =========================================================================

    async def _next_entry(
        self,
        op: _Operation,
        user: User,
        data_key: bytes,
        data: bytes,
    ) -> RegistryEntry:
        """Look up the current entry and derive its successor."""
        op.to(SessionState.LOOKING_UP)
        try:
            current = await self._lookup_verified(user.public_key, data_key)
        except (TransportError, asyncio.TimeoutError) as e:
            op.to(SessionState.LOOKUP_FAILED)
            logger.warning(f"Registry lookup failed ({e}), falling back to revision 0")
            return RegistryEntry(data_key, data, 0)

        if current is None:
            op.to(SessionState.NOT_FOUND)
            return RegistryEntry(data_key, data, 0)

        op.to(SessionState.FOUND)
        return current.next(data)

    async def set_file(
        self,
        user: User,
        file_id: FileID,
        file: Union[SkyFile, bytes],
    ) -> ContentLocator:
        """
        Upload a file and point the user's registry entry at it.

        Args:
            user: Owner identity (signs the entry)
            file_id: File to update
            file: SkyFile, or raw bytes named after file_id.filename

        Returns:
            Content locator of the uploaded file

        Raises:
            ConflictError: Every update attempt lost to a concurrent writer
            IntegrityError: Existing entry failed verification
            TransportError: Upload or update submission failed
        """
        if isinstance(file, (bytes, bytearray)):
            file = SkyFile.new(bytes(file), file_id.filename)
        data_key = encode_file_id(file_id)

        op = _Operation("set_file", self._on_transition)
        try:
            op.to(SessionState.UPLOADING)
            locator = await self._blobs.put(file)
            data = locator.encode("utf-8")

            async with self._key_lock((user.public_key, data_key)):
                revision = 0
                for attempt in range(1, self.max_attempts + 1):
                    entry = await self._next_entry(op, user, data_key, data)
                    revision = entry.revision

                    op.to(SessionState.SIGNING)
                    signed = sign_entry(entry, user)

                    op.to(SessionState.SUBMITTING)
                    status = await self._registry.update(signed, user.public_key)
                    if status == UpdateStatus.OK:
                        op.to(SessionState.DONE)
                        logger.info(f"Registry updated: {file_id} @ revision {revision}")
                        return locator

                    op.to(SessionState.CONFLICT)
                    logger.warning(
                        f"Revision {revision} rejected for {file_id} "
                        f"(attempt {attempt}/{self.max_attempts})"
                    )

                raise ConflictError(self.max_attempts, revision)
        except SkyDBError:
            op.fail()
            raise
