# skydb/client.py
"""
SkyDB Client

Composes a RegistrySession from a registry transport and a blob store.
Platform-specific setups differ only in which implementations are passed in:

    # Portal-backed
    async with SkynetClient.connect(PortalConfig.from_env()) as client:
        await client.set_file(user, file_id, b"hello")

    # In-process
    client = SkynetClient(MemoryRegistryTransport(), MemoryBlobStore())

    # Local directory for blobs
    client = SkynetClient(registry, FileSystemBlobStore("/var/lib/skydb"))
"""

from __future__ import annotations

from typing import Optional, Union

import httpx

from .blob.store import BlobStore, ContentLocator, SkyFile
from .identity.core import User
from .portal.client import PortalBlobStore, PortalRegistryTransport
from .portal.config import PortalConfig
from .registry.entry import SignedRegistryEntry
from .registry.session import DEFAULT_MAX_ATTEMPTS, Owner, RegistrySession
from .registry.transport import RegistryTransport
from .wire.file_id import FileID


class SkynetClient:
    """Client-facing get_file / set_file API."""

    def __init__(
        self,
        registry: RegistryTransport,
        blobs: BlobStore,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        http: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize client.

        Args:
            registry: Registry transport
            blobs: Blob store
            max_attempts: Conflict retry bound for set_file
            http: HTTP client owned by this instance (closed by aclose)
        """
        self.registry = registry
        self.blobs = blobs
        self.session = RegistrySession(registry, blobs, max_attempts=max_attempts)
        self._http = http

    @classmethod
    def connect(
        cls,
        config: Optional[PortalConfig] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SkynetClient":
        """
        Create a portal-backed client.

        Args:
            config: Portal settings (defaults to PortalConfig.from_env())
            max_attempts: Conflict retry bound
            transport: Custom httpx transport (e.g. httpx.MockTransport)
        """
        config = config or PortalConfig.from_env()
        http = httpx.AsyncClient(transport=transport, follow_redirects=True)
        return cls(
            registry=PortalRegistryTransport(http, config),
            blobs=PortalBlobStore(http, config),
            max_attempts=max_attempts,
            http=http,
        )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> "SkynetClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # =========================================================================
    # Public API
    # =========================================================================

    async def get_file(self, owner: Owner, file_id: FileID) -> Optional[bytes]:
        """File bytes for (owner, file_id), or None if never set."""
        return await self.session.get_file(owner, file_id)

    async def get_entry(self, owner: Owner, file_id: FileID) -> Optional[SignedRegistryEntry]:
        """Verified registry entry for (owner, file_id), or None."""
        return await self.session.get_entry(owner, file_id)

    async def set_file(
        self,
        user: User,
        file_id: FileID,
        file: Union[SkyFile, bytes],
    ) -> ContentLocator:
        """Upload `file` and point the registry entry at it."""
        return await self.session.set_file(user, file_id, file)
