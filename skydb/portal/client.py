# skydb/portal/client.py
"""
SkyDB Portal Transport (HTTP)

Registry and blob store backed by a Skynet portal.

Endpoints:
    GET  /skynet/registry?userid=<hex pk>&fileid=<DataKey>
         200 {"Tweak": hex, "Data": str, "Revision": int, "Signature": hex}
         404 not found
    POST /skynet/registry   form: publickey, fileid, revision, data, signature
         200/204 ok, 409 (or 400 "revision ...") conflict
    POST /skynet/skyfile    multipart "file" → {"skylink": str}
    GET  /<skylink>         file body

Usage:
    async with httpx.AsyncClient() as http:
        registry = PortalRegistryTransport(http, PortalConfig())
        blobs = PortalBlobStore(http, PortalConfig())
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..blob.store import BlobStore, ContentLocator, SkyFile
from ..errors import EncodingError, NotFoundError, TransportError
from ..registry.entry import SignedRegistryEntry
from ..registry.transport import RegistryTransport, UpdateStatus
from .config import PortalConfig

logger = logging.getLogger("skydb.portal")


# =============================================================================
# Helpers
# =============================================================================

def _wire_key(data_key: bytes) -> str:
    try:
        return data_key.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"DataKey is not UTF-8: {e}") from e


def parse_lookup_body(body: Any, data_key: bytes) -> SignedRegistryEntry:
    """
    Parse a registry lookup response body.

    An empty Tweak stands for the requested key.

    Raises:
        TransportError: Missing fields or undecodable values
    """
    try:
        tweak = body.get("Tweak") or ""
        data = body["Data"]
        if not isinstance(data, str):
            raise TypeError(f"Data must be a string, got {type(data).__name__}")
        revision = body["Revision"]
        if not isinstance(revision, int) or isinstance(revision, bool):
            raise TypeError(f"Revision must be an integer, got {type(revision).__name__}")
        return SignedRegistryEntry(
            data_key=bytes.fromhex(tweak) if tweak else data_key,
            data=data.encode("utf-8"),
            revision=revision,
            signature=bytes.fromhex(body.get("Signature") or ""),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise TransportError(f"Malformed registry response: {e}") from e


class _PortalService:
    """Shared request handling for portal-backed services."""

    def __init__(self, http: httpx.AsyncClient, config: Optional[PortalConfig] = None):
        self._http = http
        self._config = config or PortalConfig()

    @property
    def config(self) -> PortalConfig:
        return self._config

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug(f"{method} {url}")
        try:
            return await self._http.request(
                method,
                url,
                timeout=self._config.timeout,
                headers={"User-Agent": self._config.user_agent},
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Portal request timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Portal request failed: {method} {url}: {e}") from e


# =============================================================================
# Registry
# =============================================================================

class PortalRegistryTransport(_PortalService, RegistryTransport):
    """Registry transport over the portal's /skynet/registry endpoint."""

    async def lookup(
        self,
        public_key: bytes,
        data_key: bytes,
    ) -> Optional[SignedRegistryEntry]:
        params = {
            "userid": public_key.hex(),
            "fileid": _wire_key(data_key),
        }
        response = await self._request("GET", self._config.registry_url, params=params)

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise TransportError(
                f"Registry lookup failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Registry lookup returned invalid JSON: {e}") from e
        return parse_lookup_body(body, data_key)

    async def update(
        self,
        entry: SignedRegistryEntry,
        public_key: bytes,
    ) -> UpdateStatus:
        form: Dict[str, str] = {
            "publickey": public_key.hex(),
            "fileid": _wire_key(entry.data_key),
            "revision": str(entry.revision),
            "data": entry.locator,
            "signature": entry.signature.hex(),
        }
        response = await self._request("POST", self._config.registry_url, data=form)

        if response.is_success:
            return UpdateStatus.OK
        if response.status_code == 409 or (
            response.status_code == 400 and "revision" in response.text.lower()
        ):
            return UpdateStatus.CONFLICT
        raise TransportError(
            f"Registry update failed: HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )


# =============================================================================
# Blob Store
# =============================================================================

class PortalBlobStore(_PortalService, BlobStore):
    """Blob store over the portal's skyfile upload and download endpoints."""

    async def put(self, file: SkyFile) -> ContentLocator:
        files = {"file": (file.filename, file.data, file.content_type)}
        response = await self._request("POST", self._config.upload_url, files=files)

        if not response.is_success:
            raise TransportError(
                f"Upload failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            skylink = response.json()["skylink"]
        except (ValueError, KeyError, TypeError) as e:
            raise TransportError(f"Malformed upload response: {e}") from e
        if not isinstance(skylink, str) or not skylink:
            raise TransportError(f"Malformed upload response: skylink={skylink!r}")

        logger.info(f"Uploaded {file.filename} ({len(file.data)} bytes) → {skylink}")
        return skylink

    async def get(self, locator: ContentLocator) -> bytes:
        response = await self._request("GET", self._config.download_url(locator))

        if response.status_code == 404:
            raise NotFoundError(f"Blob not found: {locator}")
        if not response.is_success:
            raise TransportError(
                f"Download failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content
