# skydb/blob/store.py
"""
SkyDB Blob Store

Content-addressed storage for immutable file bodies. The registry only
ever stores the locator returned by `put`; the core treats it as opaque.

Built-in stores compute skylink-shaped locators:

    locator = base64url(0x00 0x00 || BLAKE2b-256(data)), unpadded (46 chars)

Usage:
    store = MemoryBlobStore()
    locator = await store.put(SkyFile.new(b"hello", "hello.txt"))
    data = await store.get(locator)
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import mimetypes
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import EncodingError, IntegrityError, NotFoundError, TransportError

logger = logging.getLogger("skydb.blob")


# =============================================================================
# Constants
# =============================================================================

DEFAULT_CONTENT_TYPE = "application/octet-stream"
LOCATOR_PREFIX = b"\x00\x00"
LOCATOR_LENGTH = 46

ContentLocator = str


def compute_locator(data: bytes) -> ContentLocator:
    """Content address of `data`."""
    digest = hashlib.blake2b(data, digest_size=32).digest()
    return base64.urlsafe_b64encode(LOCATOR_PREFIX + digest).decode("ascii").rstrip("=")


def _locator_digest(locator: ContentLocator) -> bytes:
    if not isinstance(locator, str) or len(locator) != LOCATOR_LENGTH:
        raise EncodingError(f"Malformed content locator: {locator!r}")
    try:
        raw = base64.urlsafe_b64decode(locator + "==")
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Malformed content locator: {locator!r}") from e
    return raw[len(LOCATOR_PREFIX):]


# =============================================================================
# SkyFile
# =============================================================================

@dataclass
class SkyFile:
    """
    File body plus upload hints.

    Attributes:
        data: Raw file bytes
        filename: Name hint sent with the upload
        content_type: MIME type hint
    """
    data: bytes
    filename: str
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def new(
        cls,
        data: Union[bytes, str],
        filename: str,
        content_type: Optional[str] = None,
    ) -> "SkyFile":
        """Create a SkyFile, guessing the content type from the name."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
        return cls(data=bytes(data), filename=filename, content_type=content_type)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "SkyFile":
        """Read a file from disk."""
        path = Path(path)
        return cls.new(path.read_bytes(), path.name, content_type)

    def __len__(self) -> int:
        return len(self.data)


# =============================================================================
# Blob Store (Abstract)
# =============================================================================

class BlobStore(ABC):
    """Abstract content-addressed blob store."""

    @abstractmethod
    async def put(self, file: SkyFile) -> ContentLocator:
        """Store file bytes and return their locator."""
        pass

    @abstractmethod
    async def get(self, locator: ContentLocator) -> bytes:
        """
        Fetch bytes by locator.

        Raises:
            NotFoundError: Unknown locator
            TransportError: Store unreachable
        """
        pass


class MemoryBlobStore(BlobStore):
    """In-memory blob store for tests and single-process use."""

    def __init__(self):
        self._blobs: Dict[ContentLocator, SkyFile] = {}
        self.puts: List[SkyFile] = []
        self.gets: List[ContentLocator] = []

    async def put(self, file: SkyFile) -> ContentLocator:
        locator = compute_locator(file.data)
        self._blobs[locator] = file
        self.puts.append(file)
        return locator

    async def get(self, locator: ContentLocator) -> bytes:
        self.gets.append(locator)
        try:
            return self._blobs[locator].data
        except KeyError:
            raise NotFoundError(f"Blob not found: {locator}") from None

    def __contains__(self, locator: object) -> bool:
        return locator in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)


class FileSystemBlobStore(BlobStore):
    """
    Directory-backed blob store.

    Layout:
        root/<hex digest[:2]>/<hex digest>        file body
        root/<hex digest[:2]>/<hex digest>.json   {"filename", "content_type"}

    Files are written to a temporary name and renamed into place, so a
    reader never sees a partial body. Bodies are re-hashed on read.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, locator: ContentLocator) -> Path:
        digest = _locator_digest(locator).hex()
        return self.root / digest[:2] / digest

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        finally:
            Path(tmp).unlink(missing_ok=True)

    def _is_intact(self, path: Path, locator: ContentLocator) -> bool:
        try:
            return compute_locator(path.read_bytes()) == locator
        except FileNotFoundError:
            return False

    async def put(self, file: SkyFile) -> ContentLocator:
        locator = compute_locator(file.data)
        path = self._path(locator)
        meta = json.dumps({
            "filename": file.filename,
            "content_type": file.content_type,
        }).encode("utf-8")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # a damaged body left by an interrupted write is replaced
            if not self._is_intact(path, locator):
                self._write_atomic(path, file.data)
            self._write_atomic(path.with_suffix(".json"), meta)
        except OSError as e:
            raise TransportError(f"Failed to write blob {locator}: {e}") from e
        logger.debug(f"Stored {len(file.data)} bytes as {locator}")
        return locator

    async def get(self, locator: ContentLocator) -> bytes:
        path = self._path(locator)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(f"Blob not found: {locator}") from None
        except OSError as e:
            raise TransportError(f"Failed to read blob {locator}: {e}") from e
        if compute_locator(data) != locator:
            raise IntegrityError(f"Stored blob does not match its locator: {locator}")
        return data
