# skydb/blob/__init__.py
"""
SkyDB Blob Layer

Content-addressed storage consumed by the registry session.

Components:
    SkyFile: File bytes plus filename/content-type hints
    BlobStore: Abstract put/get interface
    MemoryBlobStore: In-process store
    FileSystemBlobStore: Directory-backed store
"""

from .store import (
    SkyFile,
    BlobStore,
    MemoryBlobStore,
    FileSystemBlobStore,
    ContentLocator,
    compute_locator,
    DEFAULT_CONTENT_TYPE,
)

__all__ = [
    "SkyFile",
    "BlobStore",
    "MemoryBlobStore",
    "FileSystemBlobStore",
    "ContentLocator",
    "compute_locator",
    "DEFAULT_CONTENT_TYPE",
]
