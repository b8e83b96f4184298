# skydb/portal/__init__.py
"""
SkyDB Portal Layer

HTTP implementations of the registry transport and blob store.

Components:
    PortalConfig: Endpoint settings (SKYDB_PORTAL_URL, SKYDB_TIMEOUT)
    PortalRegistryTransport: /skynet/registry lookup and update
    PortalBlobStore: /skynet/skyfile upload, /<skylink> download
"""

from .config import (
    PortalConfig,
    DEFAULT_PORTAL_URL,
    DEFAULT_TIMEOUT,
    REGISTRY_PATH,
    UPLOAD_PATH,
)

from .client import (
    PortalRegistryTransport,
    PortalBlobStore,
    parse_lookup_body,
)

__all__ = [
    "PortalConfig",
    "DEFAULT_PORTAL_URL",
    "DEFAULT_TIMEOUT",
    "REGISTRY_PATH",
    "UPLOAD_PATH",
    "PortalRegistryTransport",
    "PortalBlobStore",
    "parse_lookup_body",
]
