# skydb/portal/config.py
"""
SkyDB Portal Configuration

Environment:
    SKYDB_PORTAL_URL   Portal base URL (default: https://siasky.net)
    SKYDB_TIMEOUT      Request timeout in seconds (default: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote, urlparse


DEFAULT_PORTAL_URL = "https://siasky.net"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "skydb-python"

REGISTRY_PATH = "/skynet/registry"
UPLOAD_PATH = "/skynet/skyfile"


@dataclass
class PortalConfig:
    """
    Portal endpoint settings.

    Attributes:
        portal_url: Base URL, without trailing slash
        registry_path: Registry lookup/update endpoint
        upload_path: Skyfile upload endpoint
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header value
    """
    portal_url: str = DEFAULT_PORTAL_URL
    registry_path: str = REGISTRY_PATH
    upload_path: str = UPLOAD_PATH
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        self.portal_url = self.portal_url.rstrip("/")
        parsed = urlparse(self.portal_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid portal URL: {self.portal_url!r}")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PortalConfig":
        """Build a config from SKYDB_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            portal_url=env.get("SKYDB_PORTAL_URL", DEFAULT_PORTAL_URL),
            timeout=float(env.get("SKYDB_TIMEOUT", DEFAULT_TIMEOUT)),
        )

    @property
    def registry_url(self) -> str:
        return self.portal_url + self.registry_path

    @property
    def upload_url(self) -> str:
        return self.portal_url + self.upload_path

    def download_url(self, locator: str) -> str:
        return f"{self.portal_url}/{quote(locator, safe='')}"
