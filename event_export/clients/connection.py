"""
DHIS2 Connection: API location and credentials

Holds everything needed to talk to one DHIS2 instance and owns the shared
httpx.AsyncClient that the resource clients issue requests through.

SECURITY NOTES:
- The password is never included in repr() or to_dict()
- Prefer a dedicated read-only API user for exports
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Any
import logging

import httpx

logger = logging.getLogger(__name__)


@dataclass
class Dhis2Connection:
    """
    Connection to a DHIS2 Web API.

    Attributes:
        base_url: Instance URL without the /api suffix (e.g. "https://play.dhis2.org/40")
        username: Basic auth user
        password: Basic auth password
        headers: Extra request headers
        timeout_s: Request timeout in seconds
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
    """
    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout_s: float = 30.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    _client: Optional[httpx.AsyncClient] = field(default=None, init=False, repr=False)

    @property
    def api_url(self) -> str:
        """Base URL of the Web API, e.g. "https://play.dhis2.org/40/api"."""
        return f"{self.base_url.rstrip('/')}/api"

    def auth(self) -> Optional[httpx.BasicAuth]:
        """Basic auth for the configured user, if any."""
        if not self.username:
            return None
        return httpx.BasicAuth(self.username, self.password or "")

    @property
    def client(self) -> httpx.AsyncClient:
        """The shared async HTTP client, created on first use."""
        if self._client is None or self._client.is_closed:
            hdrs = {"Accept": "application/json"}
            hdrs.update(self.headers)
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                auth=self.auth(),
                headers=hdrs,
                timeout=self.timeout_s,
                transport=self.transport,
            )
            logger.info(f"[DHIS2] Opened client for {self.api_url}")
        return self._client

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.info(f"[DHIS2] Closed client for {self.api_url}")
        self._client = None

    async def __aenter__(self) -> "Dhis2Connection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (no password)."""
        return {
            "base_url": self.base_url,
            "username": self.username,
            "headers": list(self.headers.keys()),
            "timeout_s": self.timeout_s,
        }

    def __repr__(self) -> str:
        return (
            f"Dhis2Connection(base_url='{self.base_url}', "
            f"user={self.username}, headers={len(self.headers)})"
        )
