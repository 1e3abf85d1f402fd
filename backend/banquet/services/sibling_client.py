"""HTTP client for calls to sibling services.

Every call carries a bounded timeout. Transport failures are mapped onto a
small error family so callers can tell "absent" from "unreachable".
"""

from typing import Any, Mapping, Optional
import logging

import httpx

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    pass


class RemoteNotFound(RemoteError):
    pass


class RemoteUnavailable(RemoteError):
    pass


class RemoteTimeout(RemoteUnavailable):
    pass


class SiblingClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def get_json(self, path: str, headers: Optional[Mapping[str, str]] = None) -> Any:
        try:
            resp = self._client.get(path, headers=dict(headers or {}))
        except httpx.TimeoutException as exc:
            logger.warning("Timed out calling %s%s: %s", self.base_url, path, exc)
            raise RemoteTimeout(f"{self.base_url}{path} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Failed calling %s%s: %s", self.base_url, path, exc)
            raise RemoteUnavailable(f"{self.base_url}{path} unreachable") from exc

        if resp.status_code == 404:
            raise RemoteNotFound(path)
        if resp.status_code >= 400:
            logger.warning("%s%s returned %s", self.base_url, path, resp.status_code)
            raise RemoteUnavailable(f"{self.base_url}{path} returned {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteUnavailable(f"{self.base_url}{path} returned invalid JSON") from exc

    def close(self) -> None:
        self._client.close()
