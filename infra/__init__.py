# infra/__init__.py
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from infra.http_client import HttpClient, HttpError, VenueApiError


# Services depend on this port rather than on the concrete HttpClient.
class HttpPort(Protocol):
    async def get_public(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any: ...
    async def get_private(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any: ...
    async def post_private(self, path: str, json_body: Mapping[str, Any]) -> Any: ...
    async def close(self) -> None: ...


__all__ = ["HttpPort", "HttpClient", "HttpError", "VenueApiError"]
