# infra/http_client.py
from __future__ import annotations

import asyncio
import hashlib
import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import aiohttp

from tradesync.errors import RemoteError
from utils.logger import get_logger

JSON_SEPARATORS = (",", ":")
SUCCESS_CODE = 200


class HttpError(RemoteError):
    """Transport failure, HTTP error status or unparseable payload."""
    def __init__(self, status: int, message: str, payload: Optional[dict] = None):
        super().__init__(f"HTTP {status}: {message}", code=str(status))
        self.status = status
        self.payload = payload or {}


class VenueApiError(RemoteError):
    """Venue answered with a non-success envelope code."""
    def __init__(self, code: Any, msg: str, payload: dict | None = None):
        super().__init__(f"venue API error: {msg}", code=str(code))
        self.payload = payload or {}


def _json_dumps_compact(obj: Any) -> str:
    return json.dumps(obj, separators=JSON_SEPARATORS, ensure_ascii=False)


def _build_query(params: Optional[Mapping[str, Any]]) -> str:
    if not params:
        return ""
    return "?" + urlencode(params, doseq=True, safe=":/")


def _mask(s: Optional[str]) -> str:
    if not s:
        return ""
    if len(s) <= 8:
        return "*" * len(s)
    return s[:4] + "*" * (len(s) - 8) + s[-4:]


def sign_params(params: Mapping[str, Any], secret_key: str) -> str:
    """
    Venue signature: MD5 over the sorted "k=v&..." string with
    "&secretKey=<secret>" appended, upper-case hex.
    """
    prehash = "&".join(f"{k}={params[k]}" for k in sorted(params))
    prehash += f"&secretKey={secret_key}"
    return hashlib.md5(prehash.encode("utf-8")).hexdigest().upper()


class HttpClient:
    def __init__(self,
                 cfg: Mapping[str, Any],
                 logger=None,
                 api_key: Optional[str] = None,
                 secret_key: Optional[str] = None,
                 *,
                 timeout_ms: Optional[int] = None,
                 session: Optional[aiohttp.ClientSession] = None,
                 ) -> None:
        self.cfg = cfg
        self.log = logger or get_logger("HttpClient")
        self.session = session
        self._owned_session = session is None

        venue_cfg = cfg.get("venue", {})
        self.base_url = str(venue_cfg.get("rest_base", "https://api.c2cx.com")).rstrip("/")

        # credentials
        self.api_key = api_key if api_key is not None else venue_cfg.get("api_key")
        self.secret_key = secret_key if secret_key is not None else venue_cfg.get("api_secret")

        timeouts_cfg = cfg.get("timeouts", {})
        self.timeout_ms = int(timeout_ms or timeouts_cfg.get("rest_ms", 3000))

        self.log.debug(f"HttpClient init base_url={self.base_url} key={_mask(self.api_key)}")

    # ---- async context manager ----------------------------------------------------
    async def __aenter__(self) -> "HttpClient":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owned_session and self.session is not None and not self.session.closed:
            await self.session.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._owned_session and (self.session is None or self.session.closed):
            timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000.0)
            self.session = aiohttp.ClientSession(timeout=timeout, raise_for_status=False, trust_env=True)
        return self.session

    def _auth_params(self, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        if not (self.api_key and self.secret_key):
            raise VenueApiError("401", "missing API credentials")
        signed = {k: v for k, v in (params or {}).items() if v is not None}
        signed["apiKey"] = self.api_key
        signed["sign"] = sign_params(signed, self.secret_key)
        return signed

    async def request(
            self,
            method: str,
            path: str,
            *,
            params: Optional[Mapping[str, Any]] = None,
            json_body: Optional[Mapping[str, Any]] = None,
            auth: bool = False,
            timeout_ms: Optional[int] = None,
        ) -> Any:
        """
        Single venue round-trip, no retries.
        - path: starts with "/"
        - auth: sign `params` (GET) or `json_body` (POST) with apiKey/sign
        Returns the envelope's `data` member.
        """
        assert path.startswith("/"), "path must start with /"
        method = method.upper()
        if auth:
            if method == "GET":
                params = self._auth_params(params)
            else:
                json_body = self._auth_params(json_body)

        url = self.base_url + path + _build_query(params)
        body_str = _json_dumps_compact(json_body) if json_body else None
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        timeout_ctx = aiohttp.ClientTimeout(total=(timeout_ms or self.timeout_ms) / 1000.0)

        session = self._ensure_session()
        try:
            async with session.request(method, url, data=body_str, headers=headers, timeout=timeout_ctx) as resp:
                text = await resp.text()
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HttpError(599, f"Network error: {e}") from e

        if status >= 400:
            raise HttpError(status, text[:256])

        try:
            payload = json.loads(text) if text else {}
        except json.JSONDecodeError as e:
            raise HttpError(status, f"invalid json: {text[:256]}") from e

        if not isinstance(payload, dict) or "code" not in payload:
            raise HttpError(status, f"unexpected envelope: {text[:256]}")

        try:
            code = int(payload.get("code"))
        except (TypeError, ValueError):
            code = None
        if code != SUCCESS_CODE:
            raise VenueApiError(payload.get("code"), str(payload.get("message", "")), payload)
        return payload.get("data")

    # ---- wrappers -----------------------------------------------------------------
    async def get_public(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params, auth=False)

    async def get_private(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params, auth=True)

    async def post_private(self, path: str, json_body: Mapping[str, Any]) -> Any:
        return await self.request("POST", path, json_body=json_body, auth=True)
