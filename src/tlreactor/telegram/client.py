from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import anyio
import httpx
import msgspec

from ..logging import get_logger
from .errors import DeadWall, MalformedResponse, TransportError

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.telegram.org"
CONNECT_TIMEOUT_S = 5.0


class BotTransport(Protocol):
    """Performs Bot API calls and returns the decoded JSON envelope."""

    async def call(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> Any: ...

    async def upload(
        self,
        method: str,
        params: Mapping[str, Any],
        *,
        field: str,
        path: Path,
        content_type: str,
    ) -> Any: ...

    async def close(self) -> None: ...


class HttpBotTransport:
    def __init__(
        self,
        token: str,
        *,
        proxy: str | None = None,
        verify_tls: bool = True,
        timeout_s: float = 60,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise ValueError("Telegram token is empty")
        self._base = f"{base_url.rstrip('/')}/bot{token}"
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout_s, connect=CONNECT_TIMEOUT_S),
                proxy=proxy or None,
                verify=verify_tls,
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = http_client

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def call(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        payload = dict(params or {})
        logger.debug("telegram.request", method=method, payload=payload)
        return await self._send(method, json=payload)

    async def upload(
        self,
        method: str,
        params: Mapping[str, Any],
        *,
        field: str,
        path: Path,
        content_type: str,
    ) -> Any:
        try:
            content = await anyio.Path(path).read_bytes()
        except OSError as exc:
            raise TransportError(f"Failed to read upload file {path}: {exc}") from exc
        logger.debug(
            "telegram.upload",
            method=method,
            field=field,
            path=str(path),
            size=len(content),
        )
        return await self._send(
            method,
            data={key: str(value) for key, value in params.items()},
            files={field: (path.name, content, content_type)},
        )

    async def _send(self, method: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.post(f"{self._base}/{method}", **kwargs)
        except httpx.TimeoutException as exc:
            logger.error(
                "telegram.timeout",
                method=method,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise DeadWall(f"{method} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error(
                "telegram.network_error",
                method=method,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise TransportError(f"{method} failed: {exc}") from exc

        try:
            payload = msgspec.json.decode(resp.content)
        except msgspec.DecodeError as exc:
            logger.error(
                "telegram.bad_response",
                method=method,
                status=resp.status_code,
                body=resp.text,
            )
            if resp.is_error:
                raise TransportError(
                    f"{method} failed with HTTP {resp.status_code}"
                ) from exc
            raise MalformedResponse(f"{method} returned invalid JSON: {exc}") from exc

        logger.debug(
            "telegram.response", method=method, status=resp.status_code, payload=payload
        )
        return payload
