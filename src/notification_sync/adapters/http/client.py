"""HTTP adapter – HttpxHttpClient."""
from __future__ import annotations

from typing import Any

import httpx

from notification_sync.kernel.errors import ExternalServiceError, TimeoutError as InfraTimeoutError


class HttpxHttpClient:
    """Thin async httpx wrapper with structured error mapping.

    Authentication is the caller's business: pass ``headers`` or ``auth``
    through ``**kwargs`` and they reach :class:`httpx.AsyncClient`.
    """

    def __init__(self, base_url: str = "", timeout: float = 10.0, **kwargs: Any) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs)

    async def __aenter__(self) -> "HttpxHttpClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._request("GET", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._request("DELETE", url, **kwargs)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise InfraTimeoutError(f"HTTP request timed out: {method} {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                service=url,
                message=f"HTTP {exc.response.status_code} from {method} {url}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(service=url, message=str(exc)) from exc


__all__ = ["HttpxHttpClient"]
