"""
Character API client for the proxy service.
"""

import time
from urllib.parse import quote
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError, UpstreamStatusError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


SERVICE_NAME = "character_api"


class CharacterApiClient:
    """Read-only client for the upstream character API.

    A single ``httpx.AsyncClient`` is reused for every call. When one is
    injected the caller owns it; otherwise the client creates one and closes
    it in :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.logger = get_logger("characters.upstream_client")
        self.metrics = metrics
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    async def get_characters(self) -> List[Dict[str, Any]]:
        """Fetch the character collection (the ``results`` array)."""
        body = await self._get("/character", endpoint="characters")
        return body["results"]

    async def get_character(self, character_id: str) -> Dict[str, Any]:
        """Fetch a single character by identifier.

        The identifier is sent as one path segment; reserved characters are
        percent-encoded rather than interpreted as query or path syntax.
        """
        return await self._get(f"/character/{quote(character_id, safe='')}", endpoint="character")

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, *, endpoint: str) -> Any:
        """Issue one GET against the upstream and decode the JSON body."""
        url = f"{self.base_url}{path}"
        start = time.perf_counter()

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            self._record(endpoint, "transport_error", start)
            self.logger.error("Character API transport error", url=url, error=str(exc))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=str(exc) or exc.__class__.__name__,
                details={"url": url}
            ) from exc

        if response.is_success:
            self._record(endpoint, "success", start)
            self.logger.debug("Character API response", url=url, status_code=response.status_code)
            return response.json()

        self._record(endpoint, "error_status", start)
        self.logger.error(
            "Character API request failed",
            url=url,
            status_code=response.status_code,
            response=response.text
        )
        raise UpstreamStatusError(
            service=SERVICE_NAME,
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type"),
        )

    def _record(self, endpoint: str, outcome: str, start: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("upstream_requests_total", endpoint=endpoint, outcome=outcome)
        self.metrics.observe_histogram(
            "upstream_request_duration_seconds",
            time.perf_counter() - start,
            endpoint=endpoint,
        )
