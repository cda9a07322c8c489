"""
HTTP request executor for the REST API.
"""

from typing import Any, Dict, Optional

import httpx

from shared.config import IdentitySettings
from shared.errors import RemoteLookupError, ResourceError
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception


def _encode_query(query: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not query:
        return None
    params = {}
    for key, value in query.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[key] = value
    return params


class HttpRequestExecutor:
    """Executes requests with HTTP Basic auth using the tenant API key.

    Transport failures are retried; any response with a status of 400 or
    above is raised as a ``ResourceError``.
    """

    def __init__(
        self,
        settings: IdentitySettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.base_url = settings.base_url.rstrip("/")
        self.logger = get_logger("identity_sdk.datastore.http")
        self.retry_config = retry_config or RetryConfig(
            max_attempts=settings.http_max_attempts,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )

        auth = None
        if settings.api_key_id and settings.api_key_secret:
            auth = httpx.BasicAuth(settings.api_key_id, settings.api_key_secret)

        self._client = client or httpx.AsyncClient(
            auth=auth,
            timeout=settings.http_timeout,
            headers={"Accept": "application/json", "User-Agent": "identity-sdk-python"},
        )

    def _url(self, href: str) -> str:
        if href.startswith("http://") or href.startswith("https://"):
            return href
        return f"{self.base_url}/{href.lstrip('/')}"

    async def execute(
        self,
        method: str,
        href: str,
        *,
        query: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = self._url(href)

        @retry_on_exception((httpx.TransportError,), config=self.retry_config)
        async def _send() -> httpx.Response:
            return await self._client.request(
                method,
                url,
                params=_encode_query(query),
                json=json if form is None else None,
                data=form,
            )

        try:
            response = await _send()
        except RetryError as exc:
            self.logger.error(
                "Remote request failed",
                method=method,
                url=url,
                attempts=exc.attempts,
                error=str(exc.last_exception)
            )
            raise RemoteLookupError(
                f"Request to {url} failed: {exc.last_exception}",
                details={"method": method, "url": url, "attempts": exc.attempts},
            ) from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            if not isinstance(body, dict):
                body = {"message": str(body)}
            body.setdefault("status", response.status_code)
            self.logger.info("Remote request rejected", method=method, url=url, status_code=response.status_code)
            raise ResourceError(url, body)

        self.logger.debug("Remote request completed", method=method, url=url, status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
