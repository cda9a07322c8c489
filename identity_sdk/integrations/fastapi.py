"""
FastAPI dependencies for API key and bearer token authentication.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, Request

from shared.errors import IdentityClientError
from shared.logging import get_logger, set_request_id
from ..authc.credentials import ScopeFactory

logger = get_logger("identity_sdk.integrations.fastapi")


async def request_from_fastapi(request: Request) -> Dict[str, Any]:
    """Convert a FastAPI request into the mapping the authenticators read."""
    body: Any = None
    content_type = request.headers.get("content-type", "")
    if request.method in ("POST", "PUT", "PATCH"):
        if content_type.startswith("application/json"):
            try:
                body = await request.json()
            except ValueError:
                body = None
        elif content_type.startswith("application/x-www-form-urlencoded") or content_type.startswith(
            "multipart/form-data"
        ):
            body = dict(await request.form())

    return {
        "method": request.method,
        "url": str(request.url),
        "headers": dict(request.headers),
        "cookies": dict(request.cookies),
        "body": body,
    }


def _http_error(exc: IdentityClientError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return HTTPException(
        status_code=exc.status_code,
        detail=exc.to_response().model_dump(exclude_none=True),
        headers=headers,
    )


class ApiRequestAuthenticator:
    """Dependency running ``Application.authenticate_api_request`` on the current request.

    ``application`` is an :class:`identity_sdk.Application` fetched at startup.
    """

    def __init__(
        self,
        application: Any,
        *,
        ttl: Optional[int] = None,
        scope_factory: Optional[ScopeFactory] = None,
        locations: Optional[Iterable[str]] = None,
    ):
        self.application = application
        self.ttl = ttl
        self.scope_factory = scope_factory
        self.locations = locations

    async def __call__(self, request: Request):
        set_request_id(request.headers.get("x-request-id"))
        shaped = await request_from_fastapi(request)
        try:
            result = await self.application.authenticate_api_request(
                shaped, ttl=self.ttl, scope_factory=self.scope_factory, locations=self.locations
            )
        except IdentityClientError as exc:
            logger.warning("API request authentication failed", code=exc.code, status_code=exc.status_code)
            raise _http_error(exc) from exc

        request.state.auth_result = result
        return result


class BearerTokenAuthenticator:
    """Dependency validating a bearer token with a ``JwtAuthenticator`` or ``AccessTokenAuthenticator``."""

    def __init__(self, authenticator: Any, cookie_name: Optional[str] = None):
        self.authenticator = authenticator
        self.cookie_name = cookie_name or getattr(authenticator, "effective_cookie_name", "access_token")

    def _token(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith("bearer "):
            return authorization[7:].strip() or None
        return request.cookies.get(self.cookie_name)

    async def __call__(self, request: Request):
        set_request_id(request.headers.get("x-request-id"))
        token = self._token(request)
        if not token:
            raise HTTPException(
                status_code=401,
                detail={"code": "UNAUTHENTICATED", "message": "Unauthorized", "status_code": 401},
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            result = await self.authenticator.authenticate(token)
        except IdentityClientError as exc:
            logger.warning("Bearer token rejected", code=exc.code, status_code=exc.status_code)
            raise _http_error(exc) from exc

        request.state.auth_result = result
        return result
