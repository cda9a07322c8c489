"""
OAuth request dispatcher.
"""

from typing import Any, Awaitable, Mapping

from shared.errors import MalformedRequestError, UnauthenticatedError
from ..authc.credentials import is_bearer
from ..authc.request import header_value
from .grants import PasswordGrantAuthenticator, RefreshGrantAuthenticator
from .jwt_authenticator import JwtAuthenticator


async def _unauthenticated() -> None:
    raise UnauthenticatedError("Unauthorized")


class OAuthAuthenticator:
    """Routes a request to bearer validation or to a password/refresh grant."""

    def __init__(self, application: Any):
        self.application = application
        self.jwt_authenticator = JwtAuthenticator(application)

    def with_local_validation(self) -> "OAuthAuthenticator":
        self.jwt_authenticator.with_local_validation()
        return self

    def with_cookie(self, cookie_name: str) -> "OAuthAuthenticator":
        self.jwt_authenticator.with_cookie(cookie_name)
        return self

    def authenticate(self, request: Mapping[str, Any]) -> Awaitable[Any]:
        if not isinstance(request, Mapping):
            raise MalformedRequestError("authenticate must be called with a request object")

        authorization = header_value(request.get("headers") or {}, "authorization")
        cookies = request.get("cookies") or {}
        body = request.get("body") if isinstance(request.get("body"), Mapping) else {}

        if authorization:
            if is_bearer(authorization):
                token = authorization.split(" ")[-1]
                return self.jwt_authenticator.authenticate(token)
            return _unauthenticated()

        cookie_value = cookies.get(self.jwt_authenticator.effective_cookie_name)
        if cookie_value:
            return self.jwt_authenticator.authenticate(cookie_value)

        grant_type = body.get("grant_type")
        if grant_type == "password":
            return PasswordGrantAuthenticator(self.application).authenticate(body)
        if grant_type == "refresh_token":
            return RefreshGrantAuthenticator(self.application).authenticate(body)

        return _unauthenticated()
