"""
OAuth2 grant authenticators that exchange credentials at the application's token endpoint.
"""

import warnings
from typing import Any, Awaitable, Dict, Mapping, Optional, Tuple, Type

from shared.errors import MalformedRequestError
from shared.logging import get_logger
from ..resources import AccessTokenResponse
from .results import (
    ClientCredentialsAuthenticationResult,
    IdSiteTokenAuthenticationResult,
    JwtAuthenticationResult,
    PasswordGrantAuthenticationResult,
    RefreshGrantAuthenticationResult,
    StormpathSocialAuthenticationResult,
    StormpathTokenAuthenticationResult,
)
from .scope_factory import ScopeFactoryCapable


def _require_string(request: Mapping[str, Any], *names: str) -> str:
    for name in names:
        value = request.get(name)
        if isinstance(value, str) and value:
            return value
    raise MalformedRequestError(f"The '{names[0]}' parameter must be a non-empty string.")


class OAuthGrantAuthenticator:
    """POSTs a form-encoded grant to ``{application}/oauth/token``.

    ``authenticate`` validates its input immediately and returns a
    coroutine for the remote exchange.
    """

    grant_type: str = ""
    result_class: Type[JwtAuthenticationResult] = JwtAuthenticationResult

    def __init__(self, application: Any):
        self.application = application
        self.logger = get_logger(f"identity_sdk.oauth.{self.grant_type}")

    def build_form(self, request: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
        """Return the form to post and the scope the caller asked for."""
        raise NotImplementedError

    def authenticate(self, request: Mapping[str, Any]) -> Awaitable[JwtAuthenticationResult]:
        if not isinstance(request, Mapping):
            raise MalformedRequestError("The 'authentication_request' parameter must be an object.")
        form, requested_scope = self.build_form(request)
        return self._exchange(form, requested_scope)

    async def _exchange(self, form: Dict[str, Any], requested_scope: Optional[str]) -> JwtAuthenticationResult:
        token_href = f"{self.application.href}/oauth/token"
        response = await self.application.client.create_resource(
            token_href, form=form, resource_type=AccessTokenResponse
        )
        self.logger.info("Token grant completed", grant_type=self.grant_type, application_href=self.application.href)
        return await self.build_result(response.to_wire(), requested_scope)

    async def build_result(self, data: Dict[str, Any], requested_scope: Optional[str]) -> JwtAuthenticationResult:
        return self.result_class(self.application, data)


class ScopedGrantAuthenticator(ScopeFactoryCapable, OAuthGrantAuthenticator):
    async def build_result(self, data: Dict[str, Any], requested_scope: Optional[str]) -> JwtAuthenticationResult:
        return await self.scope_auth_result(self.application, requested_scope, data, self.result_class)


class PasswordGrantAuthenticator(ScopedGrantAuthenticator):
    grant_type = "password"
    result_class = PasswordGrantAuthenticationResult

    def build_form(self, request):
        _require_string(request, "username")
        _require_string(request, "password")
        # the requested scope is granted locally and never sent to the API
        form = {key: value for key, value in request.items() if key != "scope" and value is not None}
        form["grant_type"] = self.grant_type
        return form, request.get("scope")


class RefreshGrantAuthenticator(OAuthGrantAuthenticator):
    grant_type = "refresh_token"
    result_class = RefreshGrantAuthenticationResult

    def build_form(self, request):
        if not request.get("refresh_token"):
            raise MalformedRequestError("data does not have refresh_token property")
        return {"grant_type": self.grant_type, "refresh_token": request["refresh_token"]}, None


class ClientCredentialsGrantAuthenticator(ScopedGrantAuthenticator):
    grant_type = "client_credentials"
    result_class = ClientCredentialsAuthenticationResult

    def build_form(self, request):
        api_key = request.get("api_key") or request.get("apiKey")
        if not isinstance(api_key, Mapping):
            raise MalformedRequestError("apiKey object within request is required")
        if not api_key.get("id") or not api_key.get("secret"):
            raise MalformedRequestError("apiKey object must contain 'id' and 'secret' fields")
        form = {
            "client_id": api_key["id"],
            "client_secret": api_key["secret"],
            "grant_type": self.grant_type,
        }
        return form, request.get("scope")


class StormpathTokenGrantAuthenticator(ScopedGrantAuthenticator):
    """Exchanges an ID Site or SAML assertion for an access/refresh token pair."""

    grant_type = "stormpath_token"
    result_class = StormpathTokenAuthenticationResult

    def build_form(self, request):
        token = _require_string(request, "stormpath_token")
        return {"grant_type": self.grant_type, "token": token}, request.get("scope")


class StormpathSocialGrantAuthenticator(OAuthGrantAuthenticator):
    grant_type = "stormpath_social"
    result_class = StormpathSocialAuthenticationResult

    def build_form(self, request):
        provider_id = _require_string(request, "provider_id", "providerId")
        code = request.get("code")
        access_token = request.get("access_token") or request.get("accessToken")
        if not code and not access_token:
            raise MalformedRequestError("One of the parameters 'code' or 'access_token' must be provided.")

        form = {"grant_type": self.grant_type, "providerId": provider_id}
        if code:
            form["code"] = code
        if access_token:
            form["accessToken"] = access_token
        return form, None


class IdSiteTokenGrantAuthenticator(OAuthGrantAuthenticator):
    grant_type = "id_site_token"
    result_class = IdSiteTokenAuthenticationResult

    def authenticate(self, request):
        warnings.warn(
            "IdSiteTokenGrantAuthenticator is deprecated. Use StormpathTokenGrantAuthenticator instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return super().authenticate(request)

    def build_form(self, request):
        token = _require_string(request, "id_site_token")
        return {"grant_type": self.grant_type, "token": token}, None
