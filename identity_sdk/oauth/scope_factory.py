"""
Scope factory capability for grant authenticators.
"""

from typing import Any, Dict, Optional, Type

from shared.errors import ConfigurationError
from ..authc.credentials import ScopeFactory, call_scope_factory
from ..tokens import sign
from .results import JwtAuthenticationResult, verify_or_unauthenticated

SIGNING_KEY_REQUIRED = (
    "Signing key required for expanding the authentication result token through "
    "scope factories. Please use `set_scope_factory_signing_key` first"
)


class ScopeFactoryCapable:
    """Lets an authenticator add a locally granted ``scope`` to remotely issued tokens.

    The factory receives ``(authentication_result, requested_scope)`` and may
    be a plain function or a coroutine function. A truthy return value is
    written to the token's ``scope`` claim and the token is re-signed.
    """

    scope_factory: Optional[ScopeFactory] = None
    signing_key: Optional[str] = None

    def set_scope_factory_signing_key(self, signing_key: str) -> None:
        self.signing_key = signing_key

    def set_scope_factory(self, scope_factory: Optional[ScopeFactory], signing_key: Optional[str] = None) -> None:
        if signing_key:
            self.signing_key = signing_key
        if scope_factory is not None and not self.signing_key:
            raise ConfigurationError(SIGNING_KEY_REQUIRED)
        self.scope_factory = scope_factory

    async def scope_auth_result(
        self,
        application: Any,
        requested_scope: Optional[str],
        response_data: Dict[str, Any],
        result_class: Type[JwtAuthenticationResult],
    ) -> JwtAuthenticationResult:
        if self.scope_factory is None:
            return result_class(application, response_data)

        if not self.signing_key:
            raise ConfigurationError(SIGNING_KEY_REQUIRED)

        token = verify_or_unauthenticated(response_data["access_token"], self.signing_key)
        result = result_class(application, response_data)

        granted_scope = await call_scope_factory(self.scope_factory, result, requested_scope)
        if granted_scope:
            claims = dict(token.claims)
            claims["scope"] = granted_scope
            response_data = dict(response_data)
            response_data["access_token"] = sign(claims, self.signing_key, headers=token.header)
            response_data["scope"] = granted_scope
            result = result_class(application, response_data)

        return result
