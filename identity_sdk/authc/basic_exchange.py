"""
OAuth2 client-credentials exchange: Basic API key credentials in, signed access token out.
"""

from typing import Any, Dict, List, Mapping, Optional

from shared.errors import MalformedRequestError
from shared.logging import get_logger
from ..resources import Account, AccessTokenResponse, ApiKey
from ..tokens import now_epoch_seconds, sign
from .basic import credentials_match, lookup_api_key
from .credentials import ScopeFactory, call_scope_factory, decode_basic_credentials, invalid_client
from .request import header_value
from .results import ApiAuthenticationResult

DEFAULT_TTL = 3600


class OAuthBasicExchangeAuthenticator:
    """Issues an HS256 access token for a valid, enabled API key.

    The token is signed with the tenant API key secret and carries
    ``sub`` (API key id), ``iss`` (application href), ``iat``, ``exp`` and,
    when the scope factory grants one, ``scope``.
    """

    def __init__(
        self,
        application: Any,
        request: Mapping[str, Any],
        ttl: Optional[int] = None,
        scope_factory: Optional[ScopeFactory] = None,
        requested_scope: Optional[List[str]] = None,
    ):
        self.id, self.secret = decode_basic_credentials(header_value(request.get("headers") or {}, "authorization"))

        if str(request.get("method", "")).upper() != "POST":
            raise MalformedRequestError(
                "Must use POST for token exchange, see http://tools.ietf.org/html/rfc6749#section-3.2"
            )

        self.application = application
        self.ttl = ttl or DEFAULT_TTL
        self.scope_factory = scope_factory
        self.requested_scope = requested_scope or []
        self.logger = get_logger("identity_sdk.authc.basic_exchange")

    async def authenticate(self) -> ApiAuthenticationResult:
        api_key = await lookup_api_key(self.application, self.id)

        if not credentials_match(api_key, self.secret):
            self.logger.warning("Client credentials exchange rejected", api_key_id=self.id)
            raise invalid_client()

        token_response = await self.build_token_response(api_key)
        self.logger.info("Access token issued", api_key_id=self.id, expires_in=self.ttl)

        return ApiAuthenticationResult(
            self.application,
            api_key=api_key,
            ttl=self.ttl,
            granted_scopes=token_response.scope.split(" ") if token_response.scope else [],
            token_response=token_response,
        )

    async def build_token_response(self, api_key: ApiKey) -> AccessTokenResponse:
        account = Account.model_validate(api_key.account or {})
        scope = await call_scope_factory(self.scope_factory, account, self.requested_scope)

        return AccessTokenResponse(
            access_token=self.build_access_token(scope),
            token_type="bearer",
            expires_in=self.ttl,
            scope=scope or None,
        )

    def build_access_token(self, scope: str = "") -> str:
        now = now_epoch_seconds()
        claims: Dict[str, Any] = {
            "sub": self.id,
            "iss": self.application.href,
            "iat": now,
            "exp": now + self.ttl,
        }
        if scope:
            claims["scope"] = scope

        return sign(claims, self.application.client.api_key.secret)
