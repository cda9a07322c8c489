"""
Authentication results produced by the API authenticators.
"""

from typing import Any, Dict, List, Optional

from ..resources import Account, AccessTokenResponse, ApiKey, link_href
from ..tokens import now_epoch_seconds, sign


class ApiAuthenticationResult:
    """Outcome of authenticating an API key, either directly or through a token.

    ``account`` may be a link or a fully expanded account; :meth:`get_account`
    always resolves it through the data store.
    """

    def __init__(
        self,
        application: Any,
        *,
        account: Any = None,
        api_key: Optional[ApiKey] = None,
        ttl: Optional[int] = None,
        granted_scopes: Optional[List[str]] = None,
        token: Optional[str] = None,
        jwt_claims: Optional[Dict[str, Any]] = None,
        token_response: Optional[AccessTokenResponse] = None,
    ):
        self.application = application
        self.api_key = api_key
        self.account = account if account is not None else (api_key.account if api_key else None)
        self.ttl = ttl or application.client.settings.access_token_ttl
        self.granted_scopes = granted_scopes or []
        self.token = token
        self.jwt_claims = jwt_claims or {}
        self.token_response = token_response

    @property
    def account_href(self) -> Optional[str]:
        return link_href(self.account)

    @property
    def scopes(self) -> List[str]:
        return list(self.granted_scopes)

    async def get_account(self, query: Optional[Dict[str, Any]] = None) -> Account:
        href = self.account_href
        if not href:
            raise ValueError("Unable to get account. Account HREF not specified.")
        return await self.application.client.get_account(href, query)

    def get_access_token(self) -> str:
        """The token this result was created from, or a new one for its API key."""
        if self.token_response is not None:
            return self.token_response.access_token
        if self.token:
            return self.token
        return self._build_token()

    def get_access_token_response(self) -> AccessTokenResponse:
        if self.token_response is not None:
            return self.token_response
        scope = " ".join(self.granted_scopes) or None
        return AccessTokenResponse(
            access_token=self.get_access_token(),
            token_type="bearer",
            expires_in=self.ttl,
            scope=scope,
        )

    def _build_token(self) -> str:
        if self.api_key is None or not self.api_key.id:
            raise ValueError("Unable to build an access token without an API key")

        now = now_epoch_seconds()
        claims: Dict[str, Any] = {
            "sub": self.api_key.id,
            "iss": self.application.href,
            "iat": now,
            "exp": now + self.ttl,
        }
        if self.granted_scopes:
            claims["scope"] = " ".join(self.granted_scopes)

        self.token = sign(claims, self.application.client.api_key.secret)
        return self.token
