"""
Authentication results for OAuth token grants and verified access tokens.
"""

from typing import Any, Dict, Optional

from jose.exceptions import ExpiredSignatureError, JWTError

from shared.errors import InvalidSignatureError, TokenExpiredError
from ..resources import Account, AccessToken, AccessTokenResponse, link_href
from ..tokens import ExpandedJwt, now_epoch_seconds, verify


def verify_or_unauthenticated(token: str, secret: str, **kwargs: Any) -> ExpandedJwt:
    """``tokens.verify`` with jose errors mapped onto the SDK taxonomy."""
    try:
        return verify(token, secret, **kwargs)
    except ExpiredSignatureError as exc:
        raise TokenExpiredError() from exc
    except JWTError as exc:
        raise InvalidSignatureError(str(exc) or "Unauthorized") from exc


class JwtAuthenticationResult:
    """Result carrying a verified JWT.

    Built either from a token endpoint response (``access_token`` and
    optionally ``refresh_token``) or from an access token resource
    (``jwt`` / ``expandedJwt``). The account link is the access token
    subject when no explicit ``account`` is present.
    """

    grant_type: Optional[str] = None

    def __init__(self, application: Any, data: Dict[str, Any]):
        self.application = application
        self.client = application.client
        self._load(data)

    def _load(self, data: Dict[str, Any]) -> None:
        secret = self.client.api_key.secret

        self.data = dict(data)
        self.account: Optional[Dict[str, Any]] = data.get("account")
        self.jwt: Optional[str] = data.get("jwt")
        self.expanded_jwt: Optional[Dict[str, Any]] = data.get("expandedJwt") or data.get("expanded_jwt")
        self.local_validation: bool = bool(data.get("localValidation", False))
        self.access_token: Optional[ExpandedJwt] = None
        self.refresh_token: Optional[ExpandedJwt] = None

        if data.get("access_token"):
            self.access_token = verify_or_unauthenticated(data["access_token"], secret)
            self.account = {"href": self.access_token.claims.get("sub")}

        if data.get("refresh_token"):
            self.refresh_token = verify_or_unauthenticated(data["refresh_token"], secret)

        if self.account is None and self.expanded_jwt:
            subject = (self.expanded_jwt.get("claims") or {}).get("sub")
            if subject:
                self.account = {"href": subject}

    @property
    def account_href(self) -> Optional[str]:
        return link_href(self.account)

    @property
    def claims(self) -> Dict[str, Any]:
        if self.access_token is not None:
            return self.access_token.claims
        return dict((self.expanded_jwt or {}).get("claims") or {})

    @property
    def scope(self) -> str:
        return self.claims.get("scope") or ""

    def get_access_token(self) -> Optional[str]:
        if self.access_token is not None:
            return self.access_token.compact
        return self.jwt

    def get_access_token_response(self) -> AccessTokenResponse:
        if self.access_token is not None:
            return AccessTokenResponse.from_wire(self.data)

        exp = self.claims.get("exp")
        expires_in = max(int(exp) - now_epoch_seconds(), 0) if isinstance(exp, (int, float)) else 0
        return AccessTokenResponse(
            access_token=self.jwt or "",
            token_type="bearer",
            expires_in=expires_in,
            scope=self.scope or None,
        )

    async def get_access_token_resource(self) -> AccessToken:
        href = self.data.get("stormpath_access_token_href") or self.data.get("href")
        if not href:
            raise ValueError("Result does not reference an access token resource")
        return await self.client.get_resource(href, resource_type=AccessToken)

    async def get_account(self, query: Optional[Dict[str, Any]] = None) -> Account:
        href = self.account_href
        if not href:
            raise ValueError("Unable to get account. Account HREF not specified.")
        return await self.client.get_account(href, query)


class PasswordGrantAuthenticationResult(JwtAuthenticationResult):
    grant_type = "password"


class RefreshGrantAuthenticationResult(JwtAuthenticationResult):
    grant_type = "refresh_token"


class ClientCredentialsAuthenticationResult(JwtAuthenticationResult):
    grant_type = "client_credentials"


class StormpathTokenAuthenticationResult(JwtAuthenticationResult):
    grant_type = "stormpath_token"


class StormpathSocialAuthenticationResult(JwtAuthenticationResult):
    grant_type = "stormpath_social"


class IdSiteTokenAuthenticationResult(JwtAuthenticationResult):
    grant_type = "id_site_token"


class StormpathAccessTokenAuthenticationResult(JwtAuthenticationResult):
    """Tenant-wide result; bound to the client rather than one application."""

    def __init__(self, client: Any, data: Dict[str, Any]):
        self.application = None
        self.client = client
        self._load(data)

    @property
    def application_href(self) -> Optional[str]:
        return link_href(self.data.get("application")) or self.claims.get("iss")

    async def get_application(self, query: Optional[Dict[str, Any]] = None):
        href = self.application_href
        if not href:
            raise ValueError("Unable to get application. Application HREF not specified.")
        return await self.client.get_application(href, query)
