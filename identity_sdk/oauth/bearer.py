"""
Common behaviour of the bearer access-token authenticators.
"""

from typing import Any, Dict, Optional

from shared.errors import ApplicationMismatchError, ResourceError, TokenRevokedError
from ..resources import AccessToken
from ..tokens import ExpandedJwt


class BearerTokenValidator:
    """Local-validation switch, application pinning and scope propagation."""

    default_cookie_name = "access_token"

    def __init__(self):
        self.local_validation = False
        self.application_href: Optional[str] = None
        self.cookie_name: Optional[str] = None

    def with_local_validation(self):
        """Trust signature and expiry only; skip the remote revocation check."""
        self.local_validation = True
        return self

    def for_application(self, href: str):
        self.application_href = href
        return self

    def with_cookie(self, cookie_name: str):
        self.cookie_name = cookie_name
        return self

    @property
    def effective_cookie_name(self) -> str:
        return self.cookie_name or self.default_cookie_name

    def check_application(self, token: ExpandedJwt) -> None:
        if not self.application_href:
            return
        claims = token.claims
        audience = claims.get("aud")
        audiences = audience if isinstance(audience, list) else [audience]
        if claims.get("iss") != self.application_href and self.application_href not in audiences:
            raise ApplicationMismatchError(
                "Token was not issued for this application",
                details={"application_href": self.application_href, "iss": claims.get("iss")},
            )

    @staticmethod
    async def fetch_token_record(client: Any, application_href: str, token: str) -> AccessToken:
        """Look the token up remotely, bypassing the cache; 404 means revoked."""
        href = f"{application_href}/authTokens/{token}"
        try:
            return await client.get_resource(href, {"nocache": True}, AccessToken)
        except ResourceError as exc:
            if exc.status == 404:
                raise TokenRevokedError(details={"application_href": application_href}) from exc
            raise

    @staticmethod
    def propagate_scope(token: ExpandedJwt, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copy the inbound token's scope onto the remote record's claims."""
        scope = token.claims.get("scope")
        if not scope:
            return data
        data = dict(data)
        expanded = dict(data.get("expandedJwt") or {})
        claims = dict(expanded.get("claims") or {})
        claims["scope"] = scope
        expanded["claims"] = claims
        data["expandedJwt"] = expanded
        return data

    @staticmethod
    def local_result_data(token: ExpandedJwt) -> Dict[str, Any]:
        return {
            "jwt": token.compact,
            "expandedJwt": token.to_dict(),
            "localValidation": True,
        }
