"""
Verification of Stormpath tokens returned from ID Site or a SAML callback.
"""

from typing import Any, Dict, Optional

from jose.exceptions import ExpiredSignatureError, JWTError

from shared.errors import IdSiteError, InvalidSignatureError, MalformedRequestError, TokenExpiredError
from shared.logging import get_logger
from ..resources import Account
from ..tokens import ExpandedJwt, verify


class AssertionAuthenticationResult:
    """A verified assertion; the account is only a link until fetched."""

    def __init__(self, application: Any, stormpath_token: str, expanded_jwt: ExpandedJwt):
        self.application = application
        self.stormpath_token = stormpath_token
        self.expanded_jwt = expanded_jwt
        self.account: Dict[str, Any] = {"href": expanded_jwt.claims.get("sub")}

    async def get_account(self, query: Optional[Dict[str, Any]] = None) -> Account:
        if not self.account.get("href"):
            raise ValueError("Unable to get account. Account HREF not specified.")
        return await self.application.client.get_account(self.account["href"], query)


class AssertionAuthenticator:
    """Verifies the token only; exchanging it for OAuth tokens is a separate grant."""

    def __init__(self, application: Any):
        self.application = application
        self.secret = application.client.api_key.secret
        self.logger = get_logger("identity_sdk.authc.assertion")

    async def authenticate(self, stormpath_token: str) -> AssertionAuthenticationResult:
        try:
            expanded = verify(stormpath_token, self.secret)
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTError as exc:
            self.logger.warning("Assertion rejected", error=str(exc))
            raise InvalidSignatureError(str(exc)) from exc

        if expanded.claims.get("err"):
            raise IdSiteError(expanded.claims["err"])

        if not expanded.claims.get("sub"):
            raise MalformedRequestError("Stormpath Account HREF (sub) in JWT not provided.")

        return AssertionAuthenticationResult(self.application, stormpath_token, expanded)
