"""
ID Site redirect URL builder and callback handler.
"""

import uuid
from dataclasses import dataclass
from numbers import Real
from typing import Any, Awaitable, Dict, Optional
from urllib.parse import parse_qs, quote, unquote, urlsplit

from jose.exceptions import JWTError

from shared.errors import (
    IdSiteError,
    InvalidAudienceError,
    InvalidSignatureError,
    MalformedRequestError,
    NonceAlreadyUsedError,
    TokenExpiredError,
)
from shared.logging import get_logger
from ..resources import Account
from ..tokens import now_epoch_seconds, sign, verify

INVALID_CB_URI = "cb_uri URI must be provided and must be in your ID Site whitelist"
INVALID_AUDIENCE = "The client used to sign the jwtResponse is different than the one used in this datastore."
JWT_HAS_EXPIRED = "JWT has expired"


@dataclass
class IdSiteAuthenticationResult:
    """What the user did on ID Site.

    ``status`` is one of ``AUTHENTICATED``, ``REGISTERED`` or ``LOGOUT``.
    """
    account: Account
    state: str
    is_new: Optional[bool]
    status: Optional[str]


class IdSiteUrlBuilder:
    """Builds the ``/sso`` redirect carrying a signed ``jwtRequest``."""

    def __init__(self, application: Any):
        self.application = application
        self.api_key = application.client.api_key

    def build(
        self,
        callback_uri: Optional[str] = None,
        *,
        path: str = "/",
        state: str = "",
        logout: bool = False,
        organization_name_key: Optional[str] = None,
        show_organization_field: Optional[bool] = None,
        use_subdomain: Optional[bool] = None,
    ) -> str:
        if not callback_uri:
            raise MalformedRequestError(INVALID_CB_URI)

        parts = urlsplit(self.application.href)
        base = f"{parts.scheme}://{parts.netloc}"

        claims: Dict[str, Any] = {
            "jti": str(uuid.uuid4()),
            "iat": now_epoch_seconds(),
            "iss": self.api_key.id,
            "sub": self.application.href,
            "state": quote(state or "", safe=""),
            "path": path or "/",
            "cb_uri": callback_uri,
        }
        if isinstance(show_organization_field, bool):
            claims["sof"] = show_organization_field
        if organization_name_key:
            claims["onk"] = organization_name_key
        if isinstance(use_subdomain, bool):
            claims["usd"] = use_subdomain

        token = sign(claims, self.api_key.secret)
        return f"{base}/sso{'/logout' if logout else ''}?jwtRequest={token}"


class IdSiteCallbackHandler:
    """Validates the signed ``jwtResponse`` ID Site redirects back with.

    Each response can be accepted once: its ``irt`` nonce is recorded in the
    client's nonce store and a second presentation fails.
    """

    def __init__(self, application: Any):
        self.application = application
        self.client = application.client
        self.logger = get_logger("identity_sdk.saml.id_site")

    def handle(self, response_uri: str) -> Awaitable[IdSiteAuthenticationResult]:
        if not isinstance(response_uri, str):
            raise MalformedRequestError("handle_id_site_callback must be called with an uri string")
        params = parse_qs(urlsplit(response_uri).query)
        token = (params.get("jwtResponse") or [""])[0]
        return self._handle(token)

    async def _handle(self, token: str) -> IdSiteAuthenticationResult:
        try:
            response = verify(token, self.client.api_key.secret, verify_exp=False)
        except JWTError as exc:
            self.logger.warning("ID Site response rejected", error=str(exc))
            raise InvalidSignatureError(str(exc) or "Unauthorized") from exc

        claims = response.claims
        if claims.get("err"):
            raise IdSiteError(claims["err"])

        if claims.get("aud") != self.client.api_key.id:
            raise InvalidAudienceError(INVALID_AUDIENCE)

        exp = claims.get("exp")
        if not isinstance(exp, Real) or isinstance(exp, bool) or now_epoch_seconds() > exp:
            raise TokenExpiredError(JWT_HAS_EXPIRED)

        nonce = claims.get("irt")
        if not isinstance(nonce, str) or not nonce:
            raise MalformedRequestError("ID Site response is missing the irt nonce")

        if await self.client.nonce_store.get_nonce(nonce):
            self.logger.warning("ID Site response replayed", nonce=nonce)
            raise NonceAlreadyUsedError()

        try:
            await self.client.nonce_store.put_nonce(nonce, expires_at=exp)
        except Exception as exc:
            self.logger.error("Failed to record ID Site nonce", nonce=nonce, error=str(exc))

        account = await self.client.get_account(claims.get("sub"))
        self.logger.info("ID Site callback accepted", account_href=account.href, status=claims.get("status"))

        return IdSiteAuthenticationResult(
            account=account,
            state=unquote(claims.get("state") or ""),
            is_new=claims.get("isNewSub"),
            status=claims.get("status"),
        )
