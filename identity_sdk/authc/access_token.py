"""
Local verification of access tokens issued by the client-credentials exchange.
"""

from numbers import Real
from typing import Any, Dict, Optional

from jose.exceptions import JWTError

from shared.errors import InvalidSignatureError, MalformedRequestError, TokenExpiredError
from shared.logging import get_logger
from ..resources import Account
from ..tokens import now_epoch_seconds, verify
from .basic import lookup_api_key
from .credentials import invalid_client, translate_lookup_error
from .results import ApiAuthenticationResult


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def normalize_claims(claims: Dict[str, Any]) -> Dict[str, Any]:
    """Validate token claims and return ``{subject, issued_at, expires_at, scope}``.

    Two layouts are understood: ``sub``/``iat``/``exp`` as issued by this
    SDK, and the older ``client_id``/``timestamp``/``expires_in`` where the
    expiry is relative to ``timestamp``.
    """
    if "sub" in claims or "client_id" not in claims:
        required = (("iat", _is_number), ("exp", _is_number), ("sub", lambda v: isinstance(v, str) and v))
        for name, check in required:
            if not check(claims.get(name)):
                raise MalformedRequestError(f"Missing or invalid jwt parameter: {name}")
        subject, issued_at, expires_at = claims["sub"], claims["iat"], claims["exp"]
    else:
        required = (
            ("timestamp", _is_number),
            ("expires_in", _is_number),
            ("client_id", lambda v: isinstance(v, str) and v),
        )
        for name, check in required:
            if not check(claims.get(name)):
                raise MalformedRequestError(f"Missing or invalid jwt parameter: {name}")
        subject = claims["client_id"]
        issued_at = claims["timestamp"]
        expires_at = claims["timestamp"] + claims["expires_in"]

    scope = claims.get("scope")
    if scope is not None and not isinstance(scope, str):
        raise MalformedRequestError("scope must be a string")

    return {"subject": subject, "issued_at": issued_at, "expires_at": expires_at, "scope": scope or ""}


class OAuthAccessTokenAuthenticator:
    """Verifies a bearer token against the tenant secret, then resolves its subject.

    A subject that is an account href is resolved to the account; anything
    else is treated as an API key id.
    """

    def __init__(self, application: Any, token: str, ttl: Optional[int] = None):
        self.application = application
        self.token = token
        self.ttl = ttl or 3600
        self.logger = get_logger("identity_sdk.authc.access_token")

        try:
            expanded = verify(token, application.client.api_key.secret, verify_exp=False)
        except JWTError as exc:
            raise InvalidSignatureError("access_token is invalid") from exc

        self.jwt_claims = expanded.claims
        normalized = normalize_claims(self.jwt_claims)

        if now_epoch_seconds() > normalized["expires_at"]:
            raise TokenExpiredError("Token has expired")

        self.subject = normalized["subject"]
        self.scopes = normalized["scope"].split(" ") if normalized["scope"] else []

    async def authenticate(self) -> ApiAuthenticationResult:
        if "accounts" in self.subject:
            return await self._authenticate_account()
        return await self._authenticate_api_key()

    async def _authenticate_account(self) -> ApiAuthenticationResult:
        try:
            account = await self.application.client.get_account(self.subject)
        except Exception as exc:
            translated = translate_lookup_error(exc)
            if translated is exc:
                raise
            raise translated from exc

        if not account.is_enabled:
            self.logger.warning("Access token rejected, account disabled", account_href=self.subject)
            raise invalid_client()

        return ApiAuthenticationResult(
            self.application,
            account=account.to_wire(),
            ttl=self.ttl,
            granted_scopes=self.scopes,
            token=self.token,
            jwt_claims=self.jwt_claims,
        )

    async def _authenticate_api_key(self) -> ApiAuthenticationResult:
        api_key = await lookup_api_key(self.application, self.subject)

        account = Account.model_validate(api_key.account or {})
        if not api_key.is_enabled or not account.is_enabled:
            self.logger.warning("Access token rejected, key or account disabled", api_key_id=self.subject)
            raise invalid_client()

        self.logger.debug("Access token verified", api_key_id=self.subject, scopes=self.scopes)
        return ApiAuthenticationResult(
            self.application,
            api_key=api_key,
            ttl=self.ttl,
            granted_scopes=self.scopes,
            token=self.token,
            jwt_claims=self.jwt_claims,
        )
