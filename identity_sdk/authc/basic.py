"""
HTTP Basic API key authenticator.
"""

import hmac
from typing import Any, Optional

from shared.logging import get_logger
from ..resources import Account, ApiKey
from .credentials import decode_basic_credentials, invalid_client, translate_lookup_error
from .results import ApiAuthenticationResult


def credentials_match(api_key: ApiKey, secret: str) -> bool:
    """Secret equality plus ENABLED status of the key and its account."""
    if not api_key.secret or not hmac.compare_digest(api_key.secret.encode(), secret.encode()):
        return False
    if not api_key.is_enabled:
        return False
    return Account.model_validate(api_key.account or {}).is_enabled


async def lookup_api_key(application: Any, api_key_id: str) -> ApiKey:
    try:
        return await application.get_api_key(api_key_id)
    except Exception as exc:
        translated = translate_lookup_error(exc)
        if translated is exc:
            raise
        raise translated from exc


class BasicApiAuthenticator:
    """Authenticates ``Authorization: Basic base64(id:secret)`` against the application's API keys."""

    def __init__(self, application: Any, authorization: str, ttl: Optional[int] = None):
        self.application = application
        self.id, self.secret = decode_basic_credentials(authorization)
        self.ttl = ttl
        self.logger = get_logger("identity_sdk.authc.basic")

    async def authenticate(self) -> ApiAuthenticationResult:
        api_key = await lookup_api_key(self.application, self.id)

        if not credentials_match(api_key, self.secret):
            self.logger.warning("API key authentication failed", api_key_id=self.id)
            raise invalid_client()

        self.logger.info("API key authenticated", api_key_id=self.id, account_href=api_key.account_href)
        return ApiAuthenticationResult(self.application, api_key=api_key, ttl=self.ttl)
