"""
Application-bound access token authenticator.
"""

from typing import Any, Union

from shared.logging import get_logger, set_auth_context
from ..authc import ApiAuthenticationResult, OAuthAccessTokenAuthenticator
from .bearer import BearerTokenValidator
from .results import JwtAuthenticationResult, verify_or_unauthenticated


class JwtAuthenticator(BearerTokenValidator):
    """Verifies access tokens against the tenant secret of ``application``.

    Tokens with a ``kid`` header were issued by the API and, unless local
    validation is enabled, are looked up remotely (bypassing the cache) so
    revoked tokens are rejected. Tokens without one were issued by this SDK's
    client-credentials exchange and go through the API key path instead.
    """

    def __init__(self, application: Any):
        super().__init__()
        self.application = application
        self.logger = get_logger("identity_sdk.oauth.jwt")

    async def authenticate(self, token: str) -> Union[JwtAuthenticationResult, ApiAuthenticationResult]:
        secret = self.application.client.api_key.secret

        try:
            expanded = verify_or_unauthenticated(token, secret)
        except Exception as exc:
            self.logger.warning("Access token rejected", error=str(exc), application_href=self.application.href)
            raise

        self.check_application(expanded)

        if self.local_validation:
            result = JwtAuthenticationResult(self.application, self.local_result_data(expanded))
        elif expanded.kid:
            record = await self.fetch_token_record(self.application.client, self.application.href, token)
            result = JwtAuthenticationResult(self.application, self.propagate_scope(expanded, record.to_wire()))
        else:
            return await OAuthAccessTokenAuthenticator(self.application, token).authenticate()

        set_auth_context(application_href=self.application.href, account_href=result.account_href)
        self.logger.debug("Access token authenticated", local_validation=self.local_validation)
        return result
