"""
Tenant-wide access token authenticator.
"""

from typing import Any

from jose.exceptions import JWTError

from shared.errors import InvalidSignatureError, ResourceError, UnauthenticatedError
from shared.logging import get_logger
from ..resources import link_href
from ..tokens import unverified_header
from .bearer import BearerTokenValidator
from .results import StormpathAccessTokenAuthenticationResult, verify_or_unauthenticated


class AccessTokenAuthenticator(BearerTokenValidator):
    """Verifies tokens issued by any application of the tenant.

    The signing key is resolved from the token's ``kid``: it must name an API
    key whose account lives in the administrators directory.
    """

    def __init__(self, client: Any):
        super().__init__()
        self.client = client
        self.logger = get_logger("identity_sdk.oauth.access_token")

    async def resolve_signing_key(self, kid: str) -> str:
        try:
            api_key = await self.client.get_api_key_by_id(kid)
            account = await self.client.get_account(api_key.account_href)
            directory_href = link_href(account.directory)
            if not directory_href:
                self.logger.warning("API key account has no directory", kid=kid)
                raise UnauthenticatedError("Invalid kid")
            directory = await self.client.get_directory(directory_href)
        except ResourceError as exc:
            if exc.status == 404:
                raise UnauthenticatedError("Invalid kid") from exc
            raise

        if directory.name != self.client.settings.admin_directory_name:
            self.logger.warning("Token signed by a non-administrator key", kid=kid)
            raise UnauthenticatedError("Invalid kid")
        return api_key.secret

    async def authenticate(self, token: str) -> StormpathAccessTokenAuthenticationResult:
        try:
            kid = unverified_header(token).get("kid")
        except JWTError as exc:
            raise InvalidSignatureError("access_token is invalid") from exc

        if not kid:
            raise InvalidSignatureError("access_token has no kid")

        secret = await self.resolve_signing_key(kid)
        expanded = verify_or_unauthenticated(token, secret)
        self.check_application(expanded)

        if self.local_validation:
            return StormpathAccessTokenAuthenticationResult(self.client, self.local_result_data(expanded))

        application_href = self.application_href or expanded.claims.get("iss")
        if not application_href:
            raise UnauthenticatedError("Token has no issuer")

        record = await self.fetch_token_record(self.client, application_href, token)
        return StormpathAccessTokenAuthenticationResult(self.client, self.propagate_scope(expanded, record.to_wire()))
