"""
SAML identity provider redirect URL builder.
"""

import uuid
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..resources import SamlServiceProvider, link_href
from ..tokens import now_epoch_seconds, sign


class SamlIdpUrlBuilder:
    """Builds the signed URL that starts a SAML login at the service provider."""

    def __init__(self, application: Any):
        self.application = application
        self.api_key = application.client.api_key

    async def _sso_initiation_endpoint(self) -> str:
        policy = await self.application.get_saml_policy()
        provider = await self.application.client.get_resource(
            link_href(policy.service_provider), resource_type=SamlServiceProvider
        )
        endpoint = link_href(provider.sso_initiation_endpoint)
        if not endpoint:
            raise ValueError("SAML service provider has no ssoInitiationEndpoint")
        return endpoint

    def build_access_token(self, options: Optional[Dict[str, Any]] = None) -> str:
        options = options or {}
        claims: Dict[str, Any] = {
            "jti": str(uuid.uuid4()),
            "iss": self.application.href,
            "iat": now_epoch_seconds(),
        }
        if options.get("callback_uri"):
            claims["cb_uri"] = options["callback_uri"]
        if options.get("state"):
            claims["state"] = options["state"]
        account_store = link_href(options.get("account_store"))
        if account_store:
            claims["ash"] = account_store
        if options.get("organization_name_key"):
            claims["onk"] = options["organization_name_key"]

        return sign(claims, self.api_key.secret, kid=self.api_key.id)

    async def build(self, options: Optional[Dict[str, Any]] = None) -> str:
        endpoint = await self._sso_initiation_endpoint()
        return f"{endpoint}?accessToken={quote(self.build_access_token(options), safe='')}"
