"""
Application: the resource most authentication flows are bound to.
"""

from typing import Any, Awaitable, Dict, Iterable, Optional

from shared.errors import ResourceError
from shared.logging import get_logger
from .authc import ApiAuthenticationResult, authenticate_api_request
from .authc.credentials import ScopeFactory
from .resources import ApiKey, ApplicationData, CollectionResource, SamlPolicy, link_href
from .saml import IdSiteAuthenticationResult, IdSiteCallbackHandler, IdSiteUrlBuilder


class Application:
    """An application resource bound to the client that fetched it."""

    def __init__(self, client: Any, data: ApplicationData):
        self.client = client
        self.data = data
        self.logger = get_logger("identity_sdk.application")

    @property
    def href(self) -> str:
        return self.data.href

    @property
    def name(self) -> Optional[str]:
        return self.data.name

    @property
    def status(self) -> Optional[str]:
        return self.data.status

    @property
    def api_keys_href(self) -> str:
        return link_href(self.data.api_keys) or f"{self.href}/apiKeys"

    async def get_api_key(self, api_key_id: str) -> ApiKey:
        """Find one of this application's API keys by id, with its account expanded.

        A key already in the cache is served from there and its account
        fetched separately.
        """
        cached = await self.client.cache_handler.get(f"{self.client.base_url}/apiKeys/{api_key_id}")
        if cached is not None:
            api_key = ApiKey.model_validate(cached)
            account = await self.client.get_account(api_key.account_href)
            return api_key.model_copy(update={"account": account.to_wire()})

        collection = await self.client.get_resource(
            self.api_keys_href,
            {"id": api_key_id, "expand": "account"},
            CollectionResource,
        )
        if len(collection.items) != 1:
            raise ResourceError(self.api_keys_href, {"status": 404, "message": "ApiKey not found"})
        return ApiKey.model_validate(collection.items[0])

    def authenticate_api_request(
        self,
        request: Dict[str, Any],
        *,
        ttl: Optional[int] = None,
        scope_factory: Optional[ScopeFactory] = None,
        locations: Optional[Iterable[str]] = None,
    ) -> Awaitable[ApiAuthenticationResult]:
        return authenticate_api_request(
            self, request, ttl=ttl, scope_factory=scope_factory, locations=locations
        )

    def create_id_site_url(self, callback_uri: Optional[str] = None, **options: Any) -> str:
        return IdSiteUrlBuilder(self).build(callback_uri, **options)

    def handle_id_site_callback(self, response_uri: str) -> Awaitable[IdSiteAuthenticationResult]:
        return IdSiteCallbackHandler(self).handle(response_uri)

    async def get_saml_policy(self) -> SamlPolicy:
        href = link_href(self.data.saml_policy)
        if not href:
            raise ValueError("Application has no samlPolicy")
        return await self.client.get_resource(href, resource_type=SamlPolicy)

    def __repr__(self) -> str:
        return f"Application(href={self.href!r}, name={self.name!r})"
