"""
Client: the explicitly constructed context every authenticator works against.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from shared.config import IdentitySettings
from shared.errors import ConfigurationError
from shared.logging import get_logger
from .cache import CacheHandler, CacheManager
from .datastore import CachingDataStore, HttpRequestExecutor, NonceStore, RequestExecutor
from .resources import Account, ApiKey, ApplicationData, Directory, Resource


@dataclass(frozen=True)
class TenantApiKey:
    """API key the SDK authenticates to the REST API with; also the token signing key."""
    id: str
    secret: str


class Client:
    """Owns the cache, data store and tenant API key of one SDK instance."""

    def __init__(
        self,
        settings: Optional[IdentitySettings] = None,
        *,
        executor: Optional[RequestExecutor] = None,
        cache_manager: Optional[CacheManager] = None,
        nonce_store: Optional[NonceStore] = None,
    ):
        self.settings = settings or IdentitySettings()
        self.logger = get_logger("identity_sdk.client")

        if not self.settings.api_key_id or not self.settings.api_key_secret:
            raise ConfigurationError(
                "API key id and secret are required",
                details={"env": ["IDENTITY_API_KEY_ID", "IDENTITY_API_KEY_SECRET"]},
            )

        self.api_key = TenantApiKey(self.settings.api_key_id, self.settings.api_key_secret)
        self.base_url = self.settings.base_url.rstrip("/")

        self.cache_manager = cache_manager or CacheManager()
        self.cache_handler = CacheHandler(self.settings, self.cache_manager)
        self.executor = executor or HttpRequestExecutor(self.settings)
        self.data_store = CachingDataStore(self.executor, self.cache_handler)
        self.nonce_store = nonce_store or NonceStore(self.cache_manager)

        self.logger.debug("Client initialized", base_url=self.base_url, cache_store=self.settings.cache_store)

    async def get_resource(
        self,
        href: str,
        query: Optional[Dict[str, Any]] = None,
        resource_type: Type[Resource] = Resource,
    ):
        return await self.data_store.get_resource(href, query, resource_type)

    async def create_resource(
        self,
        href: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        query: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
        resource_type: Type[Resource] = Resource,
    ):
        return await self.data_store.create_resource(
            href, body, query=query, form=form, resource_type=resource_type
        )

    async def get_application(self, href: str, query: Optional[Dict[str, Any]] = None):
        from .application import Application

        data = await self.get_resource(href, query, ApplicationData)
        return Application(self, data)

    async def get_account(self, href: str, query: Optional[Dict[str, Any]] = None) -> Account:
        return await self.get_resource(href, query, Account)

    async def get_directory(self, href: str, query: Optional[Dict[str, Any]] = None) -> Directory:
        return await self.get_resource(href, query, Directory)

    async def get_api_key_by_id(self, api_key_id: str, query: Optional[Dict[str, Any]] = None) -> ApiKey:
        """Tenant-wide lookup of an API key by its id."""
        return await self.get_resource(f"{self.base_url}/apiKeys/{api_key_id}", query, ApiKey)

    async def close(self) -> None:
        await self.executor.close()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
