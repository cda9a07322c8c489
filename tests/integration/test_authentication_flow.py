"""
Integration tests for the client-level authentication flows.
"""

import base64
from urllib.parse import parse_qs, urlsplit

import pytest

from identity_sdk import Client
from identity_sdk.oauth import JwtAuthenticator, PasswordGrantAuthenticator
from identity_sdk.tokens import verify
from shared.errors import ConfigurationError, InvalidCredentialsError, NonceAlreadyUsedError
from shared.test_helpers import (
    APPLICATION_HREF,
    BASE_URL,
    TENANT_API_KEY_ID,
    TENANT_API_KEY_SECRET,
    FakeRequestExecutor,
    MockTokenGenerator,
    TestDataFactory,
    TestEnvironment,
)

ACCOUNT_HREF = f"{BASE_URL}/accounts/ACCOUNT1"


class TestAuthenticationFlow:
    """End-to-end flows through Client, Application and the authenticators."""

    @pytest.fixture
    def executor(self):
        tokens = MockTokenGenerator()
        executor = FakeRequestExecutor()
        executor.add(TestDataFactory.application())
        executor.add(TestDataFactory.account())
        executor.add_api_keys(APPLICATION_HREF, [TestDataFactory.api_key()])
        executor.on_post(f"{APPLICATION_HREF}/oauth/token", lambda **_: tokens.token_response(ACCOUNT_HREF))
        return executor

    @pytest.fixture
    def client(self, executor):
        return Client(TestEnvironment.settings(), executor=executor)

    @pytest.mark.asyncio
    async def test_api_key_to_bearer_flow(self, client, executor):
        """Exchange API key credentials for a token, then authenticate with it."""
        application = await client.get_application(APPLICATION_HREF)
        credentials = base64.b64encode(b"APIKEY1:api-key-secret").decode()

        exchange = await application.authenticate_api_request({
            "method": "POST",
            "url": "/oauth/token",
            "headers": {"Authorization": f"Basic {credentials}"},
            "body": {"grant_type": "client_credentials"},
        })
        token = exchange.get_access_token()

        result = await application.authenticate_api_request({
            "method": "GET",
            "url": "/orders",
            "headers": {"Authorization": f"Bearer {token}"},
        })

        assert result.api_key.id == "APIKEY1"
        assert (await result.get_account()).href == ACCOUNT_HREF
        assert executor.requests_to(APPLICATION_HREF) == 1
        assert executor.requests_to(f"{APPLICATION_HREF}/apiKeys") == 1

        stats = client.cache_manager.stats
        assert stats["apiKeys"].hits >= 1
        assert stats["accounts"].hits >= 1

    @pytest.mark.asyncio
    async def test_rejected_api_key(self, client):
        application = await client.get_application(APPLICATION_HREF)
        credentials = base64.b64encode(b"APIKEY1:guess").decode()

        with pytest.raises(InvalidCredentialsError):
            await application.authenticate_api_request({
                "method": "GET",
                "url": "/orders",
                "headers": {"Authorization": f"Basic {credentials}"},
            })

    @pytest.mark.asyncio
    async def test_password_grant_then_remote_validation(self, client, executor):
        application = await client.get_application(APPLICATION_HREF)

        grant = await PasswordGrantAuthenticator(application).authenticate({"username": "jane", "password": "pw"})
        token = grant.get_access_token()
        executor.add(
            TestDataFactory.access_token_record(token, ACCOUNT_HREF),
            href=f"{APPLICATION_HREF}/authTokens/{token}",
        )

        result = await JwtAuthenticator(application).authenticate(token)

        assert result.account_href == grant.account_href == ACCOUNT_HREF
        account = await result.get_account()
        assert account.email == "jane.doe@example.com"

    @pytest.mark.asyncio
    async def test_id_site_round_trip(self, client):
        application = await client.get_application(APPLICATION_HREF)

        url = application.create_id_site_url("https://myapp.example.com/cb", state="checkout")
        request_claims = verify(parse_qs(urlsplit(url).query)["jwtRequest"][0], TENANT_API_KEY_SECRET).claims
        assert request_claims["iss"] == TENANT_API_KEY_ID

        response = MockTokenGenerator().id_site_response(ACCOUNT_HREF, state=request_claims["state"])
        callback = f"https://myapp.example.com/cb?jwtResponse={response}"

        result = await application.handle_id_site_callback(callback)
        assert result.state == "checkout"
        assert result.account.href == ACCOUNT_HREF

        with pytest.raises(NonceAlreadyUsedError):
            await application.handle_id_site_callback(callback)

    @pytest.mark.asyncio
    async def test_client_context_closes_executor(self, executor):
        async with Client(TestEnvironment.settings(), executor=executor) as client:
            await client.get_application(APPLICATION_HREF)

        assert executor.closed is True

    def test_client_requires_tenant_key(self):
        with pytest.raises(ConfigurationError):
            Client(TestEnvironment.settings(api_key_id=None, api_key_secret=None))
