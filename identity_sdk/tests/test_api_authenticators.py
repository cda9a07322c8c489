"""
Unit tests for API key authentication: Basic, client-credentials exchange and bearer tokens.
"""

import base64
import time

import pytest

from identity_sdk.application import Application
from identity_sdk.authc import authenticate_api_request
from identity_sdk.authc.access_token import OAuthAccessTokenAuthenticator, normalize_claims
from identity_sdk.authc.basic import BasicApiAuthenticator
from identity_sdk.authc.credentials import call_scope_factory, decode_basic_credentials
from identity_sdk.authc.request import AuthRequestParser, filter_locations
from identity_sdk.client import Client
from identity_sdk.resources import ApplicationData
from identity_sdk.tokens import verify
from shared.errors import (
    InvalidCredentialsError,
    InvalidSignatureError,
    MalformedRequestError,
    TokenExpiredError,
)
from shared.test_helpers import (
    APPLICATION_HREF,
    BASE_URL,
    TENANT_API_KEY_SECRET,
    FakeRequestExecutor,
    MockTokenGenerator,
    TestDataFactory,
    TestEnvironment,
)


def basic_header(key_id, secret):
    return "Basic " + base64.b64encode(f"{key_id}:{secret}".encode()).decode()


def api_request(headers=None, method="GET", url="/protected", body=None):
    request = {"method": method, "url": url, "headers": headers or {}}
    if body is not None:
        request["body"] = body
    return request


class ApplicationFixtures:
    """Application backed by an in-memory executor holding two API keys."""

    @pytest.fixture
    def executor(self):
        executor = FakeRequestExecutor()
        enabled = TestDataFactory.api_key()
        disabled = TestDataFactory.api_key("APIKEY2", secret="other-secret", status="DISABLED")
        locked = TestDataFactory.api_key(
            "APIKEY3", secret="locked-secret", account=TestDataFactory.account("ACCOUNT3", status="DISABLED")
        )
        executor.add_api_keys(APPLICATION_HREF, [enabled, disabled, locked])
        executor.add(TestDataFactory.account())
        return executor

    @pytest.fixture
    def application(self, executor):
        client = Client(TestEnvironment.settings(), executor=executor)
        return Application(client, ApplicationData.model_validate(TestDataFactory.application()))

    @pytest.fixture
    def tokens(self):
        return MockTokenGenerator()


class TestBasicApiAuthenticator(ApplicationFixtures):
    """Test cases for Basic API key authentication."""

    @pytest.mark.asyncio
    async def test_valid_credentials(self, application):
        result = await BasicApiAuthenticator(application, basic_header("APIKEY1", "api-key-secret")).authenticate()

        assert result.api_key.id == "APIKEY1"
        assert result.account_href == f"{BASE_URL}/accounts/ACCOUNT1"
        account = await result.get_account()
        assert account.email == "jane.doe@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key_id,secret",
        [
            ("APIKEY1", "wrong-secret"),
            ("APIKEY2", "other-secret"),
            ("APIKEY3", "locked-secret"),
            ("NOSUCHKEY", "whatever"),
        ],
    )
    async def test_rejected_credentials(self, application, key_id, secret):
        """Only a matching secret on an enabled key of an enabled account passes."""
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await BasicApiAuthenticator(application, basic_header(key_id, secret)).authenticate()

        assert exc_info.value.status_code == 401
        assert exc_info.value.error == "invalid_client"
        assert exc_info.value.message == "Invalid Client Credentials"

    @pytest.mark.asyncio
    async def test_second_authentication_is_served_from_cache(self, application, executor):
        header = basic_header("APIKEY1", "api-key-secret")

        await BasicApiAuthenticator(application, header).authenticate()
        result = await BasicApiAuthenticator(application, header).authenticate()

        assert result.api_key.secret == "api-key-secret"
        assert result.api_key.account["email"] == "jane.doe@example.com"
        assert executor.requests_to(f"{APPLICATION_HREF}/apiKeys") == 1

    @pytest.mark.parametrize(
        "header",
        [
            "Basic !!!",
            "Basic " + base64.b64encode(b"no-colon").decode(),
            "Basic " + base64.b64encode(b"a:b:c").decode(),
        ],
    )
    def test_malformed_header(self, application, header):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            BasicApiAuthenticator(application, header)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid Authorization value"

    def test_decode_basic_credentials(self):
        assert decode_basic_credentials(basic_header("id", "s3cret")) == ("id", "s3cret")
        assert decode_basic_credentials("basic " + base64.b64encode(b"id:").decode()) == ("id", "")


class TestAuthenticateApiRequest(ApplicationFixtures):
    """Test cases for request dispatch."""

    @pytest.mark.parametrize(
        "request_value",
        [
            "not-a-request",
            {"method": "GET", "headers": {}},
            {"method": "GET", "url": "/", "headers": "x"},
            {"url": "/", "headers": {}},
        ],
    )
    def test_request_shape_errors_raise_synchronously(self, application, request_value):
        with pytest.raises(MalformedRequestError):
            authenticate_api_request(application, request_value)

    def test_invalid_options_raise_synchronously(self, application):
        with pytest.raises(MalformedRequestError):
            authenticate_api_request(application, api_request(), ttl="long")
        with pytest.raises(MalformedRequestError):
            authenticate_api_request(application, api_request(), scope_factory="read")
        with pytest.raises(MalformedRequestError):
            authenticate_api_request(application, api_request(), locations="header")

    @pytest.mark.asyncio
    async def test_missing_credentials(self, application):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await authenticate_api_request(application, api_request())

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Must provide access_token."

    @pytest.mark.asyncio
    async def test_unsupported_grant_type(self, application):
        request = api_request(
            {"Authorization": basic_header("APIKEY1", "api-key-secret")},
            method="POST",
            body={"grant_type": "password"},
        )

        with pytest.raises(MalformedRequestError):
            await authenticate_api_request(application, request)

    @pytest.mark.asyncio
    async def test_unknown_scheme(self, application):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await authenticate_api_request(application, api_request({"Authorization": "Digest abc"}))

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_basic_request(self, application):
        result = await application.authenticate_api_request(
            api_request({"authorization": basic_header("APIKEY1", "api-key-secret")})
        )

        assert result.api_key.id == "APIKEY1"

    @pytest.mark.asyncio
    async def test_exchange_issues_signed_token(self, application):
        async def scope_factory(account, requested):
            assert account.href == f"{BASE_URL}/accounts/ACCOUNT1"
            return [scope for scope in requested if scope != "admin"]

        request = api_request(
            {"Authorization": basic_header("APIKEY1", "api-key-secret")},
            method="POST",
            url="/oauth/token",
            body={"grant_type": "client_credentials", "scope": "read admin"},
        )

        result = await authenticate_api_request(application, request, ttl=600, scope_factory=scope_factory)

        response = result.get_access_token_response()
        assert response.token_type == "bearer"
        assert response.expires_in == 600
        assert response.scope == "read"
        assert result.scopes == ["read"]

        claims = verify(response.access_token, TENANT_API_KEY_SECRET).claims
        assert claims["sub"] == "APIKEY1"
        assert claims["iss"] == APPLICATION_HREF
        assert claims["exp"] - claims["iat"] == 600
        assert claims["scope"] == "read"

    @pytest.mark.asyncio
    async def test_exchange_requires_post(self, application):
        request = api_request(
            {"Authorization": basic_header("APIKEY1", "api-key-secret")},
            url="/oauth/token?grant_type=client_credentials",
        )

        with pytest.raises(MalformedRequestError):
            await authenticate_api_request(application, request)

    @pytest.mark.asyncio
    async def test_exchanged_token_authenticates_as_bearer(self, application):
        exchange = await authenticate_api_request(
            application,
            api_request(
                {"Authorization": basic_header("APIKEY1", "api-key-secret")},
                method="POST",
                body={"grant_type": "client_credentials"},
            ),
        )
        token = exchange.get_access_token()

        result = await authenticate_api_request(application, api_request({"Authorization": f"Bearer {token}"}))

        assert result.api_key.id == "APIKEY1"
        assert result.get_access_token() == token
        assert result.jwt_claims["sub"] == "APIKEY1"

    @pytest.mark.asyncio
    async def test_access_token_in_body(self, application, tokens):
        token = tokens.sdk_access_token(scope="read write")

        result = await authenticate_api_request(
            application, api_request(method="POST", body={"access_token": token})
        )

        assert result.scopes == ["read", "write"]

    @pytest.mark.asyncio
    async def test_query_string_only_when_url_location_enabled(self, application, tokens):
        request = api_request(url=f"/protected?access_token={tokens.sdk_access_token()}")

        with pytest.raises(InvalidCredentialsError):
            await authenticate_api_request(application, request)

        result = await authenticate_api_request(application, request, locations=["url"])
        assert result.api_key.id == "APIKEY1"


class TestOAuthAccessTokenAuthenticator(ApplicationFixtures):
    """Test cases for locally verified access tokens."""

    def test_tampered_token(self, application, tokens):
        token = tokens.sdk_access_token(secret="someone-elses-secret")

        with pytest.raises(InvalidSignatureError) as exc_info:
            OAuthAccessTokenAuthenticator(application, token)

        assert exc_info.value.status_code == 401

    def test_expired_token(self, application, tokens):
        with pytest.raises(TokenExpiredError):
            OAuthAccessTokenAuthenticator(application, tokens.sdk_access_token(expires_in=-10))

    def test_missing_claims(self, application, tokens):
        token = tokens.encode({"iss": APPLICATION_HREF})

        with pytest.raises(MalformedRequestError):
            OAuthAccessTokenAuthenticator(application, token)

    @pytest.mark.asyncio
    async def test_account_subject(self, application, tokens):
        token = tokens.sdk_access_token(subject=f"{BASE_URL}/accounts/ACCOUNT1")

        result = await OAuthAccessTokenAuthenticator(application, token).authenticate()

        assert result.api_key is None
        assert result.account_href == f"{BASE_URL}/accounts/ACCOUNT1"

    @pytest.mark.asyncio
    async def test_disabled_account_subject(self, application, executor, tokens):
        executor.add(TestDataFactory.account("ACCOUNT9", status="DISABLED"))
        token = tokens.sdk_access_token(subject=f"{BASE_URL}/accounts/ACCOUNT9")

        with pytest.raises(InvalidCredentialsError):
            await OAuthAccessTokenAuthenticator(application, token).authenticate()

    @pytest.mark.asyncio
    async def test_disabled_key_subject(self, application, tokens):
        with pytest.raises(InvalidCredentialsError):
            await OAuthAccessTokenAuthenticator(application, tokens.sdk_access_token("APIKEY2")).authenticate()

    @pytest.mark.asyncio
    async def test_unknown_key_subject(self, application, tokens):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await OAuthAccessTokenAuthenticator(application, tokens.sdk_access_token("GONE")).authenticate()

        assert exc_info.value.error == "invalid_client"


class TestClaimNormalization:
    """Test cases for normalize_claims."""

    def test_standard_layout(self):
        claims = {"sub": "KEY", "iat": 100, "exp": 200, "scope": "a b"}

        assert normalize_claims(claims) == {"subject": "KEY", "issued_at": 100, "expires_at": 200, "scope": "a b"}

    def test_legacy_layout(self):
        claims = {"client_id": "KEY", "timestamp": 1_000, "expires_in": 3600}

        normalized = normalize_claims(claims)

        assert normalized["subject"] == "KEY"
        assert normalized["expires_at"] == 4_600
        assert normalized["scope"] == ""

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "KEY", "iat": 100},
            {"sub": "", "iat": 100, "exp": 200},
            {"sub": "KEY", "iat": True, "exp": 200},
            {"client_id": "KEY", "timestamp": "yesterday", "expires_in": 10},
            {"sub": "KEY", "iat": 100, "exp": 200, "scope": ["a"]},
        ],
    )
    def test_invalid_claims(self, claims):
        with pytest.raises(MalformedRequestError):
            normalize_claims(claims)


class TestAuthRequestParser:
    """Test cases for AuthRequestParser."""

    def test_filter_locations(self):
        assert filter_locations(None) == ["header", "body"]
        assert filter_locations(["url", "cookie", "header"]) == ["url", "header"]

    def test_reads_body_and_header(self):
        parser = AuthRequestParser(
            {
                "method": "post",
                "url": "/token?grant_type=ignored",
                "headers": {"AUTHORIZATION": "Bearer abc"},
                "body": {"grant_type": "client_credentials", "scope": "read  write"},
            }
        )

        assert parser.method == "POST"
        assert parser.grant_type == "client_credentials"
        assert parser.authorization_value == "Bearer abc"
        assert parser.requested_scope == ["read", "write"]

    def test_header_location_disabled(self):
        parser = AuthRequestParser(
            {"method": "GET", "url": "/", "headers": {"Authorization": "Bearer abc"}}, ["body"]
        )

        assert parser.authorization_value == ""
        assert parser.access_token == ""


@pytest.mark.asyncio
async def test_call_scope_factory_accepts_sync_and_async():
    async def async_factory(account, requested):
        return "a b"

    assert await call_scope_factory(None, None, []) == ""
    assert await call_scope_factory(lambda account, requested: ["x", "y"], None, []) == "x y"
    assert await call_scope_factory(async_factory, None, []) == "a b"


def test_tokens_carry_current_time():
    claims = verify(MockTokenGenerator().sdk_access_token(), TENANT_API_KEY_SECRET).claims

    assert abs(claims["iat"] - time.time()) < 5
