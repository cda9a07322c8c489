"""
Dispatch of an inbound API request to the matching authenticator.
"""

from typing import Any, Awaitable, Iterable, Mapping, Optional

from shared.errors import InvalidCredentialsError, MalformedRequestError
from shared.logging import get_logger
from .access_token import OAuthAccessTokenAuthenticator
from .basic import BasicApiAuthenticator
from .basic_exchange import OAuthBasicExchangeAuthenticator
from .credentials import ScopeFactory, invalid_authorization_value, is_basic, is_bearer, strip_bearer
from .request import AuthRequestParser, filter_locations
from .results import ApiAuthenticationResult

logger = get_logger("identity_sdk.authc.api_request")


def authenticate_api_request(
    application: Any,
    request: Mapping[str, Any],
    *,
    ttl: Optional[int] = None,
    scope_factory: Optional[ScopeFactory] = None,
    locations: Optional[Iterable[str]] = None,
) -> Awaitable[ApiAuthenticationResult]:
    """Authenticate ``request`` with whichever API credential it carries.

    Request-shape problems raise immediately; everything that needs a
    remote lookup happens in the returned coroutine.
    """
    if not isinstance(request, Mapping):
        raise MalformedRequestError("options.request must be an object")
    if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, (int, float))):
        raise MalformedRequestError("ttl must be a number")
    if scope_factory is not None and not callable(scope_factory):
        raise MalformedRequestError("scope_factory must be callable")

    parser = AuthRequestParser(request, filter_locations(locations))
    return _authenticate(application, request, parser, ttl, scope_factory)


async def _authenticate(
    application: Any,
    request: Mapping[str, Any],
    parser: AuthRequestParser,
    ttl: Optional[int],
    scope_factory: Optional[ScopeFactory],
) -> ApiAuthenticationResult:
    grant_type = parser.grant_type
    if grant_type and grant_type != "client_credentials":
        raise MalformedRequestError("Unsupported grant_type")

    authorization = parser.authorization_value

    if authorization:
        if is_basic(authorization):
            if grant_type:
                authenticator = OAuthBasicExchangeAuthenticator(
                    application, request, ttl, scope_factory, parser.requested_scope
                )
            else:
                authenticator = BasicApiAuthenticator(application, authorization, ttl)
        elif is_bearer(authorization):
            authenticator = OAuthAccessTokenAuthenticator(application, strip_bearer(authorization), ttl)
        else:
            logger.warning("Unsupported authorization scheme", application_href=application.href)
            raise invalid_authorization_value()
    elif parser.access_token:
        authenticator = OAuthAccessTokenAuthenticator(application, parser.access_token, ttl)
    else:
        raise InvalidCredentialsError("Must provide access_token.", status_code=401, error=None)

    return await authenticator.authenticate()
