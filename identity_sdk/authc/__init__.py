"""
API key and assertion authenticators.
"""

from .access_token import OAuthAccessTokenAuthenticator
from .api_request import authenticate_api_request
from .assertion import AssertionAuthenticationResult, AssertionAuthenticator
from .basic import BasicApiAuthenticator
from .basic_exchange import OAuthBasicExchangeAuthenticator
from .request import AuthRequestParser
from .results import ApiAuthenticationResult

__all__ = [
    "ApiAuthenticationResult",
    "AssertionAuthenticationResult",
    "AssertionAuthenticator",
    "AuthRequestParser",
    "BasicApiAuthenticator",
    "OAuthAccessTokenAuthenticator",
    "OAuthBasicExchangeAuthenticator",
    "authenticate_api_request",
]
