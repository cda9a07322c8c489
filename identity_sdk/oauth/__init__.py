"""
OAuth2 grants, access token authenticators and their results.
"""

from .access_token_authenticator import AccessTokenAuthenticator
from .authenticator import OAuthAuthenticator
from .grants import (
    ClientCredentialsGrantAuthenticator,
    IdSiteTokenGrantAuthenticator,
    OAuthGrantAuthenticator,
    PasswordGrantAuthenticator,
    RefreshGrantAuthenticator,
    StormpathSocialGrantAuthenticator,
    StormpathTokenGrantAuthenticator,
)
from .jwt_authenticator import JwtAuthenticator
from .results import (
    ClientCredentialsAuthenticationResult,
    IdSiteTokenAuthenticationResult,
    JwtAuthenticationResult,
    PasswordGrantAuthenticationResult,
    RefreshGrantAuthenticationResult,
    StormpathAccessTokenAuthenticationResult,
    StormpathSocialAuthenticationResult,
    StormpathTokenAuthenticationResult,
)
from .scope_factory import ScopeFactoryCapable

__all__ = [
    "AccessTokenAuthenticator",
    "ClientCredentialsAuthenticationResult",
    "ClientCredentialsGrantAuthenticator",
    "IdSiteTokenAuthenticationResult",
    "IdSiteTokenGrantAuthenticator",
    "JwtAuthenticationResult",
    "JwtAuthenticator",
    "OAuthAuthenticator",
    "OAuthGrantAuthenticator",
    "PasswordGrantAuthenticationResult",
    "PasswordGrantAuthenticator",
    "RefreshGrantAuthenticationResult",
    "RefreshGrantAuthenticator",
    "ScopeFactoryCapable",
    "StormpathAccessTokenAuthenticationResult",
    "StormpathSocialAuthenticationResult",
    "StormpathSocialGrantAuthenticator",
    "StormpathTokenAuthenticationResult",
    "StormpathTokenGrantAuthenticator",
]
