"""
SAML and ID Site federation helpers.
"""

from .id_site import IdSiteAuthenticationResult, IdSiteCallbackHandler, IdSiteUrlBuilder
from .idp_url_builder import SamlIdpUrlBuilder

__all__ = [
    "IdSiteAuthenticationResult",
    "IdSiteCallbackHandler",
    "IdSiteUrlBuilder",
    "SamlIdpUrlBuilder",
]
