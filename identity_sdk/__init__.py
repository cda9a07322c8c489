"""
Identity SDK: API key and OAuth token authentication backed by a resource cache.
"""

from .application import Application
from .client import Client, TenantApiKey

__version__ = "0.1.0"

__all__ = ["Application", "Client", "TenantApiKey", "__version__"]
