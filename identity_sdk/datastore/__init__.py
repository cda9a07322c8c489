"""
Resource fetch/create layer.
"""

from .cached import CachingDataStore
from .http import HttpRequestExecutor
from .nonce_store import NonceStore
from .protocols import DataStore, RequestExecutor

__all__ = [
    "CachingDataStore",
    "DataStore",
    "HttpRequestExecutor",
    "NonceStore",
    "RequestExecutor",
]
