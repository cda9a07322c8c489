"""
Interfaces between the authentication core and the REST layer.
"""

from typing import Any, Dict, Optional, Protocol, Type, TypeVar

from ..resources import Resource

R = TypeVar("R")


class RequestExecutor(Protocol):
    """Sends one HTTP request and returns the decoded JSON body."""

    async def execute(
        self,
        method: str,
        href: str,
        *,
        query: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        ...

    async def close(self) -> None:
        ...


class DataStore(Protocol):
    """Fetch a resource by href, or create one by posting to an href."""

    async def get_resource(
        self,
        href: str,
        query: Optional[Dict[str, Any]] = None,
        resource_type: Type[R] = Resource,
    ) -> R:
        ...

    async def create_resource(
        self,
        href: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        query: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
        resource_type: Type[R] = Resource,
    ) -> R:
        ...
