"""
Typed wrappers over the REST resources that authentication touches.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResourceStatus(str, Enum):
    """Status values used by accounts, api keys and applications."""
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"
    UNVERIFIED = "UNVERIFIED"


class Resource(BaseModel):
    """Any REST resource; unknown wire fields are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    href: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Optional[Dict[str, Any]]):
        return cls.model_validate(data or {})

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @property
    def is_expanded(self) -> bool:
        """True when more than the bare link was returned."""
        return len(self.to_wire()) > 1


class Link(Resource):
    href: str


def link_href(value: Any) -> Optional[str]:
    """Href of a link given as ``{"href": ...}``, a resource or a plain string."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Resource):
        return value.href
    if isinstance(value, dict):
        return value.get("href")
    return None


class Account(Resource):
    username: Optional[str] = None
    email: Optional[str] = None
    given_name: Optional[str] = None
    surname: Optional[str] = None
    full_name: Optional[str] = None
    status: Optional[str] = None
    directory: Optional[Dict[str, Any]] = None

    @property
    def is_enabled(self) -> bool:
        return (self.status or "").upper() == ResourceStatus.ENABLED.value


class ApiKey(Resource):
    id: Optional[str] = None
    secret: Optional[str] = None
    status: Optional[str] = None
    account: Optional[Dict[str, Any]] = None

    @property
    def is_enabled(self) -> bool:
        return (self.status or "").upper() == ResourceStatus.ENABLED.value

    @property
    def account_href(self) -> Optional[str]:
        return link_href(self.account)


class Directory(Resource):
    name: Optional[str] = None
    status: Optional[str] = None
    accounts: Optional[Dict[str, Any]] = None


class ApplicationData(Resource):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    tenant: Optional[Dict[str, Any]] = None
    api_keys: Optional[Dict[str, Any]] = None
    saml_policy: Optional[Dict[str, Any]] = None
    auth_tokens: Optional[Dict[str, Any]] = None


class AccessToken(Resource):
    """Server-side record of an issued access token."""
    account: Optional[Dict[str, Any]] = None
    application: Optional[Dict[str, Any]] = None
    jwt: Optional[str] = None
    expanded_jwt: Optional[Dict[str, Any]] = None


class SamlServiceProvider(Resource):
    sso_initiation_endpoint: Optional[Dict[str, Any]] = None


class SamlPolicy(Resource):
    service_provider: Optional[Dict[str, Any]] = None


class CollectionResource(Resource):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    offset: Optional[int] = None
    limit: Optional[int] = None
    size: Optional[int] = None


class AccessTokenResponse(BaseModel):
    """OAuth token endpoint response; the wire names are already snake_case."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: int
    scope: Optional[str] = None
    stormpath_access_token_href: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Optional[Dict[str, Any]]):
        return cls.model_validate(data or {})

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
