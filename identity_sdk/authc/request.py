"""
Extraction of credential material from a framework-agnostic request.
"""

from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from shared.errors import MalformedRequestError

VALID_LOCATIONS = ("header", "body", "url")
DEFAULT_LOCATIONS = ("header", "body")


def filter_locations(locations: Optional[Iterable[str]]) -> List[str]:
    if locations is None:
        return list(DEFAULT_LOCATIONS)
    if isinstance(locations, str):
        raise MalformedRequestError("locations must be a list")
    return [location for location in locations if location in VALID_LOCATIONS]


def header_value(headers: Mapping[str, Any], name: str) -> str:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == wanted:
            return value or ""
    return ""


def validate_request(request: Any) -> None:
    if not isinstance(request, Mapping):
        raise MalformedRequestError("request must be an object")
    if not isinstance(request.get("url"), str):
        raise MalformedRequestError("request must have a url string")
    if not isinstance(request.get("headers"), Mapping):
        raise MalformedRequestError("request must have a headers object")
    if not isinstance(request.get("method"), str):
        raise MalformedRequestError("request must have a method property")


class AuthRequestParser:
    """Reads the authorization value, grant type, access token and scope of a request.

    The query string is only consulted for ``access_token`` when ``url`` is
    one of the search locations.
    """

    def __init__(self, request: Mapping[str, Any], locations: Optional[Iterable[str]] = None):
        validate_request(request)
        locations = filter_locations(locations)

        search_body = "body" in locations
        search_header = "header" in locations
        search_url = "url" in locations

        url_params = {key: values[0] for key, values in parse_qs(urlsplit(request["url"]).query).items()}
        body = request.get("body")

        self.method = request["method"].upper()
        self.body = body if search_body and isinstance(body, Mapping) else {}
        self.headers = request["headers"] if search_header else {}

        self.grant_type = self.body.get("grant_type") or url_params.get("grant_type") or ""
        self.authorization_value = header_value(self.headers, "authorization") if search_header else ""

        if search_url:
            self.access_token = (
                url_params.get("access_token") or self.body.get("access_token") or self.authorization_value
            )
        else:
            self.access_token = self.body.get("access_token") or self.authorization_value

        self.requested_scope = [
            scope for scope in (self.body.get("scope") or url_params.get("scope") or "").split(" ") if scope
        ]
