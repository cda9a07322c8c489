"""
Credential helpers shared by the API authenticators.
"""

import base64
import binascii
import inspect
import re
from typing import Any, Callable, List, Optional, Tuple, Union

from shared.errors import InvalidCredentialsError, ResourceError

_SCHEME_BASIC = re.compile(r"^\s*basic\s+", re.IGNORECASE)
_SCHEME_BEARER = re.compile(r"^\s*bearer\s+", re.IGNORECASE)

ScopeFactory = Callable[..., Any]


def invalid_client(message: str = "Invalid Client Credentials") -> InvalidCredentialsError:
    return InvalidCredentialsError(message, status_code=401, error="invalid_client")


def invalid_authorization_value() -> InvalidCredentialsError:
    return InvalidCredentialsError("Invalid Authorization value", status_code=400, error=None)


def translate_lookup_error(exc: Exception) -> Exception:
    """A 404 while resolving a credential means the credential is unknown."""
    if isinstance(exc, ResourceError) and exc.status == 404:
        return invalid_client()
    return exc


def is_basic(authorization: str) -> bool:
    return bool(_SCHEME_BASIC.match(authorization or ""))


def is_bearer(authorization: str) -> bool:
    return bool(_SCHEME_BEARER.match(authorization or ""))


def strip_bearer(authorization: str) -> str:
    return _SCHEME_BEARER.sub("", authorization, count=1).strip()


def decode_basic_credentials(authorization: str) -> Tuple[str, str]:
    """``Basic base64(id:secret)`` -> ``(id, secret)``.

    Anything that does not decode to exactly two ``:`` separated parts is
    rejected with a 400.
    """
    encoded = _SCHEME_BASIC.sub("", authorization or "", count=1).strip()
    try:
        decoded = base64.b64decode(encoded, validate=False).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise invalid_authorization_value()

    parts = decoded.split(":")
    if len(parts) != 2:
        raise invalid_authorization_value()
    return parts[0], parts[1]


def normalize_scope(scope: Union[None, str, List[str]]) -> str:
    if not scope:
        return ""
    if isinstance(scope, (list, tuple)):
        return " ".join(str(s) for s in scope if s)
    return str(scope)


async def call_scope_factory(factory: Optional[ScopeFactory], *args: Any) -> str:
    """Run a sync or async scope factory and normalize what it returns."""
    if factory is None:
        return ""
    result = factory(*args)
    if inspect.isawaitable(result):
        result = await result
    return normalize_scope(result)
