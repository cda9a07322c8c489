"""
Compact JWT helpers shared by the authenticators.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from jose import jwt
from jose.exceptions import JWTError

DEFAULT_ALGORITHM = "HS256"


def now_epoch_seconds() -> int:
    return int(time.time())


@dataclass
class ExpandedJwt:
    """A verified token split into its header and claims."""

    compact: str
    header: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def claims(self) -> Dict[str, Any]:
        return self.body

    @property
    def kid(self) -> Optional[str]:
        return self.header.get("kid")

    @property
    def signature(self) -> str:
        return self.compact.rsplit(".", 1)[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {"header": dict(self.header), "claims": dict(self.body), "signature": self.signature}


def sign(
    claims: Dict[str, Any],
    secret: str,
    *,
    kid: Optional[str] = None,
    headers: Optional[Dict[str, Any]] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Sign ``claims`` into a compact JWT."""
    extra_headers = dict(headers or {})
    extra_headers.pop("alg", None)
    extra_headers.pop("typ", None)
    if kid:
        extra_headers["kid"] = kid
    return jwt.encode(claims, secret, algorithm=algorithm, headers=extra_headers or None)


def verify(
    token: str,
    secret: str,
    *,
    verify_exp: bool = True,
    algorithms: Iterable[str] = (DEFAULT_ALGORITHM,),
) -> ExpandedJwt:
    """Verify the signature (and by default the expiry) of ``token``.

    Audience is never checked here; callers that care compare ``aud``
    themselves so they can report a specific error.
    """
    if not isinstance(token, str) or not token:
        raise JWTError("Token must be a non-empty string")

    claims = jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        options={"verify_aud": False, "verify_exp": verify_exp},
    )
    return ExpandedJwt(compact=token, header=jwt.get_unverified_header(token), body=claims)


def unverified_header(token: str) -> Dict[str, Any]:
    return jwt.get_unverified_header(token)


def unverified_claims(token: str) -> Dict[str, Any]:
    return jwt.get_unverified_claims(token)
