"""
Shared error handling for the identity SDK.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    status_code: int
    error: Optional[str] = None
    details: Dict[str, Any] = {}


class IdentityClientError(Exception):
    """Base exception for identity SDK failures."""

    status_code: int = 400

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        self.error = error
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return self.message

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            status_code=self.status_code,
            error=self.error,
            details=self.details,
        )


class MalformedRequestError(IdentityClientError, ValueError):
    """Missing or wrong-typed request input."""

    status_code = 400

    def __init__(self, message: str = "Malformed request", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_REQUEST", message, details)


class InvalidCredentialsError(IdentityClientError):
    """Secret mismatch, disabled key or account, bad Basic header."""

    status_code = 401

    def __init__(
        self,
        message: str = "Invalid Client Credentials",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 401,
        error: Optional[str] = "invalid_client",
    ):
        super().__init__("INVALID_CREDENTIALS", message, details, status_code=status_code, error=error)


class UnauthenticatedError(IdentityClientError):
    """Token could not be accepted."""

    status_code = 401
    default_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(self.default_code, message, details, status_code=401)


class InvalidSignatureError(UnauthenticatedError):
    default_code = "INVALID_SIGNATURE"


class TokenExpiredError(UnauthenticatedError):
    default_code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "Token has expired", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidAudienceError(UnauthenticatedError):
    default_code = "INVALID_AUDIENCE"


class NonceAlreadyUsedError(UnauthenticatedError):
    default_code = "ALREADY_USED"

    def __init__(self, message: str = "JWT has already been used.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ApplicationMismatchError(UnauthenticatedError):
    default_code = "APPLICATION_MISMATCH"


class TokenRevokedError(UnauthenticatedError):
    default_code = "TOKEN_REVOKED"

    def __init__(self, message: str = "Token has been revoked", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class RemoteLookupError(IdentityClientError):
    """A fetch or create call against the remote API failed."""

    def __init__(
        self,
        message: str = "Remote lookup failed",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 502,
    ):
        super().__init__("REMOTE_LOOKUP_ERROR", message, details, status_code=status_code)


class ResourceError(RemoteLookupError):
    """Error document returned by the REST API for a resource href."""

    def __init__(self, uri: str, body: Optional[Dict[str, Any]] = None):
        body = body or {}
        self.uri = uri
        self.status = int(body.get("status") or 500)
        self.remote_code = body.get("code")
        self.developer_message = body.get("developerMessage")
        self.more_info = body.get("moreInfo")
        super().__init__(
            body.get("message") or f"HTTP {self.status} for resource '{uri}'",
            details={
                "uri": uri,
                "code": self.remote_code,
                "developer_message": self.developer_message,
                "more_info": self.more_info,
            },
            status_code=self.status,
        )

    def __str__(self) -> str:
        return (
            f"HTTP {self.status} for resource '{self.uri}', "
            f"code {self.remote_code} ({self.more_info}): {self.developer_message}"
        )


class IdSiteError(RemoteLookupError):
    """Error embedded in an ID Site or SAML callback token."""

    def __init__(self, err: Dict[str, Any]):
        self.err = err
        super().__init__(
            err.get("message") or "ID Site returned an error",
            details=dict(err),
            status_code=int(err.get("status") or 400),
        )
        self.code = "ID_SITE_ERROR"


class ConfigurationError(IdentityClientError):
    """SDK component is missing configuration it needs at the point of use."""

    status_code = 500

    def __init__(self, message: str = "Configuration error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details, status_code=500)
