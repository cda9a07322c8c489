"""
Shared utilities for the identity SDK.

This package aggregates ambient building blocks consumed by ``identity_sdk``:

- config: SDK settings via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and responses
- retry: Retry decorator for the HTTP transport
- test_helpers: Factories for signed tokens and resource payloads

Do not import from identity_sdk into shared/.
"""
