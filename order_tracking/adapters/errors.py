# order_tracking/adapters/errors.py
from __future__ import annotations

from typing import Any, List, Optional


class PlatformError(Exception):
    """Base for every failure talking to the commerce platform."""


class TransportError(PlatformError):
    """Network failure: the platform could not be reached."""


class UpstreamError(PlatformError):
    """The platform answered with a non-2xx status (or a GraphQL `errors` list)."""

    def __init__(self, status_code: int, body: Any, *, endpoint: Optional[str] = None) -> None:
        super().__init__(f"platform error {status_code} on {endpoint or '?'}: {str(body)[:200]}")
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class DecodeError(PlatformError):
    """The platform answered with a body that is not valid JSON."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"invalid JSON from platform (status {status_code}): {body[:200]}")
        self.status_code = status_code
        self.body = body


class GraphQLUserError(PlatformError):
    """A GraphQL mutation reported `userErrors`."""

    def __init__(self, operation: str, errors: List[Any]) -> None:
        super().__init__(f"{operation} user errors: {errors!r}")
        self.operation = operation
        self.errors = errors
