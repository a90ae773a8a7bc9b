"""Error taxonomy for the relay.

ConfigurationError is raised once, at startup, and is never caught: the
process must not come up without its OAuth credentials.

Everything else derives from RelayError.  Route handlers raise these and
a single exception handler (registered in main.py) renders them as

    {"error": <message>}                          validation failures
    {"error": <message>, "details": <upstream>}   upstream failures

The upstream body is forwarded verbatim under "details" so the browser
sees exactly what Spotify said.  That couples our error contract to the
provider's error shape; existing clients depend on it.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class ConfigurationError(ValueError):
    """A required setting is missing or malformed."""


class RelayError(Exception):
    """Base for request-scoped errors rendered at the route boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    include_details: bool = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.include_details:
            body["details"] = self.details
        return body


class ValidationError(RelayError):
    """The caller omitted a required field or cookie."""

    status_code = status.HTTP_400_BAD_REQUEST


class MissingCredential(ValidationError):
    """A grant was attempted without the credential it needs."""


class UpstreamError(RelayError):
    """An upstream call failed; carries the upstream status and body."""

    include_details = True

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, details=details)
        self.upstream_status = upstream_status


class UpstreamAuthError(UpstreamError):
    """The token endpoint rejected a code or refresh grant.

    Always reported as 500, whatever the provider answered.
    """


class UpstreamResourceError(UpstreamError):
    """A proxied resource call failed.

    The upstream status is propagated unchanged so the browser can tell
    an expired token (401) from a missing resource (404) or an outage.
    """

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(
            message,
            upstream_status=upstream_status,
            details=details,
            status_code=upstream_status or status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
