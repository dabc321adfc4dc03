"""Error taxonomy shared by connectors, services, and the HTTP layer.

Every caller-visible failure carries a machine-readable ``kind`` and one of
three status classes: ``bad_input``, ``upstream_failure`` or ``internal``.
"""

from __future__ import annotations

from typing import Any

BAD_INPUT = "bad_input"
UPSTREAM_FAILURE = "upstream_failure"
INTERNAL = "internal"


class ScoutError(Exception):
    """Base error rendered by the API exception handler."""

    kind = "internal_error"
    status_class = INTERNAL
    status_code = 500

    def __init__(self, message: str, *, kind: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind:
            self.kind = kind
        if status_code:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        return {"kind": self.kind, "status_class": self.status_class, "message": self.message}


class ValidationError(ScoutError):
    """Malformed id, region or body; raised before any network call."""

    kind = "invalid_input"
    status_class = BAD_INPUT
    status_code = 400


class IdentityNotFoundError(ValidationError):
    """Raised when a vanity alias does not resolve to an account."""

    kind = "identity_not_found"
    status_code = 404


class UpstreamError(ScoutError):
    """A storefront or web API call failed or returned an unusable payload."""

    kind = "upstream_error"
    status_class = UPSTREAM_FAILURE
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        status_code: int | None = None,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message, kind=kind, status_code=status_code)
        self.upstream_status = upstream_status


class ConfigurationError(ScoutError):
    """Server-side configuration is missing (for example the Web API key)."""

    kind = "configuration_error"
    status_class = INTERNAL
    status_code = 500
