"""Application-wide exception hierarchy for UXR Metrics.

All custom exceptions subclass ``UXRMetricsError`` so route handlers and the
app-level exception handlers can map them onto HTTP responses in one place.

Hierarchy::

    UXRMetricsError
    ├── UnauthorizedError
    ├── ConfigurationError
    ├── ExternalServiceError   (service, status_code)
    ├── NotFoundError          (resource, identifier)
    └── ConflictError
"""

from __future__ import annotations


class UXRMetricsError(Exception):
    """Base class for all UXR Metrics exceptions."""


class UnauthorizedError(UXRMetricsError):
    """Raised when the caller has no valid ADMIN session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ConfigurationError(UXRMetricsError):
    """Raised when required runtime configuration is missing.

    The typical case is an import requested for a service that has no active
    API token stored.
    """


class ExternalServiceError(UXRMetricsError):
    """Raised when an external research platform call fails.

    Args:
        message: Human-readable description of the failure.
        service: Service identifier (``"QUALTRICS"`` or ``"GREAT_QUESTION"``).
        status_code: Upstream HTTP status, when a response was received.
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class NotFoundError(UXRMetricsError):
    """Raised when a requested row does not exist."""

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class ConflictError(UXRMetricsError):
    """Raised when a write would violate a uniqueness rule (e.g. tag name)."""
