"""
Error taxonomy for the TaskHub services.

Services raise these; main.py renders them as {"error": true, "message": ...}
with the matching HTTP status.
"""

from typing import Any, Optional


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": True, "message": self.message}
        if self.details is not None:
            body["errors"] = self.details
        return body


class ValidationError(ServiceError):
    """Malformed or missing input. Nothing was mutated."""
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class AuthorizationError(ServiceError):
    """Principal is known but lacks permission for the entity or action."""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class DependencyFailure(ServiceError):
    """Store or identity provider unreachable."""
    status_code = 500
