"""Common exceptions for the Guirlande server."""

from typing import Any, Dict, List, Optional


class GuirlandeError(Exception):
    """Base exception for all Guirlande errors."""

    pass


class ValidationError(GuirlandeError):
    """Invalid input for a persisted entity or a request.

    Carries a list of field errors so the API can report every problem at once.
    """

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        super().__init__("; ".join(e["error_description"] for e in errors))

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build a validation error for a single field"""
        return cls(
            [{"error": "invalid_request", "error_description": message, "field": field}]
        )


class NotFoundError(GuirlandeError):
    """Unknown module or project."""

    pass


class ModuleError(GuirlandeError):
    """Module command rejected (offline, already online, bad payload)."""

    pass


class LoopParseError(GuirlandeError):
    """Malformed LED strip loop script."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid loop part data: {token!r}")


class AccessDeniedError(GuirlandeError):
    """Guirlande access refused."""

    pass


class AuthenticationError(GuirlandeError):
    """Missing or invalid credentials."""

    pass


class ConfigurationError(GuirlandeError):
    """Configuration error."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
