"""
Board-wide exception hierarchy.

Services raise these; `main.py` registers one FastAPI handler per type so
every page and endpoint answers with the same short, human-readable message
and never a stack trace.

    raise RemoteError("Document not found", status=404)
    raise FormValidationError({"name": "String should have at least 2 characters"})
"""

from __future__ import annotations


class CollabError(Exception):
    """Base class for every error the board surfaces to a user."""

    status_code = 500
    title = "Error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(CollabError):
    """Required Appwrite settings are missing; rendered as the setup screen."""

    status_code = 503
    title = "Configuration required"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Appwrite configuration is missing. Please check your environment variables."
        )

    def instructions(self) -> list[str]:
        return [
            "Create a `.env` file next to the backend (or export the variables).",
            *[f"Set {name} to the matching id from your Appwrite console." for name in self.missing],
            "Restart the server once all values are present.",
        ]

    def to_api(self) -> dict:
        return {
            "state": "config_error",
            "message": self.message,
            "missing": self.missing,
            "instructions": self.instructions(),
        }


class ServiceUnavailable(CollabError):
    """The remote client was used before the application context started it."""

    status_code = 503
    title = "Service unavailable"

    def __init__(self, message: str = "Appwrite client not initialized") -> None:
        super().__init__(message)


class RemoteError(CollabError):
    """Any transport or backend failure returned by Appwrite.

    There is no finer taxonomy: a missing document is a RemoteError with
    `status == 404`.
    """

    status_code = 502
    title = "Remote service error"

    def __init__(self, message: str, status: int | None = None, type: str | None = None) -> None:
        self.status = status
        self.type = type
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        return self.status == 404


class FormValidationError(CollabError):
    """Client-side validation failed; maps field name to message."""

    status_code = 422
    title = "Invalid input"

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        super().__init__("Please correct the highlighted fields.")


class FileTooLarge(FormValidationError):
    def __init__(self, field: str, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            {field: f"File is too large ({size} bytes). The maximum size is {limit // (1024 * 1024)} MB."}
        )


class ConfirmationRequired(CollabError):
    """A destructive action was requested without the explicit confirm step."""

    status_code = 409
    title = "Confirmation required"


class ActionInFlight(CollabError):
    """The same submit/delete is already running."""

    status_code = 409
    title = "Please wait"


class NotAuthenticated(CollabError):
    status_code = 401
    title = "Sign in required"

    def __init__(self, message: str = "Please sign in to continue.") -> None:
        super().__init__(message)
