"""Travel diary errors and the HTTP status each one maps to.

Route handlers and services raise these; ``ErrorHandlerMiddleware``
turns them into ``{"success": false, "message": ...}`` JSON bodies.
"""

from typing import Any, ClassVar, Dict, Optional


class AppException(Exception):
    """Base class for errors that should reach the client as JSON.

    Subclasses pick a status code and a default message; callers usually
    pass a more specific message plus ``details`` for the response body.

    Attributes:
        message: Text shown to the client.
        status_code: HTTP status of the error response.
        details: Extra context echoed in the response body.
    """

    default_status: ClassVar[int] = 500
    default_message: ClassVar[str] = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class NotFoundException(AppException):
    """No travel entry (or file) with the requested id."""

    default_status = 404
    default_message = "Not found"


class BadRequestException(AppException):
    """Missing coordinates, too many files and similar client mistakes."""

    default_status = 400
    default_message = "Invalid request"


class StorageException(AppException):
    """The travel file or the upload directory could not be written."""

    default_status = 500
    default_message = "Could not save data"


class AIServiceException(AppException):
    """Gemini is unavailable, failed, or replied with something unusable.

    Title and place-name generation catch this and fall back to template
    text, so it rarely reaches a client.
    """

    default_status = 502
    default_message = "Gemini request failed"
