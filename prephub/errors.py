"""Error taxonomy shared by repositories, services and routers.

Every failure raised by the course/enrollment/progress layers is a
``ServiceError`` subclass. The global handler in ``prephub.main`` renders
``status_code`` and ``kind`` into the JSON error envelope.
"""
from __future__ import annotations
from typing import Optional


class ServiceError(Exception):
    """Base class for errors with a stable HTTP mapping."""

    status_code = 500
    kind = "server_error"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(ServiceError):
    status_code = 401
    kind = "authentication_required"
    default_message = "Authentication required"


class AccessDeniedError(ServiceError):
    status_code = 403
    kind = "access_denied"
    default_message = "Access denied"


class EnrollmentRequiredError(AccessDeniedError):
    default_message = "Must be enrolled in course to track progress"


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class CourseNotFoundError(NotFoundError):
    default_message = "Course not found"


class ChapterNotFoundError(NotFoundError):
    default_message = "Chapter not found"


class NotEnrolledError(NotFoundError):
    default_message = "Not enrolled in this course"


class AlreadyExistsError(ServiceError):
    status_code = 400
    kind = "already_exists"
    default_message = "Already exists"


class AlreadyEnrolledError(AlreadyExistsError):
    default_message = "Already enrolled in this course"


class ValidationError(ServiceError):
    status_code = 422
    kind = "validation_error"
    default_message = "Invalid request"


class PersistenceError(ServiceError):
    kind = "persistence_error"
    default_message = "Storage operation failed"


class TextGenerationError(ServiceError):
    """Raised when the text-generation backend fails.

    ``details`` is passed through to the client verbatim.
    """

    kind = "generation_failed"
    default_message = "Text generation failed"

    def __init__(self, message: Optional[str] = None, details: str = ""):
        super().__init__(message)
        self.details = details
