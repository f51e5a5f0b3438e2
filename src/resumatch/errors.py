"""Error taxonomy shared by the services, the API layer and the CLI.

Every error carries the HTTP status the API answers with. Handlers in
``resumatch.api.app`` turn these into ``{"error": message}`` responses.
"""

from __future__ import annotations


class ResumatchError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(ResumatchError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ResumatchError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ResumatchError):
    status_code = 404
    default_message = "Not found"


class ValidationError(ResumatchError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateApplicationError(ValidationError):
    status_code = 409
    default_message = "You have already applied for this job"


class UpstreamError(ResumatchError):
    """The AI service failed or answered with something unusable."""

    status_code = 502
    default_message = "AI service request failed"

    def __init__(self, message: str | None = None, *, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ParseError(UpstreamError):
    default_message = "AI service returned an unparseable response"


class InternalError(ResumatchError):
    status_code = 500
    default_message = "Internal server error"
