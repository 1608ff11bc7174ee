"""
Portal error taxonomy.

Services raise these; the handlers registered in main.py turn them into
{"detail": message} responses with the matching status code.
"""

from typing import Optional


class PortalError(Exception):
    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class UnauthorizedError(PortalError):
    """No/invalid session, or the caller does not own the target record."""
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(PortalError):
    """Caller's role is not allowed to perform the operation."""
    status_code = 403
    message = "Forbidden"


class PayloadValidationError(PortalError):
    status_code = 400
    message = "Invalid request payload"


class NotFoundError(PortalError):
    status_code = 404
    message = "Not found"


class CategoryMismatchError(PortalError):
    status_code = 400
    message = "Category mismatch"


class TaskExpiredError(PortalError):
    status_code = 400
    message = "Task deadline has passed"


class DuplicateEmailError(PortalError):
    status_code = 400
    message = "User with this email already exists"


class DuplicateSubmissionError(PortalError):
    """
    A graded submission already exists for (student, task).

    Routes answer this with a redirect to the stored result rather than an error body.
    """
    status_code = 303
    message = "Task already submitted"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__()


class ExternalEvaluationError(PortalError):
    """Judge call or judge output failed. Absorbed by the coding evaluator."""
    status_code = 502
    message = "Automated evaluation failed"


class InternalError(PortalError):
    status_code = 500
    message = "An internal error occurred"
