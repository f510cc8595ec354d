"""
Domain error taxonomy

Every error carries an HTTP-style status code and a machine readable code;
the FastAPI exception handler in main.py renders them unchanged.
"""


class QuizHubError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(QuizHubError):
    status_code = 404
    error = "not_found"


class ForbiddenError(QuizHubError):
    status_code = 403
    error = "forbidden"


class UnauthenticatedError(QuizHubError):
    status_code = 401
    error = "unauthenticated"


class ValidationError(QuizHubError):
    status_code = 400
    error = "validation_error"


class InvalidIdFormatError(ValidationError):
    error = "invalid_id_format"


class InvalidQuizError(ValidationError):
    error = "invalid_quiz"


class InvalidQuestionError(ValidationError):
    error = "invalid_question"


class ConflictError(QuizHubError):
    status_code = 409
    error = "conflict"


class AlreadyCompletedError(QuizHubError):
    status_code = 409
    error = "already_completed"


class AttemptsExceededError(QuizHubError):
    status_code = 403
    error = "attempts_exceeded"


class InsufficientQuestionsError(QuizHubError):
    status_code = 400
    error = "insufficient_questions"


class StorageUnavailableError(QuizHubError):
    """Collaborator failure; the original cause is chained, never shown to callers."""
    status_code = 503
    error = "storage_unavailable"
