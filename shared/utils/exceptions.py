"""Custom exception hierarchy for better error handling."""
from fastapi import HTTPException, status


class SolveWithMeException(Exception):
    """Base exception for all application errors."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )


class InvalidRequestException(SolveWithMeException):
    """Raised when a required input is missing or malformed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=self.message
        )


class ProblemNotFoundException(SolveWithMeException):
    """Raised when a problem node is not found."""

    def __init__(self, problem_id: str):
        self.problem_id = problem_id
        super().__init__(f"Problem {problem_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Problem not found"
        )


class LLMProviderException(SolveWithMeException):
    """Raised when the model call fails, returns nothing, or returns unusable JSON."""

    def __init__(self, operation: str, error: str):
        self.operation = operation
        self.error = error
        super().__init__(f"LLM {operation} failed: {error}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {self.operation.replace('_', ' ')}"
        )


class DatabaseException(SolveWithMeException):
    """Raised when database operations fail."""

    def __init__(self, operation: str, original_error: Exception):
        self.operation = operation
        self.original_error = original_error
        super().__init__(f"Database {operation} failed: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database operation failed"
        )


class ConfigurationException(SolveWithMeException):
    """Raised when a required setting (API key, database URL) is missing."""

    def __init__(self, config_key: str, reason: str):
        self.config_key = config_key
        self.reason = reason
        super().__init__(f"Configuration error for '{config_key}': {reason}")


class StateTransitionException(SolveWithMeException):
    """Raised when a problem status change is not in the allowed transition table."""

    def __init__(self, problem_id: str, from_status: str, to_status: str):
        self.problem_id = problem_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition for problem {problem_id}: '{from_status}' -> '{to_status}'"
        )

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change status from {self.from_status} to {self.to_status}"
        )
