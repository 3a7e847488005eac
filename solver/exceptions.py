"""
Custom Exception Hierarchy for the Solver Module

Exception Hierarchy:
    SolverError (base)
    ├── PromptError
    │   └── PromptTemplateError
    ├── LLMOutputError
    ├── StackError
    └── SolverClientError
"""

from typing import Optional


class SolverError(Exception):
    """Base exception for all solver errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Prompt Errors

class PromptError(SolverError):
    """Base exception for prompt-related errors."""
    pass


class PromptTemplateError(PromptError):
    """Raised when prompt template rendering fails."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Prompt template '{template_name}' missing variables: {', '.join(sorted(missing_vars))}"
        super().__init__(message)
        self.template_name = template_name
        self.missing_vars = missing_vars


# Model output errors

class LLMOutputError(SolverError):
    """Raised when model output does not match the expected schema."""

    def __init__(self, operation: str, expected_schema: Optional[str] = None):
        message = f"[{operation}] Invalid or malformed output"
        if expected_schema:
            message += f" (expected schema: {expected_schema})"
        super().__init__(message)
        self.operation = operation
        self.expected_schema = expected_schema


# Client-side errors

class StackError(SolverError):
    """Raised when a problem stack operation would break its shape."""
    pass


class SolverClientError(SolverError):
    """Raised when the API answers a client call with an error status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
