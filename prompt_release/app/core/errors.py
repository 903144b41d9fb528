"""
Error taxonomy shared by the engine services and the API layer.
"""
from fastapi import status


class PromptError(Exception):
    """Base exception for prompt engine errors"""
    code = "INTERNAL"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR, **kwargs):
        self.message = message
        self.status_code = status_code
        self.details = kwargs or {}
        super().__init__(message)


class NotFoundError(PromptError):
    """Raised when a prompt, version, environment or base version is absent or soft-deleted"""
    code = "NOT_FOUND"

    def __init__(self, message: str = "Prompt not found", **kwargs):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, **kwargs)


class BadRequestError(PromptError):
    """Raised for missing content, malformed bundles and invalid field values"""
    code = "BAD_REQUEST"

    def __init__(self, message: str = "Invalid request", **kwargs):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, **kwargs)


class ConflictError(PromptError):
    """Raised when a version number could not be claimed after repeated attempts"""
    code = "CONFLICT"

    def __init__(self, message: str = "Conflicting write", **kwargs):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, **kwargs)
