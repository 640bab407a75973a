"""
Worker Errors
Exceptions raised inside generation jobs. The runner turns every one of them
into the job's `error` state; none of them escape to the event loop.
"""

from typing import Optional


class WorkerException(Exception):
    """Base exception for generation job errors."""
    
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class ModelInvocationError(WorkerException):
    """The external model call failed (provider, network or timeout)."""


class ResultParseError(WorkerException):
    """The model answered with content that is not a JSON object."""


class PromptBuildError(WorkerException):
    """The request inputs could not be turned into a prompt."""


__all__ = [
    "WorkerException",
    "ModelInvocationError",
    "ResultParseError",
    "PromptBuildError",
]
