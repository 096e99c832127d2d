"""Custom exceptions and error kinds for the application"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LexiGemException(Exception):
    """Base exception for all custom exceptions"""
    pass


class ConfigurationError(LexiGemException):
    """Raised at startup when required configuration is missing"""
    pass


class PersistenceError(LexiGemException):
    """Raised when a storage or database operation fails"""
    pass


class RecordNotFoundError(PersistenceError):
    """Raised when a requested record does not exist for the user"""
    pass


class AuthenticationError(LexiGemException):
    """Raised when authentication fails"""
    pass


class AnalysisErrorKind(str, Enum):
    """Failure categories produced by the analysis pipeline"""
    LOCAL_VALIDATION = "local_validation"
    TRANSPORT_OR_MODEL = "transport_or_model"
    PARSE = "parse"
    IN_PROGRESS = "in_progress"


@dataclass(frozen=True)
class AnalysisError:
    """
    Normalized analysis failure.

    `message` is safe to show to the user; `detail` is diagnostic only
    and must never leave the service.
    """
    kind: AnalysisErrorKind
    message: str
    detail: Optional[str] = None


class AnalysisFailure(LexiGemException):
    """Raised by a pipeline step; converted to an AnalysisError by the orchestrator"""

    def __init__(self, kind: AnalysisErrorKind, detail: str):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
