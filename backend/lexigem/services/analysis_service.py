"""
Analysis service for LexiGem.

This module exposes document analysis to the API as a single operation:
given an uploaded file, return either a structured AnalysisResult or one
descriptive error. Failures below this boundary (transport, model, parsing)
are caught here and normalized; nothing else escapes to the caller.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Hashable, Optional

from lexigem.config import Constants
from lexigem.exceptions import AnalysisError, AnalysisErrorKind, AnalysisFailure
from lexigem.schemas import AnalysisResult, DocumentUpload
from lexigem.services.gemini_client import GeminiClient, get_gemini_client

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    """Lifecycle of one user-initiated analysis."""
    IDLE = "idle"
    ANALYZING = "analyzing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisOutcome:
    """Exactly one of `result` or `error` is set."""

    result: Optional[AnalysisResult] = None
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, result: AnalysisResult) -> "AnalysisOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, kind: AnalysisErrorKind, message: str, detail: Optional[str] = None) -> "AnalysisOutcome":
        return cls(error=AnalysisError(kind=kind, message=message, detail=detail))


_USER_MESSAGES = {
    AnalysisErrorKind.TRANSPORT_OR_MODEL: Constants.ANALYSIS_FAILED_MESSAGE,
    AnalysisErrorKind.PARSE: Constants.ANALYSIS_FAILED_MESSAGE,
    AnalysisErrorKind.LOCAL_VALIDATION: Constants.NO_FILE_MESSAGE,
    AnalysisErrorKind.IN_PROGRESS: Constants.ANALYSIS_IN_PROGRESS_MESSAGE,
}


class AnalysisService:
    """
    Service class coordinating document analysis.

    Tracks one analysis cycle per owner (Idle -> Analyzing -> Succeeded or
    Failed). A new cycle for the same owner is refused while one is still
    Analyzing; different owners never block each other.
    """

    def __init__(self, model_client: GeminiClient):
        """
        Args:
            model_client (GeminiClient): Client used for the model call
        """
        self.model_client = model_client
        self._states: Dict[Hashable, AnalysisState] = {}

    def state(self, owner: Hashable = None) -> AnalysisState:
        return self._states.get(owner, AnalysisState.IDLE)

    async def analyze(self, upload: Optional[DocumentUpload], owner: Hashable = None) -> AnalysisOutcome:
        """
        Analyze an uploaded document.

        Args:
            upload (DocumentUpload, optional): Selected file, or None if none was selected
            owner (Hashable, optional): Key of the user running the analysis

        Returns:
            AnalysisOutcome: The result, or a single normalized error
        """
        if upload is None:
            return AnalysisOutcome.failure(AnalysisErrorKind.LOCAL_VALIDATION, Constants.NO_FILE_MESSAGE)

        if not upload.mime_type:
            return AnalysisOutcome.failure(
                AnalysisErrorKind.LOCAL_VALIDATION,
                "Could not determine the document type. Please upload a PDF, DOCX, PNG or JPG file."
            )

        if self.state(owner) == AnalysisState.ANALYZING:
            logger.info(f"Rejected concurrent analysis for owner {owner!r}")
            return AnalysisOutcome.failure(
                AnalysisErrorKind.IN_PROGRESS, Constants.ANALYSIS_IN_PROGRESS_MESSAGE
            )

        self._states[owner] = AnalysisState.ANALYZING
        try:
            result = await self.model_client.analyze_document(upload)
            self._states[owner] = AnalysisState.SUCCEEDED
        except AnalysisFailure as e:
            self._states[owner] = AnalysisState.FAILED
            logger.error(f"Analysis of {upload.file_name} failed ({e.kind.value}): {e.detail}")
            return AnalysisOutcome.failure(e.kind, _USER_MESSAGES[e.kind], e.detail)
        except Exception as e:
            self._states[owner] = AnalysisState.FAILED
            logger.error(f"Unexpected error analyzing {upload.file_name}: {e}", exc_info=True)
            return AnalysisOutcome.failure(
                AnalysisErrorKind.TRANSPORT_OR_MODEL, Constants.ANALYSIS_FAILED_MESSAGE, str(e)
            )
        finally:
            # A cancelled call never reaches a terminal state
            if self._states.get(owner) == AnalysisState.ANALYZING:
                self._states[owner] = AnalysisState.IDLE

        logger.info(f"Analysis of {upload.file_name} completed")
        return AnalysisOutcome.success(result)


@lru_cache()
def get_analysis_service() -> AnalysisService:
    """Process-wide analysis service, used as a FastAPI dependency."""
    return AnalysisService(get_gemini_client())
