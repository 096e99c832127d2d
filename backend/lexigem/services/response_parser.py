"""
Response parsing for document analysis.

Turns the raw text returned by the model into a validated AnalysisResult.
The model is asked for schema-constrained JSON, but it still occasionally
wraps the payload in a Markdown code fence; that fence is removed by a
normalization pass before decoding and is not part of the schema contract.

Author: LexiGem Team
Version: 1.0.0
"""

import json
import logging
import re

from pydantic import ValidationError

from lexigem.exceptions import AnalysisErrorKind, AnalysisFailure
from lexigem.schemas import AnalysisResult

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def normalize_model_output(raw_text: str) -> str:
    """
    Trim whitespace and strip a wrapping ```json ... ``` fence if present.

    Unfenced text is returned trimmed and otherwise untouched.
    """
    text = (raw_text or "").strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def parse_analysis_response(raw_text: str) -> AnalysisResult:
    """
    Decode the model output into an AnalysisResult.

    Args:
        raw_text (str): Text returned by the model

    Returns:
        AnalysisResult: Fully validated result

    Raises:
        AnalysisFailure: With kind PARSE when the text is not valid JSON or
            does not match the five-field structure. No partial result is
            ever returned.
    """
    cleaned = normalize_model_output(raw_text)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Model output is not valid JSON: {e}")
        raise AnalysisFailure(AnalysisErrorKind.PARSE, f"JSON decode error: {e}") from e

    if not isinstance(payload, dict):
        raise AnalysisFailure(
            AnalysisErrorKind.PARSE,
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Model output failed schema validation: {e.error_count()} error(s)")
        raise AnalysisFailure(AnalysisErrorKind.PARSE, f"Schema validation error: {e}") from e
