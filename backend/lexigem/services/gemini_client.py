"""
Gemini model client for LexiGem.

This module builds the multimodal requests sent to the Gemini API: the
fixed analysis instructions, the uploaded file as an inline data part and
the declared JSON response schema. It also issues the Legal Q&A chat calls.

Every failure of the outbound call is logged here and re-raised as an
AnalysisFailure so callers only ever see one normalized error kind.

Author: LexiGem Team
Version: 1.0.0
"""

import asyncio
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Sequence

from google import genai
from google.genai import types

from lexigem.config import settings
from lexigem.exceptions import AnalysisErrorKind, AnalysisFailure
from lexigem.schemas import AnalysisResult, ChatMessage, DocumentUpload
from lexigem.services.response_parser import parse_analysis_response

logger = logging.getLogger(__name__)


ANALYSIS_PROMPT = """You are LexiGem, an expert AI legal analyst. Your task is to analyze the attached legal document (e.g., contract, agreement, NDA, policy). Provide a structured analysis in simple, easy-to-understand language for a non-lawyer.

Based on the document, provide a detailed analysis covering:
1.  **Summary:** A brief overview of the document's purpose and key terms.
2.  **Pros:** What are the benefits for the user in this agreement?
3.  **Cons:** What are the risks, obligations, or downsides for the user?
4.  **Potential Loopholes:** Identify any vague, ambiguous, or potentially exploitable clauses.
5.  **Potential Challenges:** What disputes or legal issues could realistically arise from this document?

Please provide the output in the specified JSON format."""


LEGAL_QA_INSTRUCTION = """You are LexiGem, a knowledgeable AI legal assistant. Answer general legal questions in clear, simple language for a non-lawyer.
- Explain the relevant legal concepts and how they usually apply.
- Point out when the answer depends on jurisdiction or specific facts.
- Suggest consulting a qualified lawyer for decisions with legal consequences.
- Never present your answer as legal advice."""


RESPONSE_FIELDS = ("summary", "pros", "cons", "potentialLoopholes", "potentialChallenges")


def _string_list(description: str) -> types.Schema:
    return types.Schema(
        type=types.Type.ARRAY,
        description=description,
        items=types.Schema(type=types.Type.STRING),
    )


ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "summary": types.Schema(
            type=types.Type.STRING,
            description="A concise summary of the legal document in simple, clear language for a non-lawyer.",
        ),
        "pros": _string_list(
            "A list of clauses or aspects of the document that are beneficial or advantageous to the user."
        ),
        "cons": _string_list(
            "A list of clauses or aspects that could be disadvantageous, risky, or impose significant obligations on the user."
        ),
        "potentialLoopholes": _string_list(
            "A list of ambiguous, vague, or potentially exploitable clauses that could lead to disputes."
        ),
        "potentialChallenges": _string_list(
            "A list of potential legal challenges or disputes that could arise from the document's terms."
        ),
    },
    required=list(RESPONSE_FIELDS),
    property_ordering=list(RESPONSE_FIELDS),
)


@dataclass(frozen=True)
class AnalysisRequest:
    """
    One document analysis call: the uploaded file plus the fixed prompt.

    Built per call and never persisted.
    """

    upload: DocumentUpload
    prompt: str = field(default=ANALYSIS_PROMPT)

    def inline_data_part(self) -> types.Part:
        """File bytes paired with their MIME type; the SDK base64-encodes the data on the wire."""
        return types.Part.from_bytes(data=self.upload.content, mime_type=self.upload.mime_type)

    def contents(self) -> List[types.Content]:
        return [
            types.Content(
                role="user",
                parts=[types.Part(text=self.prompt), self.inline_data_part()],
            )
        ]

    def config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
        )


class GeminiClient:
    """
    Thin wrapper around the google-genai client.

    The underlying SDK client is created lazily so the module can be imported
    (and the service constructed) before credentials are validated at startup.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        chat_model: Optional[str] = None,
        client: Optional[genai.Client] = None
    ):
        """
        Args:
            api_key: Gemini API key, defaults to settings.gemini_api_key
            model: Model used for document analysis
            chat_model: Model used for Legal Q&A
            client: Preconfigured SDK client, mainly for tests
        """
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.chat_model = chat_model or settings.gemini_chat_model
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, model: str, contents, config: types.GenerateContentConfig) -> str:
        """Issue one generate_content call and return its text, normalizing every failure."""
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"Error calling Gemini model {model}: {e}", exc_info=True)
            raise AnalysisFailure(AnalysisErrorKind.TRANSPORT_OR_MODEL, str(e)) from e

        text = getattr(response, "text", None)
        if not text:
            logger.error(f"Gemini model {model} returned no text (blocked or empty response)")
            raise AnalysisFailure(AnalysisErrorKind.TRANSPORT_OR_MODEL, "Model returned an empty response")

        return text

    async def generate_analysis(self, upload: DocumentUpload) -> str:
        """
        Send the analysis request for one file and return the raw model text.

        Raises:
            AnalysisFailure: TRANSPORT_OR_MODEL on any failure of the call
        """
        request = AnalysisRequest(upload=upload)
        logger.info(
            f"Requesting analysis of {upload.file_name} ({upload.mime_type}, {upload.size} bytes) "
            f"from {self.model}"
        )
        return await self._generate(self.model, request.contents(), request.config())

    async def analyze_document(self, upload: DocumentUpload) -> AnalysisResult:
        """
        Analyze one document: a single model call followed by strict parsing.

        Raises:
            AnalysisFailure: TRANSPORT_OR_MODEL or PARSE
        """
        raw_text = await self.generate_analysis(upload)
        return parse_analysis_response(raw_text)

    async def generate_chat_reply(self, history: Sequence[ChatMessage], question: str) -> str:
        """
        Answer a Legal Q&A question given the prior transcript.

        Raises:
            AnalysisFailure: TRANSPORT_OR_MODEL on any failure of the call
        """
        contents = [
            types.Content(role=message.role, parts=[types.Part(text=part.text) for part in message.parts])
            for message in history
        ]
        contents.append(types.Content(role="user", parts=[types.Part(text=question)]))

        config = types.GenerateContentConfig(system_instruction=LEGAL_QA_INSTRUCTION)
        reply = await self._generate(self.chat_model, contents, config)
        return reply.strip()


@lru_cache()
def get_gemini_client() -> GeminiClient:
    """Process-wide Gemini client, used as a FastAPI dependency."""
    return GeminiClient()
