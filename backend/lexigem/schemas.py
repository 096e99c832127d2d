"""
Domain types shared by the analysis pipeline, the chat service and the API.

Author: LexiGem Team
Version: 1.0.0
"""

import re
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic.alias_generators import to_camel

_EXTENSION = re.compile(r"[a-z0-9]{1,10}")


class AnalysisResult(BaseModel):
    """
    Structured analysis of a legal document.

    All five fields are required. Keys are camelCase on the wire
    (``potentialLoopholes``) and snake_case in Python; input must use the
    camelCase names. Instances are frozen and the list fields are
    stored as tuples.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
    )

    summary: StrictStr
    pros: Tuple[StrictStr, ...]
    cons: Tuple[StrictStr, ...]
    potential_loopholes: Tuple[StrictStr, ...]
    potential_challenges: Tuple[StrictStr, ...]


class ChatPart(BaseModel):
    text: str


class ChatMessage(BaseModel):
    """A single chat turn in the shape the Gemini API uses for history."""

    role: Literal["user", "model"]
    parts: List[ChatPart]

    @classmethod
    def from_text(cls, role: str, text: str) -> "ChatMessage":
        return cls(role=role, parts=[ChatPart(text=text)])

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)


@dataclass(frozen=True)
class DocumentUpload:
    """Binary content of a user-selected file plus its MIME type."""

    file_name: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> Optional[str]:
        """Lowercase file name extension, or None unless it is 1-10 letters or digits."""
        if "." not in self.file_name:
            return None
        ext = self.file_name.rsplit(".", 1)[-1].lower()
        return ext if _EXTENSION.fullmatch(ext) else None
