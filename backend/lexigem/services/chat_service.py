"""
Legal Q&A chat service for LexiGem.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
from functools import lru_cache

from lexigem.schemas import ChatMessage
from lexigem.services.chat_store import ChatStore
from lexigem.services.gemini_client import GeminiClient, get_gemini_client

logger = logging.getLogger(__name__)


class LegalChatService:
    """
    Answers questions within a stored chat session.

    The question and the answer are appended together only after the model
    replies, so a failed call leaves the transcript unchanged.
    """

    def __init__(self, model_client: GeminiClient):
        self.model_client = model_client

    async def ask(self, store: ChatStore, session_id: str, user_id: int, question: str) -> ChatMessage:
        """
        Ask a question in a session and return the model's reply.

        Raises:
            RecordNotFoundError: If the session does not exist for the user
            AnalysisFailure: If the model call fails
            PersistenceError: If the exchange cannot be stored
        """
        store.get_chat_session(session_id, user_id)
        history = store.get_transcript(session_id, user_id)

        answer = await self.model_client.generate_chat_reply(history, question)

        user_message = ChatMessage.from_text("user", question)
        reply = ChatMessage.from_text("model", answer)
        store.save_messages(session_id, user_id, [user_message, reply])

        logger.info(f"Chat session {session_id} answered ({len(history) + 2} messages)")
        return reply


@lru_cache()
def get_chat_service() -> LegalChatService:
    """Process-wide chat service, used as a FastAPI dependency."""
    return LegalChatService(get_gemini_client())
