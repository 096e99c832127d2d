"""
Chat session and transcript storage for LexiGem.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lexigem.exceptions import PersistenceError, RecordNotFoundError
from lexigem.models.chat import ChatHistory, ChatSession
from lexigem.schemas import ChatMessage

logger = logging.getLogger(__name__)


class ChatStore:
    """Persistence for Legal Q&A sessions. Messages are append-only."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to {action}: conflicting record") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    def create_chat_session(self, user_id: int, session_id: Optional[str] = None, title: Optional[str] = None) -> ChatSession:
        session = ChatSession(
            user_id=user_id,
            session_id=session_id or uuid.uuid4().hex,
            title=title or None,
            message_count=0,
        )
        self.db.add(session)
        self._commit("create chat session")
        self.db.refresh(session)
        return session

    def get_chat_session(self, session_id: str, user_id: int) -> ChatSession:
        session = (
            self.db.query(ChatSession)
            .filter(ChatSession.session_id == session_id, ChatSession.user_id == user_id)
            .first()
        )
        if session is None:
            raise RecordNotFoundError(f"Chat session {session_id} not found")
        return session

    def get_user_chat_sessions(self, user_id: int) -> List[ChatSession]:
        """User's sessions, most recently active first."""
        return (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == user_id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
            .all()
        )

    def update_chat_session_title(self, session_id: str, user_id: int, title: str) -> ChatSession:
        session = self.get_chat_session(session_id, user_id)
        session.title = title
        self._commit("update chat session title")
        self.db.refresh(session)
        return session

    def delete_chat_session(self, session_id: str, user_id: int) -> None:
        """Delete a session's messages, then the session itself."""
        session = self.get_chat_session(session_id, user_id)

        self.db.query(ChatHistory).filter(
            ChatHistory.session_id == session_id,
            ChatHistory.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.delete(session)
        self._commit("delete chat session")

    def save_messages(self, session_id: str, user_id: int, messages: List[ChatMessage]) -> List[ChatHistory]:
        """
        Append messages to a transcript in the given order.

        All rows are written in one transaction and the session's message
        counter and ``updated_at`` advance with them.

        Raises:
            RecordNotFoundError: If the session does not exist for the user
            PersistenceError: If the write fails
        """
        session = self.get_chat_session(session_id, user_id)

        rows = []
        for message in messages:
            row = ChatHistory(
                user_id=user_id,
                session_id=session_id,
                role=message.role,
                message=message.text,
                created_at=datetime.utcnow(),
            )
            self.db.add(row)
            rows.append(row)

        session.message_count = (session.message_count or 0) + len(rows)
        session.updated_at = datetime.utcnow()
        self._commit("save chat messages")
        return rows

    def save_message(self, session_id: str, user_id: int, role: str, message: str) -> ChatHistory:
        return self.save_messages(session_id, user_id, [ChatMessage.from_text(role, message)])[0]

    def get_chat_history(self, session_id: str, user_id: int) -> List[ChatHistory]:
        """Transcript rows in creation order."""
        return (
            self.db.query(ChatHistory)
            .filter(ChatHistory.session_id == session_id, ChatHistory.user_id == user_id)
            .order_by(ChatHistory.created_at.asc(), ChatHistory.id.asc())
            .all()
        )

    def get_transcript(self, session_id: str, user_id: int) -> List[ChatMessage]:
        return [
            ChatMessage.from_text(row.role, row.message)
            for row in self.get_chat_history(session_id, user_id)
        ]
