"""
Legal Q&A chat routes for LexiGem.

This module handles chat session management and question answering
within a session.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from lexigem.config import Constants
from lexigem.database import get_db
from lexigem.exceptions import AnalysisFailure, PersistenceError, RecordNotFoundError
from lexigem.models.user import User
from lexigem.routes.auth import get_current_active_user
from lexigem.schemas import ChatMessage
from lexigem.services.chat_service import LegalChatService, get_chat_service
from lexigem.services.chat_store import ChatStore

logger = logging.getLogger(__name__)

# Initialize router
router = APIRouter()


# Pydantic models
class ChatSessionCreate(BaseModel):
    """Chat session creation model."""
    session_id: Optional[str] = Field(None, max_length=64)
    title: Optional[str] = Field(None, max_length=255)


class ChatSessionUpdate(BaseModel):
    """Chat session title update model."""
    title: str = Field(..., min_length=1, max_length=255)


class ChatSessionResponse(BaseModel):
    """Chat session response model."""
    session_id: str
    title: Optional[str]
    message_count: int
    created_at: Optional[str]
    updated_at: Optional[str]


class QuestionRequest(BaseModel):
    """Question asked in a chat session."""
    question: str = Field(..., min_length=1)


def session_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Chat session not found"
    )


@router.post("/sessions", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_chat_session(
    session_data: ChatSessionCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Create a new chat session for the current user."""
    try:
        session = ChatStore(db).create_chat_session(
            current_user.id,
            session_id=session_data.session_id,
            title=session_data.title
        )
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ChatSessionResponse(**session.to_dict())


@router.get("/sessions", response_model=List[ChatSessionResponse])
async def get_chat_sessions(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """List the current user's chat sessions, most recently active first."""
    sessions = ChatStore(db).get_user_chat_sessions(current_user.id)
    return [ChatSessionResponse(**session.to_dict()) for session in sessions]


@router.patch("/sessions/{session_id}", response_model=ChatSessionResponse)
async def update_chat_session(
    session_id: str,
    session_data: ChatSessionUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Rename a chat session."""
    try:
        session = ChatStore(db).update_chat_session_title(session_id, current_user.id, session_data.title)
    except RecordNotFoundError:
        raise session_not_found()

    return ChatSessionResponse(**session.to_dict())


@router.delete("/sessions/{session_id}")
async def delete_chat_session(
    session_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a chat session together with its transcript."""
    try:
        ChatStore(db).delete_chat_session(session_id, current_user.id)
    except RecordNotFoundError:
        raise session_not_found()
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return {"message": "Chat session deleted successfully", "success": True}


@router.get("/sessions/{session_id}/messages", response_model=List[ChatMessage])
async def get_chat_history(
    session_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get a session's transcript in creation order."""
    store = ChatStore(db)
    try:
        store.get_chat_session(session_id, current_user.id)
    except RecordNotFoundError:
        raise session_not_found()

    return store.get_transcript(session_id, current_user.id)


@router.post("/sessions/{session_id}/messages", response_model=ChatMessage)
async def ask_question(
    session_id: str,
    request: QuestionRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    chat_service: LegalChatService = Depends(get_chat_service)
):
    """
    Ask a legal question in a chat session.

    Returns:
        ChatMessage: The model's reply

    Raises:
        HTTPException: 404 for an unknown session, 502 when the model call fails
    """
    try:
        return await chat_service.ask(ChatStore(db), session_id, current_user.id, request.question)
    except RecordNotFoundError:
        raise session_not_found()
    except AnalysisFailure as e:
        logger.error(f"Chat reply failed for session {session_id}: {e.detail}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=Constants.CHAT_FAILED_MESSAGE)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
