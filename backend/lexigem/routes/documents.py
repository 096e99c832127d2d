"""
Document analysis routes for LexiGem.

This module handles document analysis requests and the management of
saved analyses (listing and deletion).

Author: LexiGem Team
Version: 1.0.0
"""

import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lexigem.config import Constants
from lexigem.database import get_db
from lexigem.exceptions import AnalysisErrorKind, PersistenceError, RecordNotFoundError
from lexigem.models.user import User
from lexigem.routes.auth import get_current_active_user
from lexigem.schemas import AnalysisResult, DocumentUpload
from lexigem.services.analysis_service import AnalysisService, get_analysis_service
from lexigem.services.document_store import DocumentStore
from lexigem.services.file_handler import FileHandler

logger = logging.getLogger(__name__)

# Initialize router
router = APIRouter()


ERROR_STATUS_CODES = {
    AnalysisErrorKind.LOCAL_VALIDATION: status.HTTP_400_BAD_REQUEST,
    AnalysisErrorKind.IN_PROGRESS: status.HTTP_409_CONFLICT,
    AnalysisErrorKind.TRANSPORT_OR_MODEL: status.HTTP_502_BAD_GATEWAY,
    AnalysisErrorKind.PARSE: status.HTTP_502_BAD_GATEWAY,
}


# Pydantic models
class AnalysisResponse(BaseModel):
    """Analysis response model."""
    analysis: AnalysisResult
    disclaimer: str
    saved: bool = False
    document_id: Optional[int] = None
    file_url: Optional[str] = None
    warnings: List[str] = []


class DocumentResponse(BaseModel):
    """Saved document response model."""
    id: int
    file_name: str
    file_type: str
    file_size: int
    file_url: Optional[str]
    summary: str
    pros: List[str]
    cons: List[str]
    potential_loopholes: List[str]
    potential_challenges: List[str]
    created_at: Optional[str]


@lru_cache()
def get_file_handler() -> FileHandler:
    """Process-wide file handler, used as a FastAPI dependency."""
    return FileHandler()


async def read_upload(file: Optional[UploadFile], file_handler: FileHandler) -> Optional[DocumentUpload]:
    """
    Read a multipart upload into memory.

    Returns None when no file was selected. The MIME type falls back to a
    guess from the file name when the client does not send one.

    Raises:
        HTTPException: If the file exceeds the size limit
    """
    if file is None or not file.filename:
        return None

    content = await file.read()
    if not file_handler.validate_file_size(len(content)):
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds maximum limit of {file_handler.max_file_size} bytes"
        )

    mime_type = file.content_type
    if not mime_type or mime_type == "application/octet-stream":
        mime_type = file_handler.guess_mime_type(file.filename) or mime_type

    if mime_type and not file_handler.is_accepted_type(mime_type):
        logger.info(f"Forwarding {file.filename} with unlisted MIME type {mime_type}")

    return DocumentUpload(file_name=file.filename, content=content, mime_type=mime_type or "")


# Document endpoints
@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_document(
    file: Optional[UploadFile] = File(None),
    save: bool = Query(False, description="Store the file and the analysis after a successful run"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    analysis_service: AnalysisService = Depends(get_analysis_service),
    file_handler: FileHandler = Depends(get_file_handler)
):
    """
    Analyze an uploaded legal document.

    Args:
        file (UploadFile, optional): Document to analyze
        save (bool): Whether to persist the file and the analysis
        current_user (User): Current authenticated user
        db (Session): Database session

    Returns:
        AnalysisResponse: Analysis result, disclaimer and save status

    Raises:
        HTTPException: 400 when no file was selected, 409 while another
            analysis for the user is running, 502 when the analysis failed
    """
    upload = await read_upload(file, file_handler)
    outcome = await analysis_service.analyze(upload, owner=current_user.id)

    if not outcome.ok:
        raise HTTPException(
            status_code=ERROR_STATUS_CODES[outcome.error.kind],
            detail=outcome.error.message
        )

    response = AnalysisResponse(analysis=outcome.result, disclaimer=Constants.DISCLAIMER)

    if save:
        store = DocumentStore(db, file_handler)
        try:
            document = store.save_analysis(current_user.id, upload, outcome.result)
            response.saved = True
            response.document_id = document.id
            response.file_url = document.file_url
        except PersistenceError as e:
            logger.error(f"Analysis succeeded but could not be saved for user {current_user.id}: {e}")
            response.warnings.append("The analysis could not be saved. You can still view the result.")

    return response


@router.get("/", response_model=List[DocumentResponse])
async def get_documents(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    file_handler: FileHandler = Depends(get_file_handler)
):
    """
    Get list of user's saved analyses, newest first.

    Returns:
        List[DocumentResponse]: List of documents
    """
    store = DocumentStore(db, file_handler)
    documents = store.get_user_documents(current_user.id, skip=skip, limit=limit)

    return [DocumentResponse(**doc.to_dict()) for doc in documents]


@router.delete("/{document_id}")
async def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    file_handler: FileHandler = Depends(get_file_handler)
):
    """
    Delete a saved analysis and its stored file.

    Returns:
        dict: Success message

    Raises:
        HTTPException: If document not found or deletion fails
    """
    store = DocumentStore(db, file_handler)
    try:
        store.delete_document(document_id, current_user.id)
    except RecordNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return {"message": "Document deleted successfully", "success": True}
