"""
Document record storage for LexiGem.

Stores uploaded files together with their analysis results and serves
the per-user document list.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lexigem.exceptions import PersistenceError, RecordNotFoundError
from lexigem.models.document import Document
from lexigem.schemas import AnalysisResult, DocumentUpload
from lexigem.services.file_handler import FileHandler

logger = logging.getLogger(__name__)


class DocumentStore:
    """Persistence for uploaded documents and their analyses."""

    def __init__(self, db: Session, file_handler: Optional[FileHandler] = None):
        self.db = db
        self.file_handler = file_handler or FileHandler()

    def upload_file(self, upload: DocumentUpload, user_id: int) -> str:
        """Store the file under the user's path and return its storage path."""
        return self.file_handler.save_upload(upload, user_id)

    def save_document(
        self,
        user_id: int,
        upload: DocumentUpload,
        result: AnalysisResult,
        storage_path: Optional[str] = None
    ) -> Document:
        """
        Insert an analysis record.

        Raises:
            PersistenceError: If the insert fails
        """
        document = Document(
            user_id=user_id,
            file_name=upload.file_name,
            file_type=upload.mime_type,
            file_size=upload.size,
            file_url=self.file_handler.public_url(storage_path) if storage_path else None,
            storage_path=storage_path,
            summary=result.summary,
            pros=list(result.pros),
            cons=list(result.cons),
            potential_loopholes=list(result.potential_loopholes),
            potential_challenges=list(result.potential_challenges),
        )

        try:
            self.db.add(document)
            self.db.commit()
            self.db.refresh(document)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save document record for user {user_id}: {e}")
            raise PersistenceError("Failed to save document record") from e

        return document

    def save_analysis(self, user_id: int, upload: DocumentUpload, result: AnalysisResult) -> Document:
        """
        Upload the file, then store the record pointing at it.

        The stored file is removed again if the record insert fails.
        """
        storage_path = self.upload_file(upload, user_id)
        try:
            return self.save_document(user_id, upload, result, storage_path)
        except PersistenceError:
            self.file_handler.delete_file(storage_path)
            raise

    def get_user_documents(self, user_id: int, skip: int = 0, limit: int = 100) -> List[Document]:
        """User's documents, newest first."""
        return (
            self.db.query(Document)
            .filter(Document.user_id == user_id)
            .order_by(Document.created_at.desc(), Document.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_document(self, document_id: int, user_id: int) -> Document:
        document = (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.user_id == user_id)
            .first()
        )
        if document is None:
            raise RecordNotFoundError(f"Document {document_id} not found")
        return document

    def delete_document(self, document_id: int, user_id: int) -> None:
        """
        Delete a record, then its stored file if it has one.

        Raises:
            RecordNotFoundError: If the user has no such document
            PersistenceError: If the delete fails
        """
        document = self.get_document(document_id, user_id)
        storage_path = document.storage_path

        try:
            self.db.delete(document)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete document {document_id}: {e}")
            raise PersistenceError("Failed to delete document") from e

        if storage_path:
            # Log error but don't fail the deletion
            self.file_handler.delete_file(storage_path)
