"""
File storage service for LexiGem.

This module stores uploaded documents under user-scoped paths and
resolves the public URL each stored file is served from.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
import mimetypes
import os
import time
from typing import Optional

from lexigem.config import Constants, settings
from lexigem.exceptions import PersistenceError
from lexigem.schemas import DocumentUpload

logger = logging.getLogger(__name__)


class FileHandler:
    """
    Service class for handling stored files.

    Files live at ``<upload_dir>/<user_id>/<epoch-millis>.<ext>`` and are
    never overwritten.
    """

    def __init__(self, upload_dir: Optional[str] = None, public_base_url: Optional[str] = None):
        """Initialize the file handler."""
        self.upload_dir = upload_dir or settings.upload_dir
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.max_file_size = settings.max_file_size
        self.allowed_types = settings.allowed_file_types

        os.makedirs(self.upload_dir, exist_ok=True)

    def is_accepted_type(self, content_type: Optional[str]) -> bool:
        """
        Check the MIME type against the document types the UI offers.

        Other types are still forwarded to the model, which decides whether
        it can read them.

        Args:
            content_type (str): MIME type of the file

        Returns:
            bool: True if the type is one of the accepted document types
        """
        return content_type in self.allowed_types

    def validate_file_size(self, file_size: int) -> bool:
        """
        Validate if the file size is within limits.

        Args:
            file_size (int): Size of the file in bytes

        Returns:
            bool: True if file size is acceptable
        """
        if file_size > self.max_file_size:
            logger.warning(f"File size {file_size} exceeds limit {self.max_file_size}")
            return False
        return True

    @staticmethod
    def guess_mime_type(filename: str) -> Optional[str]:
        mime_type, _ = mimetypes.guess_type(filename)
        return mime_type

    @staticmethod
    def extension_for(mime_type: Optional[str]) -> str:
        """Extension for a MIME type, ``bin`` when unknown."""
        guessed = mimetypes.guess_extension(mime_type or "")
        return guessed.lstrip(".") if guessed else "bin"

    def build_storage_path(self, upload: DocumentUpload, user_id: int) -> str:
        """Relative storage path for a new upload, e.g. ``7/1718000000000.pdf``."""
        ext = upload.extension or self.extension_for(upload.mime_type)
        return f"{user_id}/{int(time.time() * 1000)}.{ext}"

    def absolute_path(self, storage_path: str) -> str:
        root = os.path.abspath(self.upload_dir)
        path = os.path.abspath(os.path.join(root, storage_path))
        if os.path.commonpath([root, path]) != root:
            raise PersistenceError(f"Storage path escapes upload directory: {storage_path}")
        return path

    def public_url(self, storage_path: str) -> str:
        return f"{self.public_base_url}{Constants.FILES_ROUTE}/{storage_path}"

    def save_upload(self, upload: DocumentUpload, user_id: int) -> str:
        """
        Store an uploaded file.

        Args:
            upload (DocumentUpload): File to store
            user_id (int): Owner of the file

        Returns:
            str: Relative storage path of the new file

        Raises:
            PersistenceError: If the file exists already or cannot be written
        """
        storage_path = self.build_storage_path(upload, user_id)
        file_path = self.absolute_path(storage_path)

        try:
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            # "xb" refuses to overwrite an existing upload
            with open(file_path, "xb") as f:
                f.write(upload.content)
        except FileExistsError as e:
            raise PersistenceError(f"File already exists: {storage_path}") from e
        except OSError as e:
            logger.error(f"Failed to save file {upload.file_name}: {e}")
            raise PersistenceError(f"Failed to save file {upload.file_name}") from e

        logger.info(f"File saved: {storage_path}")
        return storage_path

    def delete_file(self, storage_path: str) -> bool:
        """
        Delete a stored file.

        Args:
            storage_path (str): Relative storage path

        Returns:
            bool: True if file was deleted successfully
        """
        try:
            file_path = self.absolute_path(storage_path)
            if os.path.exists(file_path):
                os.remove(file_path)
                logger.info(f"File deleted: {storage_path}")
                return True

            logger.warning(f"File not found for deletion: {storage_path}")
            return False

        except (OSError, PersistenceError) as e:
            logger.error(f"Failed to delete file {storage_path}: {e}")
            return False
