"""
Document analysis record model for LexiGem.

Author: LexiGem Team
Version: 1.0.0
"""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from lexigem.database import Base


class Document(Base):
    """
    Stored analysis of an uploaded legal document.

    The list columns mirror the analysis result fields and are stored as JSON.
    """

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_url = Column(String(1024), nullable=True)
    storage_path = Column(String(1024), nullable=True)

    summary = Column(Text, nullable=False)
    pros = Column(JSON, nullable=False, default=list)
    cons = Column(JSON, nullable=False, default=list)
    potential_loopholes = Column(JSON, nullable=False, default=list)
    potential_challenges = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "file_url": self.file_url,
            "summary": self.summary,
            "pros": list(self.pros or []),
            "cons": list(self.cons or []),
            "potential_loopholes": list(self.potential_loopholes or []),
            "potential_challenges": list(self.potential_challenges or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
