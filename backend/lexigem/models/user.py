"""
User model for LexiGem.

Author: LexiGem Team
Version: 1.0.0
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from lexigem.database import Base


class User(Base):
    """Registered account that owns documents and chat sessions."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    def update_last_login(self):
        self.last_login = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }
