"""
ORM models for LexiGem.

Importing this package registers every table on the shared declarative Base.
"""

from .user import User
from .document import Document
from .chat import ChatSession, ChatHistory

__all__ = [
    "User",
    "Document",
    "ChatSession",
    "ChatHistory",
]
