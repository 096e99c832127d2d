"""
LexiGem: AI-assisted legal document analysis and Legal Q&A backend.

Author: LexiGem Team
Version: 1.0.0
"""

__version__ = "1.0.0"
