"""
Services package for LexiGem.

This package contains business logic services: the Gemini model client,
response parsing, document analysis, Legal Q&A chat and the stores that
persist documents, files and chat transcripts.

Author: LexiGem Team
Version: 1.0.0
"""

# This file makes the services directory a Python package
