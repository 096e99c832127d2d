"""
Routes package for LexiGem.

This package contains all API route handlers organized by functionality.
Each module handles a specific domain of the application.

Author: LexiGem Team
Version: 1.0.0
"""

# This file makes the routes directory a Python package
# Individual route modules are imported as needed
