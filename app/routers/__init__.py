"""
API Routers
Separate router modules for each domain.
"""

from app.routers import builder

__all__ = ["builder"]
