"""
Job routes package.

Exports the router for inclusion in the main app.
"""

from .jobs_router import router

__all__ = ["router"]
