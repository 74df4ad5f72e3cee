"""
API Services - Business logic used by the EduShelf routers.
"""

from .request_views import RequestViewService

__all__ = ["RequestViewService"]
