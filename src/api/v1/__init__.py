"""
API v1 routers.
"""

from src.api.v1 import assistant, automation, documents, health

__all__ = ["assistant", "automation", "documents", "health"]
