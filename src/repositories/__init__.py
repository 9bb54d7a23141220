"""
Repository implementations for data access.
"""

from src.repositories.cache_repo import FieldCatalogCache
from src.repositories.file_repo import GeneratedFile, GeneratedFileRepository

__all__ = [
    "FieldCatalogCache",
    "GeneratedFile",
    "GeneratedFileRepository",
]
