"""
Process-wide read-through cache.

Holds the Jira field catalog per site so the "Epic Link" field id is looked
up once per process.
"""

from typing import Any, Awaitable, Callable, Optional

from src.core.logging import get_logger

logger = get_logger(__name__)


class FieldCatalogCache:
    """
    Get-or-populate cache keyed by site URL.

    There is no lock: two concurrent first requests may both run the loader
    and both store the result. The last write wins, and both values are the
    same catalog.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value
        logger.debug("Cache set", key=key)

    async def get_or_populate(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value, or await ``loader`` and cache its result."""
        if key in self._entries:
            return self._entries[key]
        value = await loader()
        self.set(key, value)
        return value

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        logger.info("Cache cleared")

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
