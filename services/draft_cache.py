"""
Local ephemeral cache for draft orders.

Holds serialized values in process memory under namespaced keys.
Whole-value read/write only; nothing survives a restart.
Single-server only.
"""

from typing import Iterator, Optional

from config import settings


class DraftCache:
    """Namespaced key -> string store."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._slots: dict[str, str] = {}

    def slot_key(self, owner_id: str) -> str:
        return f"{self.namespace}:{owner_id}"

    def read(self, key: str) -> Optional[str]:
        """Stored value, or None if the slot is empty."""
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        """Replace the whole value of a slot."""
        self._slots[key] = value

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    def keys(self) -> Iterator[str]:
        """Keys in this namespace (snapshot, safe to mutate while iterating)."""
        prefix = f"{self.namespace}:"
        return iter([k for k in self._slots if k.startswith(prefix)])

    def clear_all(self) -> None:
        """Drop every slot."""
        self._slots.clear()


_cache: Optional[DraftCache] = None


def get_draft_cache() -> DraftCache:
    """Get or create the process-wide DraftCache."""
    global _cache
    if _cache is None:
        _cache = DraftCache(settings.draft_cache_namespace)
    return _cache
