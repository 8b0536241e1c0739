from __future__ import annotations

from typing import Any, Dict, Optional

# Key for the object-list metadata (metadata() without an object code).
ROOT_METADATA_KEY = ""


class MetadataCache:
    """
    Object-code -> metadata memo shared by every client of one facade.
    Entries never expire; `invalidate` exists for tests and manual refresh.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def get(self, obj_code: Optional[str]) -> Optional[Any]:
        return self._entries.get(obj_code or ROOT_METADATA_KEY)

    def set(self, obj_code: Optional[str], metadata: Any) -> None:
        self._entries[obj_code or ROOT_METADATA_KEY] = metadata

    def invalidate(self, obj_code: Optional[str] = None) -> None:
        if obj_code is None:
            self._entries.clear()
        else:
            self._entries.pop(obj_code or ROOT_METADATA_KEY, None)

    def __contains__(self, obj_code: object) -> bool:
        return (obj_code or ROOT_METADATA_KEY) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["MetadataCache", "ROOT_METADATA_KEY"]
