from __future__ import annotations

from typing import Any, Dict, List, Optional

from workfront_client.core.errors import WorkfrontClientError


def as_list(payload: Any) -> List[Dict[str, Any]]:
    """Search results as a list of dicts; anything else yields []."""
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def first_or_none(payload: Any) -> Optional[Dict[str, Any]]:
    items = as_list(payload)
    return items[0] if items else None


def single_or_none(payload: Any, *, what: str) -> Optional[Dict[str, Any]]:
    """First result, or None; more than one result is an error."""
    items = as_list(payload)
    if len(items) > 1:
        raise WorkfrontClientError(f"More than one result found for {what}")
    return items[0] if items else None


def eq_search(field: str, value: Any, *, mod: str = "eq") -> Dict[str, Any]:
    """Search filter ``{field: value, field_Mod: mod}``."""
    return {field: value, f"{field}_Mod": mod}


__all__ = ["as_list", "first_or_none", "single_or_none", "eq_search"]
