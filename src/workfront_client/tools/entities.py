"""Object-code agnostic operations on any entity reference."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.models import WfObject
from workfront_client.workfront import Workfront

log = logging.getLogger("workfront_client.tools")

EntityRef = Union[WfObject, Mapping[str, Any]]


async def make_updates_as_user(
    client: Workfront,
    email: str,
    entity_ref: EntityRef,
    updates: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    ref = WfObject.coerce(entity_ref)

    async def work(api, session):
        return await api.edit(ref.obj_code, ref.id, updates, fields)

    return await client.run_as_user(email, work, sessions=sessions)


async def remove_as_user(
    client: Workfront,
    email: str,
    entity_ref: EntityRef,
    force: bool = False,
    *,
    sessions: Optional[SessionStore] = None,
) -> Any:
    ref = WfObject.coerce(entity_ref)

    async def work(api, session):
        removed = await api.remove(ref.obj_code, ref.id, force)
        log.debug(
            "wf.entity_removed",
            extra={"user": email, "path": f"{ref.obj_code}/{ref.id}"},
        )
        return removed

    return await client.run_as_user(email, work, sessions=sessions)


async def share_with_user(
    client: Workfront, entity_ref: EntityRef, user_id: str, core_action: str = "VIEW"
) -> Any:
    """Grant `user_id` the `core_action` access level on the entity (API key identity)."""
    ref = WfObject.coerce(entity_ref)
    return await client.api.share(ref.obj_code, ref.id, user_id, core_action)
