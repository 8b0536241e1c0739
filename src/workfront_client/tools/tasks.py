from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.tools._results import eq_search, first_or_none
from workfront_client.workfront import Workfront

TASK = "TASK"


async def get_task_by_ref_nr(
    client: Workfront, ref_nr: str, fields: Fields = None
) -> Optional[Dict[str, Any]]:
    tasks = await client.api.search(
        TASK, eq_search("referenceNumber", ref_nr), fields or ["referenceNumber"]
    )
    return first_or_none(tasks)


async def update_task_as_user(
    client: Workfront,
    email: str,
    task_id: str,
    updates: Mapping[str, Any],
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    async def work(api, session):
        return await api.edit(TASK, task_id, updates)

    return await client.run_as_user(email, work, sessions=sessions)
