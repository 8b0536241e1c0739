from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.tools._results import eq_search, first_or_none
from workfront_client.workfront import Workfront

PROJECT = "PROJ"


async def get_project_by_id(
    client: Workfront, project_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(PROJECT, project_id, fields)


async def get_project_by_ref_nr(
    client: Workfront, ref_nr: str
) -> Optional[Dict[str, Any]]:
    """Project with the given reference number, or None."""
    projects = await client.api.search(
        PROJECT, eq_search("referenceNumber", ref_nr), ["referenceNumber"]
    )
    return first_or_none(projects)


async def create_project_as_user(
    client: Workfront,
    email: str,
    params: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    async def work(api, session):
        return await api.create(PROJECT, params, fields)

    return await client.run_as_user(email, work, sessions=sessions)
