from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.tools._results import eq_search, first_or_none, single_or_none
from workfront_client.workfront import Workfront

ISSUE = "OPTASK"

log = logging.getLogger("workfront_client.tools")


async def get_issue_by_id(
    client: Workfront, issue_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(ISSUE, issue_id, fields)


async def get_issue_by_ext_id(
    client: Workfront, ext_ref_id: str, fields: Fields = None
) -> Optional[Dict[str, Any]]:
    """
    Issue whose `extRefID` equals `ext_ref_id` (issues created from mail carry
    the message id there). More than one match raises WorkfrontClientError.
    """
    issues = await client.api.search(ISSUE, eq_search("extRefID", ext_ref_id), fields)
    return single_or_none(issues, what=f"issue extRefID {ext_ref_id}")


async def get_issue_by_ref_nr(
    client: Workfront, ref_nr: str, fields: Fields = None
) -> Optional[Dict[str, Any]]:
    issues = await client.api.search(ISSUE, eq_search("referenceNumber", ref_nr), fields)
    return first_or_none(issues)


async def create_issue_as_user(
    client: Workfront,
    email: str,
    params: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    async def work(api, session):
        return await api.create(ISSUE, params, fields)

    return await client.run_as_user(email, work, sessions=sessions)


async def update_issue_as_user(
    client: Workfront,
    email: str,
    issue_id: str,
    updates: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    async def work(api, session):
        issue = await api.edit(ISSUE, issue_id, updates, fields)
        log.debug("wf.issue_updated", extra={"user": email, "path": f"{ISSUE}/{issue_id}"})
        return issue

    return await client.run_as_user(email, work, sessions=sessions)
