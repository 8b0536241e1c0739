from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, Optional

from workfront_client.core.request import Fields
from workfront_client.tools._results import eq_search, single_or_none
from workfront_client.workfront import Workfront

USER = "USER"


async def get_user_by_id(
    client: Workfront, user_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(USER, user_id, fields)


async def get_user_by_email(
    client: Workfront, email: str, fields: Fields = None
) -> Optional[Dict[str, Any]]:
    """
    Case-insensitive lookup by `emailAddr`.
    Returns None when no user matches; more than one match raises.
    """
    users = await client.api.search(USER, eq_search("emailAddr", email, mod="cieq"), fields)
    return single_or_none(users, what=f"user email {email}")


async def get_users_by_email(
    client: Workfront,
    emails: Iterable[str],
    emails_to_ignore: Iterable[str] = (),
    fields: Fields = None,
) -> Dict[str, Optional[Dict[str, Any]]]:
    """
    Look up several users concurrently. Ignored addresses (service mailboxes)
    are skipped; the result maps each looked-up email to its user or None.
    """
    ignore = {e.strip().lower() for e in emails_to_ignore}
    wanted = [e for e in emails if e.strip().lower() not in ignore]
    users = await asyncio.gather(
        *(get_user_by_email(client, email, fields) for email in wanted)
    )
    return dict(zip(wanted, users))
