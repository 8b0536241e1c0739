from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from workfront_client.core.errors import WorkfrontClientError
from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.models import REPLY_PARENT_FIELDS, ReplyMessage, WfObject
from workfront_client.workfront import Workfront

NOTE = "NOTE"
JOURNAL_ENTRY = "JRNLE"


def reply_note_params(
    reply: ReplyMessage, target: WfObject, owner_id: str
) -> Dict[str, Any]:
    """
    Build the NOTE fields for a reply on `target`.
    Raises WorkfrontClientError for object codes notes cannot be attached to.
    """
    parent_field = REPLY_PARENT_FIELDS.get(target.obj_code)
    if parent_field is None:
        raise WorkfrontClientError(
            f"Unrecognized object type {target.obj_code} for a reply note."
        )

    params: Dict[str, Any] = {
        parent_field: target.id,
        "noteObjCode": target.obj_code,
        "objID": target.id,
        "noteText": reply.text_msg.strip(),
        "isReply": reply.is_reply,
        "ownerID": owner_id,
    }
    if reply.parent_journal_entry_id:
        params["parentJournalEntryID"] = reply.parent_journal_entry_id
    if reply.thread_id:
        params["threadID"] = reply.thread_id
        # Replies to journal entries have no parent note.
        if not reply.parent_journal_entry_id:
            params["parentNoteID"] = reply.thread_id
    if reply.ext_ref_id:
        params["extRefID"] = reply.ext_ref_id
    return params


async def create_note_as_user(
    client: Workfront,
    email: str,
    params: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    """Create a note owned by the logged-in user."""

    async def work(api, session):
        return await api.create(NOTE, {**params, "ownerID": session.user_id}, fields)

    return await client.run_as_user(email, work, sessions=sessions)


async def create_reply_note_as_user(
    client: Workfront,
    email: str,
    reply: ReplyMessage,
    reply_to: Union[WfObject, Mapping[str, Any]],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    target = WfObject.coerce(reply_to)
    # Fail on unsupported targets before logging in.
    reply_note_params(reply, target, "")

    async def work(api, session):
        return await api.create(
            NOTE, reply_note_params(reply, target, session.user_id), fields
        )

    return await client.run_as_user(email, work, sessions=sessions)


async def get_note_by_id(
    client: Workfront, note_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(NOTE, note_id, fields)


async def get_journal_entry_by_id(
    client: Workfront, journal_entry_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(JOURNAL_ENTRY, journal_entry_id, fields)
