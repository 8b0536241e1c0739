from __future__ import annotations

import asyncio
import logging
from typing import IO, Any, Dict, List, Mapping, Optional, Sequence, Union

from workfront_client.core.errors import WorkfrontClientError
from workfront_client.core.request import Fields
from workfront_client.core.sessions import SessionStore
from workfront_client.models import (
    Attachment,
    DocumentFolderParentField,
    Upload,
    WfObject,
)
from workfront_client.tools._results import as_list
from workfront_client.workfront import Workfront

DOCUMENT = "DOCU"
DOCUMENT_FOLDER = "DOCFDR"
DOCUMENT_VERSION = "DOCV"
DOCUMENT_APPROVAL = "DOCAPL"
JOURNAL_ENTRY = "JRNLE"

PDF_CONTENT_TYPE = "application/pdf"

log = logging.getLogger("workfront_client.tools")


def _document_params(
    name: str,
    parent: WfObject,
    handle: str,
    folder: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "name": name,
        "docObjCode": parent.obj_code,
        "objID": parent.id,
        "handle": handle,
    }
    if folder:
        params["folderIDs"] = [folder["ID"]]
    return params


async def create_folder_as_user(
    client: Workfront,
    email: str,
    params: Mapping[str, Any],
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    async def work(api, session):
        return await api.create(DOCUMENT_FOLDER, params, fields)

    return await client.run_as_user(email, work, sessions=sessions)


async def get_or_create_document_folder(
    client: Workfront,
    email: str,
    parent_field: Optional[DocumentFolderParentField],
    folder_name: str,
    fields: Fields = None,
    parent_folder_id: Optional[str] = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    """
    Find a folder by name (case-insensitive) under the parent entity, creating
    it as `email` when missing. The returned folder carries `folderParentField`.
    """
    if parent_field is None:
        raise WorkfrontClientError(
            "Document folder parent entity field name (issueID, taskID, projectID) "
            f"is required to create a folder! Requested folder name: {folder_name}"
        )

    params: Dict[str, Any] = {"name": folder_name, **parent_field.as_param()}
    if parent_folder_id:
        params["parentID"] = parent_folder_id

    found = as_list(
        await client.api.search(
            DOCUMENT_FOLDER, {**params, "name_Mod": "cieq"}, fields
        )
    )
    if found:
        folder = found[0]
    else:
        folder = await create_folder_as_user(
            client, email, params, fields, sessions=sessions
        )
    folder["folderParentField"] = parent_field.model_dump()
    return folder


async def upload_attachments_as_user(
    client: Workfront,
    email: str,
    attachments: Sequence[Attachment],
    *,
    sessions: Optional[SessionStore] = None,
) -> Optional[Upload]:
    """Upload every attachment concurrently as `email`. No attachments -> None."""
    if not attachments:
        log.debug("wf.upload.skipped", extra={"user": email})
        return None

    async def work(api, session):
        handles = await asyncio.gather(
            *(
                api.upload(
                    att.content,
                    filename=att.document_name,
                    content_type=att.content_type,
                )
                for att in attachments
            )
        )
        return Upload(attachments=list(attachments), handles=list(handles))

    return await client.run_as_user(email, work, sessions=sessions)


async def create_documents_as_user(
    client: Workfront,
    email: str,
    parent_ref: Union[WfObject, Mapping[str, Any]],
    upload: Upload,
    fields: Fields = None,
    folder: Optional[Mapping[str, Any]] = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> List[Dict[str, Any]]:
    """One document per uploaded attachment, attached to `parent_ref`."""
    parent = WfObject.coerce(parent_ref)

    async def work(api, session):
        return list(
            await asyncio.gather(
                *(
                    api.create(
                        DOCUMENT,
                        _document_params(att.document_name, parent, handle.handle, folder),
                        fields,
                    )
                    for att, handle in zip(upload.attachments, upload.handles)
                )
            )
        )

    return await client.run_as_user(email, work, sessions=sessions)


async def upload_pdf_document_as_user(
    client: Workfront,
    email: str,
    parent_ref: Union[WfObject, Mapping[str, Any]],
    content: Union[bytes, IO[bytes]],
    file_name: str,
    folder: Optional[Mapping[str, Any]] = None,
    fields: Fields = None,
    *,
    sessions: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    """Upload a PDF and create its document in one session."""
    parent = WfObject.coerce(parent_ref)

    async def work(api, session):
        handle = await api.upload(
            content, filename=file_name, content_type=PDF_CONTENT_TYPE
        )
        return await api.create(
            DOCUMENT, _document_params(file_name, parent, handle.handle, folder), fields
        )

    return await client.run_as_user(email, work, sessions=sessions)


async def get_document_by_id(
    client: Workfront, doc_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(DOCUMENT, doc_id, fields)


async def get_document_version_by_id(
    client: Workfront, version_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(DOCUMENT_VERSION, version_id, fields)


async def get_document_approval_by_id(
    client: Workfront, approval_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(DOCUMENT_APPROVAL, approval_id, fields)


async def find_docv_journal_entry(
    client: Workfront, document_version: Mapping[str, Any], fields: Fields = None
) -> Optional[Dict[str, Any]]:
    """
    Journal entry recorded for a new document version. The server stores the
    version ID in `aux2` of an entry whose sub-object is the document.
    """
    document = document_version.get("document") or {}
    entries = as_list(
        await client.api.search(
            JOURNAL_ENTRY,
            {
                "aux2": document_version["ID"],
                "subObjCode": DOCUMENT,
                "subObjID": document.get("ID"),
            },
            fields,
        )
    )
    return entries[0] if entries else None


async def download_as_user(
    client: Workfront,
    email: str,
    download_url: str,
    output: IO[bytes],
    *,
    sessions: Optional[SessionStore] = None,
) -> None:
    """Stream a document into `output` using `email`'s session."""

    async def work(api, session):
        await api.download(download_url, output)

    await client.run_as_user(email, work, sessions=sessions)
