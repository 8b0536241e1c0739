from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .core.models import UploadHandle


class WfObject(BaseModel):
    """
    Reference to any Workfront entity. Entity payloads stay dicts; this only
    pins down the two keys every reference carries.
    """

    id: str = Field(alias="ID")
    obj_code: str = Field(alias="objCode")
    name: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def coerce(cls, value: Any) -> "WfObject":
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)


class Attachment(BaseModel):
    """One file to upload (typically from an inbound mail)."""

    content: bytes
    file_name: Optional[str] = Field(default=None, alias="fileName")
    generated_file_name: Optional[str] = Field(default=None, alias="generatedFileName")
    content_type: Optional[str] = Field(default=None, alias="contentType")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def document_name(self) -> str:
        return self.file_name or self.generated_file_name or "unknown"


class Upload(BaseModel):
    """Attachments paired index-by-index with their upload handles."""

    attachments: List[Attachment] = Field(default_factory=list)
    handles: List[UploadHandle] = Field(default_factory=list)


class DocumentFolderParentField(BaseModel):
    """Parent reference of a document folder, e.g. ``issueID=<id>``."""

    name: str
    value: str

    def as_param(self) -> Dict[str, str]:
        return {self.name: self.value}


class ReplyMessage(BaseModel):
    text_msg: str = Field(alias="textMsg")
    thread_id: Optional[str] = Field(default=None, alias="threadID")
    parent_journal_entry_id: Optional[str] = Field(
        default=None, alias="parentJournalEntryID"
    )
    is_reply: bool = Field(default=False, alias="isReply")
    ext_ref_id: Optional[str] = Field(default=None, alias="extRefID")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# Object code of the replied-to entity -> note field holding its ID.
REPLY_PARENT_FIELDS: Dict[str, str] = {
    "OPTASK": "opTaskID",
    "PROJ": "projectID",
    "TASK": "taskID",
    "PORT": "portfolioID",
    "PRGM": "programID",
    "DOCU": "documentID",
    "TMPL": "templateID",
    "TTSK": "templateTaskID",
}


__all__ = [
    "WfObject",
    "Attachment",
    "Upload",
    "UploadHandle",
    "DocumentFolderParentField",
    "ReplyMessage",
    "REPLY_PARENT_FIELDS",
]
