"""
Domain operations over the Workfront facade.

Every function takes the `Workfront` facade as its first parameter `client`;
"*_as_user" functions run under the given user's session.
"""

from .documents import (
    create_documents_as_user,
    create_folder_as_user,
    download_as_user,
    find_docv_journal_entry,
    get_document_approval_by_id,
    get_document_by_id,
    get_document_version_by_id,
    get_or_create_document_folder,
    upload_attachments_as_user,
    upload_pdf_document_as_user,
)
from .entities import make_updates_as_user, remove_as_user, share_with_user
from .issues import (
    create_issue_as_user,
    get_issue_by_ext_id,
    get_issue_by_id,
    get_issue_by_ref_nr,
    update_issue_as_user,
)
from .notes import (
    create_note_as_user,
    create_reply_note_as_user,
    get_journal_entry_by_id,
    get_note_by_id,
)
from .projects import create_project_as_user, get_project_by_id, get_project_by_ref_nr
from .tasks import get_task_by_ref_nr, update_task_as_user
from .teams import get_team_by_id, get_team_members
from .users import get_user_by_email, get_user_by_id, get_users_by_email

__all__ = [
    "get_project_by_id",
    "get_project_by_ref_nr",
    "create_project_as_user",
    "get_issue_by_id",
    "get_issue_by_ext_id",
    "get_issue_by_ref_nr",
    "create_issue_as_user",
    "update_issue_as_user",
    "get_task_by_ref_nr",
    "update_task_as_user",
    "get_user_by_id",
    "get_user_by_email",
    "get_users_by_email",
    "get_team_by_id",
    "get_team_members",
    "create_folder_as_user",
    "get_or_create_document_folder",
    "upload_attachments_as_user",
    "create_documents_as_user",
    "upload_pdf_document_as_user",
    "get_document_by_id",
    "get_document_version_by_id",
    "get_document_approval_by_id",
    "find_docv_journal_entry",
    "download_as_user",
    "create_note_as_user",
    "create_reply_note_as_user",
    "get_note_by_id",
    "get_journal_entry_by_id",
    "make_updates_as_user",
    "remove_as_user",
    "share_with_user",
]
