"""Data models for the note service."""

from notebridge.note_service.models.api import (
    MembershipStatusResponse,
    MemberTarget,
    NoteCreate,
    NoteResponse,
    NoteTransfer,
    NoteUpdate,
    NoteWorkspaceResponse,
    PollResponse,
    TagsResponse,
    UserCreate,
    UserResponse,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from notebridge.note_service.models.enums import FieldType, MembershipRole, MembershipStatus, NoteKind
from notebridge.note_service.models.note import (
    DateTimeField,
    NoteField,
    SignatureField,
    TextField,
    TitleField,
)
from notebridge.note_service.models.workspace import WorkspaceRoster

__all__ = [
    "DateTimeField",
    "FieldType",
    "MemberTarget",
    "MembershipRole",
    "MembershipStatus",
    "MembershipStatusResponse",
    "NoteCreate",
    "NoteField",
    "NoteKind",
    "NoteResponse",
    "NoteTransfer",
    "NoteUpdate",
    "NoteWorkspaceResponse",
    "PollResponse",
    "SignatureField",
    "TagsResponse",
    "TextField",
    "TitleField",
    "UserCreate",
    "UserResponse",
    "WorkspaceCreate",
    "WorkspaceResponse",
    "WorkspaceRoster",
    "WorkspaceUpdate",
]
