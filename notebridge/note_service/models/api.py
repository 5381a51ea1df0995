"""API request / response schemas.

These thin schemas sit between HTTP and the ORM layer:

- **Create** schemas validate user input and provide defaults.
- **Update** schemas allow partial updates via ``exclude_unset``.
- **Response** schemas serialize ORM rows via ``from_attributes``.

Note field variants are reused from :mod:`notebridge.note_service.models.note`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notebridge.note_service.models.enums import MembershipStatus, NoteKind
from notebridge.note_service.models.note import NoteField

# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Sign-up payload; the user id comes from the authenticated identity."""

    name: str = Field(min_length=1)
    email: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    email: str | None = None
    personal_workspace_id: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(BaseModel):
    """Input for creating a new (non-personal) workspace."""

    name: str = Field(min_length=1)
    description: str | None = None


class WorkspaceUpdate(BaseModel):
    """Partial profile update (owner only)."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    image_path: str | None = Field(default=None, min_length=1)


class WorkspaceResponse(BaseModel):
    """Serialized workspace with its roster."""

    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    name: str
    description: str | None = None
    image_path: str | None = None
    owner_id: str
    is_personal: bool
    members: list[str] = Field(default_factory=list)
    banned_members: list[str] = Field(default_factory=list)
    latest_activity_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class MemberTarget(BaseModel):
    """Body of invite / ban requests."""

    user_id: str = Field(min_length=1)


class MembershipStatusResponse(BaseModel):
    workspace_id: str
    user_id: str
    status: MembershipStatus


class PollResponse(BaseModel):
    has_new_messages: bool
    latest_activity_at: datetime | None = None


class TagsResponse(BaseModel):
    tags: list[str]


# ---------------------------------------------------------------------------
# Note
# ---------------------------------------------------------------------------


class NoteCreate(BaseModel):
    workspace_id: str
    kind: NoteKind = NoteKind.CONTENT
    tags: list[str] = Field(default_factory=list)
    fields: list[NoteField] = Field(default_factory=list)


class NoteUpdate(BaseModel):
    """Partial note update -- only fields explicitly set are applied."""

    tags: list[str] | None = None
    fields: list[NoteField] | None = None


class NoteTransfer(BaseModel):
    """Target of a copy / move."""

    workspace_id: str = Field(min_length=1)


class NoteResponse(BaseModel):
    """Serialized note.  The embedding vector is never returned."""

    model_config = ConfigDict(from_attributes=True)

    note_id: str
    workspace_id: str
    author_id: str
    kind: NoteKind
    tags: list[str]
    fields: list[NoteField]
    created_at: datetime
    updated_at: datetime


class NoteWorkspaceResponse(BaseModel):
    note_id: str
    workspace_id: str
