"""Workspace roster model.

A roster is the access-control snapshot of one workspace: its owner, the
members (owner included), the banned users and the personal flag.  It is
assembled from the ``workspaces`` row plus its ``workspace_memberships`` rows
and handed to the membership gate, which decides on it without any IO.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WorkspaceRoster(BaseModel):
    """Immutable membership view of a workspace."""

    model_config = ConfigDict(frozen=True)

    workspace_id: str
    owner_id: str
    members: frozenset[str] = Field(default_factory=frozenset)
    banned_members: frozenset[str] = Field(default_factory=frozenset)
    is_personal: bool = False
