"""Workspace endpoints (RPC-style).

All write operations use POST; reads use GET.  Membership rules are enforced
by the managers; domain errors are rendered by the app-level handler.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query, status

from notebridge.note_service.db.tables import User, Workspace
from notebridge.note_service.deps import CurrentUserId, DbSession, Notifier
from notebridge.note_service.managers import workspaces as ws_mgr
from notebridge.note_service.models.api import (
    MembershipStatusResponse,
    MemberTarget,
    PollResponse,
    TagsResponse,
    UserResponse,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from notebridge.note_service.models.workspace import WorkspaceRoster

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def to_response(workspace: Workspace, roster: WorkspaceRoster) -> WorkspaceResponse:
    """Serialize a workspace row together with its roster."""
    response = WorkspaceResponse.model_validate(workspace)
    return response.model_copy(
        update={
            "members": sorted(roster.members),
            "banned_members": sorted(roster.banned_members),
        }
    )


@router.post("/create", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(body: WorkspaceCreate, db: DbSession, user_id: CurrentUserId) -> WorkspaceResponse:
    """Create a shared workspace owned by the caller."""
    return to_response(*await ws_mgr.create_workspace(db, user_id, body))


@router.get("/list", response_model=list[WorkspaceResponse])
async def list_workspaces(
    db: DbSession,
    user_id: CurrentUserId,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[WorkspaceResponse]:
    """List workspaces the caller owns or belongs to, newest first."""
    rows = await ws_mgr.list_workspaces(db, user_id, limit=limit, offset=offset)
    return [to_response(workspace, roster) for workspace, roster in rows]


@router.get("/{workspace_id}/get", response_model=WorkspaceResponse)
async def get_workspace(workspace_id: str, db: DbSession, user_id: CurrentUserId) -> WorkspaceResponse:
    return to_response(*await ws_mgr.get_workspace(db, workspace_id, user_id))


@router.post("/{workspace_id}/update", response_model=WorkspaceResponse)
async def update_workspace(
    workspace_id: str, body: WorkspaceUpdate, db: DbSession, user_id: CurrentUserId
) -> WorkspaceResponse:
    """Partially update the workspace profile."""
    return to_response(*await ws_mgr.update_workspace(db, workspace_id, user_id, body))


@router.get("/{workspace_id}/members", response_model=list[UserResponse])
async def list_members(workspace_id: str, db: DbSession, user_id: CurrentUserId) -> list[User]:
    return await ws_mgr.list_members(db, workspace_id, user_id)


@router.get("/{workspace_id}/tags", response_model=TagsResponse)
async def list_tags(workspace_id: str, db: DbSession, user_id: CurrentUserId) -> TagsResponse:
    return TagsResponse(tags=await ws_mgr.list_tags(db, workspace_id, user_id))


@router.get("/{workspace_id}/membership/{member_id}", response_model=MembershipStatusResponse)
async def get_membership_status(
    workspace_id: str, member_id: str, db: DbSession, _user_id: CurrentUserId
) -> MembershipStatusResponse:
    status_ = await ws_mgr.get_membership_status(db, workspace_id, member_id)
    return MembershipStatusResponse(workspace_id=workspace_id, user_id=member_id, status=status_)


@router.post("/{workspace_id}/invite", response_model=WorkspaceResponse)
async def invite_member(
    workspace_id: str, body: MemberTarget, db: DbSession, user_id: CurrentUserId, notifier: Notifier
) -> WorkspaceResponse:
    return to_response(*await ws_mgr.invite_member(db, workspace_id, user_id, body.user_id, notifier))


@router.post("/{workspace_id}/ban", response_model=WorkspaceResponse)
async def ban_member(
    workspace_id: str, body: MemberTarget, db: DbSession, user_id: CurrentUserId
) -> WorkspaceResponse:
    return to_response(*await ws_mgr.ban_member(db, workspace_id, user_id, body.user_id))


@router.post("/{workspace_id}/leave", response_model=WorkspaceResponse)
async def leave_workspace(workspace_id: str, db: DbSession, user_id: CurrentUserId) -> WorkspaceResponse:
    return to_response(*await ws_mgr.leave_workspace(db, workspace_id, user_id))


@router.post("/{workspace_id}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(workspace_id: str, db: DbSession, user_id: CurrentUserId) -> None:
    """Delete a workspace and all of its notes."""
    await ws_mgr.delete_workspace(db, workspace_id, user_id)


@router.get("/{workspace_id}/poll", response_model=PollResponse)
async def poll_activity(
    workspace_id: str,
    db: DbSession,
    user_id: CurrentUserId,
    since: datetime | None = None,
) -> PollResponse:
    """Report whether chat notes arrived after *since*."""
    has_new, latest = await ws_mgr.poll_activity(db, workspace_id, user_id, since)
    return PollResponse(has_new_messages=has_new, latest_activity_at=latest)
