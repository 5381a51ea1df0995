"""User endpoints (RPC-style).

The caller's id always comes from the identity gateway; these routes only
register and read the caller's own record.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from notebridge.note_service.db.tables import User
from notebridge.note_service.deps import CurrentUserId, DbSession
from notebridge.note_service.managers import users as user_mgr
from notebridge.note_service.models.api import UserCreate, UserResponse, WorkspaceResponse
from notebridge.note_service.routers.workspaces import to_response

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/create", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: DbSession, user_id: CurrentUserId) -> User:
    """Register the caller and create their personal workspace."""
    return await user_mgr.create_user(db, user_id, body)


@router.get("/me/get", response_model=UserResponse)
async def get_me(db: DbSession, user_id: CurrentUserId) -> User:
    return await user_mgr.get_user(db, user_id)


@router.get("/me/personal-workspace", response_model=WorkspaceResponse)
async def get_personal_workspace(db: DbSession, user_id: CurrentUserId) -> WorkspaceResponse:
    workspace, roster = await user_mgr.get_personal_workspace(db, user_id)
    return to_response(workspace, roster)
