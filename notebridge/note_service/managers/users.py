"""User registration and lookup.

Registering a user also creates their personal workspace in the same
transaction, so every user has exactly one from the moment they exist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from notebridge.note_service.db.tables import User
from notebridge.note_service.errors import DuplicateUserError, UserNotFoundError, WorkspaceNotFoundError
from notebridge.note_service.managers.workspaces import add_workspace, get_workspace_detail

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from notebridge.note_service.db.tables import Workspace
    from notebridge.note_service.models.api import UserCreate
    from notebridge.note_service.models.workspace import WorkspaceRoster


async def create_user(db: AsyncSession, user_id: str, body: UserCreate) -> User:
    if await db.get(User, user_id) is not None:
        raise DuplicateUserError(user_id)

    user = User(user_id=user_id, name=body.name, email=body.email)
    db.add(user)
    await db.flush()

    workspace = await add_workspace(db, user_id, f"{body.name}'s Personal Workspace", is_personal=True)
    user.personal_workspace_id = workspace.workspace_id
    await db.commit()
    await db.refresh(user)
    logger.info("User {} registered (personal workspace {})", user_id, workspace.workspace_id)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def get_personal_workspace(db: AsyncSession, user_id: str) -> tuple[Workspace, WorkspaceRoster]:
    user = await get_user(db, user_id)
    if user.personal_workspace_id is None:
        raise WorkspaceNotFoundError("")
    return await get_workspace_detail(db, user.personal_workspace_id)
