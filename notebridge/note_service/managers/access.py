"""Workspace and roster loading shared by the workspace and note managers."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notebridge.note_service.db.tables import Workspace, WorkspaceMembership
from notebridge.note_service.errors import WorkspaceNotFoundError
from notebridge.note_service.models.enums import MembershipRole
from notebridge.note_service.models.workspace import WorkspaceRoster


async def load_workspace(db: AsyncSession, workspace_id: str) -> Workspace:
    """Get a workspace row, re-read from the database.

    Membership statements bypass the identity map, so a cached row is always
    refreshed.  Raises ``WorkspaceNotFoundError`` if missing.
    """
    workspace = await db.get(Workspace, workspace_id, populate_existing=True)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


async def load_roster(db: AsyncSession, workspace_id: str) -> WorkspaceRoster:
    """Load the access-control snapshot of a workspace."""
    workspace = await load_workspace(db, workspace_id)
    rosters = await load_rosters(db, [workspace])
    return rosters[workspace_id]


async def load_rosters(db: AsyncSession, workspaces: Iterable[Workspace]) -> dict[str, WorkspaceRoster]:
    """Build rosters for several workspaces with a single membership query."""
    by_id = {w.workspace_id: w for w in workspaces}
    if not by_id:
        return {}

    result = await db.execute(
        select(WorkspaceMembership.workspace_id, WorkspaceMembership.user_id, WorkspaceMembership.status).where(
            WorkspaceMembership.workspace_id.in_(by_id)
        )
    )
    members: dict[str, set[str]] = {wid: set() for wid in by_id}
    banned: dict[str, set[str]] = {wid: set() for wid in by_id}
    for workspace_id, user_id, status in result:
        if status == MembershipRole.BANNED:
            banned[workspace_id].add(user_id)
        else:
            members[workspace_id].add(user_id)

    return {
        wid: WorkspaceRoster(
            workspace_id=wid,
            owner_id=w.owner_id,
            members=frozenset(members[wid]),
            banned_members=frozenset(banned[wid]),
            is_personal=w.is_personal,
        )
        for wid, w in by_id.items()
    }
