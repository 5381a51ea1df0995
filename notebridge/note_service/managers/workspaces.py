"""Workspace operations.

Encapsulates workspace data access (create, list, get, update, delete) and the
membership transitions (invite, ban, leave).  Every mutation first consults
the membership gate, then applies its change as a single statement against
one row of ``workspace_memberships`` -- never a read-modify-write of a member
list -- so concurrent invites and bans on the same workspace can't lose
updates.

Functions return ``(Workspace, WorkspaceRoster)`` pairs where callers need
the roster alongside the row.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from notebridge.note_service.db.tables import User, Workspace, WorkspaceMembership
from notebridge.note_service.errors import NotAMemberError, UserNotFoundError
from notebridge.note_service.managers.access import load_roster, load_rosters, load_workspace
from notebridge.note_service.managers.notes import delete_notes_in_workspace, list_workspace_tags
from notebridge.note_service.membership import (
    check_ban,
    check_delete,
    check_invite,
    check_leave,
    membership_status,
    require_member,
    require_owner,
)
from notebridge.note_service.models.enums import MembershipRole, MembershipStatus

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from notebridge.note_service.models.api import WorkspaceCreate, WorkspaceUpdate
    from notebridge.note_service.models.workspace import WorkspaceRoster
    from notebridge.note_service.notifications import NotificationDispatcher

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


# -- Create / read -------------------------------------------------------------


async def add_workspace(
    db: AsyncSession,
    owner_id: str,
    name: str,
    *,
    description: str | None = None,
    is_personal: bool = False,
) -> Workspace:
    """Stage a workspace and its owner membership without committing."""
    workspace = Workspace(
        workspace_id=str(uuid.uuid4()),
        name=name,
        description=description,
        owner_id=owner_id,
        is_personal=is_personal,
    )
    db.add(workspace)
    await db.flush()
    db.add(
        WorkspaceMembership(
            workspace_id=workspace.workspace_id,
            user_id=owner_id,
            status=MembershipRole.OWNER,
        )
    )
    await db.flush()
    return workspace


async def create_workspace(
    db: AsyncSession, owner_id: str, body: WorkspaceCreate
) -> tuple[Workspace, WorkspaceRoster]:
    """Create a shared workspace owned by *owner_id* (members = {owner})."""
    workspace = await add_workspace(db, owner_id, body.name, description=body.description)
    await db.commit()
    logger.info("Workspace {} created by {}", workspace.workspace_id, owner_id)
    return await get_workspace_detail(db, workspace.workspace_id)


async def get_workspace_detail(db: AsyncSession, workspace_id: str) -> tuple[Workspace, WorkspaceRoster]:
    workspace = await load_workspace(db, workspace_id)
    rosters = await load_rosters(db, [workspace])
    return workspace, rosters[workspace_id]


async def get_workspace(db: AsyncSession, workspace_id: str, requester_id: str) -> tuple[Workspace, WorkspaceRoster]:
    """Get a workspace the requester can read."""
    workspace, roster = await get_workspace_detail(db, workspace_id)
    require_member(roster, requester_id)
    return workspace, roster


async def list_workspaces(
    db: AsyncSession,
    user_id: str,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[tuple[Workspace, WorkspaceRoster]]:
    """Workspaces where *user_id* is owner or member, newest first."""
    stmt = (
        select(Workspace)
        .join(WorkspaceMembership, WorkspaceMembership.workspace_id == Workspace.workspace_id)
        .where(
            WorkspaceMembership.user_id == user_id,
            WorkspaceMembership.status.in_([MembershipRole.OWNER, MembershipRole.MEMBER]),
        )
        .order_by(Workspace.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    workspaces = list(result.scalars().all())
    rosters = await load_rosters(db, workspaces)
    return [(w, rosters[w.workspace_id]) for w in workspaces]


async def get_membership_status(db: AsyncSession, workspace_id: str, user_id: str) -> MembershipStatus:
    """Read-only projection of the gate, used to render role-specific controls."""
    roster = await load_roster(db, workspace_id)
    return membership_status(roster, user_id)


async def list_members(db: AsyncSession, workspace_id: str, requester_id: str) -> list[User]:
    roster = await load_roster(db, workspace_id)
    require_member(roster, requester_id)
    result = await db.execute(select(User).where(User.user_id.in_(roster.members)).order_by(User.name))
    return list(result.scalars().all())


async def list_tags(db: AsyncSession, workspace_id: str, requester_id: str) -> list[str]:
    roster = await load_roster(db, workspace_id)
    require_member(roster, requester_id)
    return await list_workspace_tags(db, workspace_id)


async def poll_activity(
    db: AsyncSession, workspace_id: str, requester_id: str, since: datetime | None
) -> tuple[bool, datetime | None]:
    """Whether chat activity happened after *since*, and when the latest was."""
    workspace, roster = await get_workspace_detail(db, workspace_id)
    require_member(roster, requester_id)
    latest = _as_utc(workspace.latest_activity_at)
    if latest is None:
        return False, None
    if since is None:
        return True, latest
    return latest > _as_utc(since), latest


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# -- Update / delete -----------------------------------------------------------


async def update_workspace(
    db: AsyncSession, workspace_id: str, requester_id: str, body: WorkspaceUpdate
) -> tuple[Workspace, WorkspaceRoster]:
    """Partially update the workspace profile.  Owner only."""
    workspace, roster = await get_workspace_detail(db, workspace_id)
    require_owner(roster, requester_id, "update the workspace profile")

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        return workspace, roster

    for key, value in changes.items():
        setattr(workspace, key, value)

    await db.commit()
    await db.refresh(workspace)
    return workspace, roster


async def delete_workspace(db: AsyncSession, workspace_id: str, requester_id: str) -> None:
    """Delete a workspace and every note in it, in one transaction.

    Notes and memberships go first and the workspace row last, so an
    interrupted cascade leaves orphaned notes rather than a workspace
    pointing at missing data.
    """
    roster = await load_roster(db, workspace_id)
    check_delete(roster, requester_id)

    deleted_notes = await delete_notes_in_workspace(db, workspace_id)
    await db.execute(delete(WorkspaceMembership).where(WorkspaceMembership.workspace_id == workspace_id))
    await db.execute(delete(Workspace).where(Workspace.workspace_id == workspace_id))
    await db.commit()
    logger.info("Workspace {} deleted by {} ({} notes)", workspace_id, requester_id, deleted_notes)


# -- Membership transitions ----------------------------------------------------


async def invite_member(
    db: AsyncSession,
    workspace_id: str,
    inviter_id: str,
    target_id: str,
    notifier: NotificationDispatcher,
) -> tuple[Workspace, WorkspaceRoster]:
    """Add *target_id* as a member, then notify them (best effort)."""
    workspace, roster = await get_workspace_detail(db, workspace_id)
    check_invite(roster, inviter_id, target_id)
    await _require_user(db, target_id, "User to add not found")

    db.add(WorkspaceMembership(workspace_id=workspace_id, user_id=target_id, status=MembershipRole.MEMBER))
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent invite or ban created the row first; report what it became.
        await db.rollback()
        roster = await load_roster(db, workspace_id)
        check_invite(roster, inviter_id, target_id)
        raise

    logger.info("User {} invited to workspace {} by {}", target_id, workspace_id, inviter_id)
    await _notify_invite(notifier, workspace, target_id)
    return await get_workspace_detail(db, workspace_id)


async def _notify_invite(notifier: NotificationDispatcher, workspace: Workspace, target_id: str) -> None:
    try:
        delivered = await notifier.notify(
            target_id,
            "Workspace invitation",
            f"You have been added to {workspace.name}",
            {"workspace_id": workspace.workspace_id},
        )
    except Exception:
        logger.exception("Invite notification for {} raised; membership kept", target_id)
        return
    if not delivered:
        logger.warning("Invite notification for {} was not delivered", target_id)


async def ban_member(
    db: AsyncSession, workspace_id: str, requester_id: str, target_id: str
) -> tuple[Workspace, WorkspaceRoster]:
    """Move *target_id* to the banned set.  Banning twice is a no-op."""
    roster = await load_roster(db, workspace_id)
    check_ban(roster, requester_id, target_id)
    await _require_user(db, target_id, "User to ban not found")

    insert = _INSERTS[db.get_bind().dialect.name]
    stmt = insert(WorkspaceMembership).values(
        workspace_id=workspace_id,
        user_id=target_id,
        status=MembershipRole.BANNED,
        created_at=datetime.now(UTC),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["workspace_id", "user_id"],
        set_={"status": MembershipRole.BANNED},
        where=WorkspaceMembership.status != MembershipRole.OWNER,
    )
    await db.execute(stmt)
    await db.commit()
    logger.info("User {} banned from workspace {}", target_id, workspace_id)
    return await get_workspace_detail(db, workspace_id)


async def leave_workspace(db: AsyncSession, workspace_id: str, user_id: str) -> tuple[Workspace, WorkspaceRoster]:
    """Remove *user_id* from the members.  Owners can't leave; they delete."""
    roster = await load_roster(db, workspace_id)
    check_leave(roster, user_id)

    result = await db.execute(
        delete(WorkspaceMembership).where(
            WorkspaceMembership.workspace_id == workspace_id,
            WorkspaceMembership.user_id == user_id,
            WorkspaceMembership.status == MembershipRole.MEMBER,
        )
    )
    if not result.rowcount:
        # Banned or removed by a concurrent request since the roster was read.
        await db.rollback()
        msg = "You are not a member of this workspace"
        raise NotAMemberError(msg)
    await db.commit()
    logger.info("User {} left workspace {}", user_id, workspace_id)
    return await get_workspace_detail(db, workspace_id)


async def _require_user(db: AsyncSession, user_id: str, message: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id, message)
    return user
