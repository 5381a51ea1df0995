"""Membership gate: pure access-control decisions over a workspace roster.

``membership_status`` classifies a user as OWNER, MEMBER, BANNED or NOT_MEMBER.
Every mutating workspace operation consults one of the ``check_*`` functions
first; each violation raises its own named error from
:mod:`notebridge.note_service.errors` rather than a generic "forbidden".

Per non-owner user the states form a small machine::

    NOT_MEMBER --invite (by any member)--> MEMBER
    MEMBER     --leave (self)-----------> NOT_MEMBER
    MEMBER     --ban (by owner)----------> BANNED

BANNED is absorbing: there is no unban, and invites of banned users fail.
OWNER is attached at creation and never enters the machine.  Personal
workspaces reject every membership mutation.

Nothing here touches the database; callers load a
:class:`~notebridge.note_service.models.workspace.WorkspaceRoster` and apply
the resulting change as one atomic statement.
"""

from __future__ import annotations

from notebridge.note_service.errors import (
    AccessDeniedError,
    AlreadyMemberError,
    BannedError,
    CannotBanOwnerError,
    CannotMutatePersonalWorkspaceError,
    NotAMemberError,
    OwnerCannotLeaveError,
)
from notebridge.note_service.models.enums import MembershipStatus
from notebridge.note_service.models.workspace import WorkspaceRoster

_PARTICIPANTS = frozenset({MembershipStatus.OWNER, MembershipStatus.MEMBER})


def membership_status(roster: WorkspaceRoster, user_id: str) -> MembershipStatus:
    """Classify *user_id* against *roster*.  OWNER always wins, then BANNED."""
    if user_id == roster.owner_id:
        return MembershipStatus.OWNER
    if user_id in roster.banned_members:
        return MembershipStatus.BANNED
    if user_id in roster.members:
        return MembershipStatus.MEMBER
    return MembershipStatus.NOT_MEMBER


def can_read(roster: WorkspaceRoster, user_id: str) -> bool:
    return membership_status(roster, user_id) in _PARTICIPANTS


def can_post(roster: WorkspaceRoster, user_id: str) -> bool:
    return membership_status(roster, user_id) in _PARTICIPANTS


def require_member(roster: WorkspaceRoster, user_id: str) -> MembershipStatus:
    """Raise ``AccessDeniedError`` unless *user_id* is the owner or a member."""
    status = membership_status(roster, user_id)
    if status not in _PARTICIPANTS:
        msg = "Access denied: You are not a member of this workspace"
        raise AccessDeniedError(msg)
    return status


def require_owner(roster: WorkspaceRoster, user_id: str, action: str) -> None:
    if user_id != roster.owner_id:
        msg = f"Only workspace owner can {action}"
        raise AccessDeniedError(msg)


def check_invite(roster: WorkspaceRoster, inviter_id: str, target_id: str) -> None:
    """Validate that *inviter_id* may add *target_id* to the workspace.

    Any current member may invite.  Banned targets can never come back, and
    existing members (owner included) cannot be invited twice.
    """
    require_member(roster, inviter_id)
    if roster.is_personal:
        msg = "Cannot invite members to personal workspace"
        raise CannotMutatePersonalWorkspaceError(msg)
    if target_id in roster.banned_members:
        msg = "User is banned from this workspace"
        raise BannedError(msg)
    if target_id in roster.members or target_id == roster.owner_id:
        msg = "User is already a member of this workspace"
        raise AlreadyMemberError(msg)


def check_ban(roster: WorkspaceRoster, requester_id: str, target_id: str) -> None:
    """Validate that *requester_id* may ban *target_id*.

    Only the owner bans, never on a personal workspace, and never themselves.
    Banning an already banned user passes; the store treats it as a no-op.
    """
    require_owner(roster, requester_id, "ban members")
    if roster.is_personal:
        msg = "Cannot ban members from personal workspace"
        raise CannotMutatePersonalWorkspaceError(msg)
    if target_id == roster.owner_id:
        msg = "Cannot ban the workspace owner"
        raise CannotBanOwnerError(msg)


def check_leave(roster: WorkspaceRoster, user_id: str) -> None:
    """Validate that *user_id* may leave.  Owners must delete instead."""
    if roster.is_personal:
        msg = "Cannot leave your personal workspace"
        raise CannotMutatePersonalWorkspaceError(msg)
    status = membership_status(roster, user_id)
    if status == MembershipStatus.OWNER:
        msg = "Owner cannot leave the workspace; delete it instead"
        raise OwnerCannotLeaveError(msg)
    if status != MembershipStatus.MEMBER:
        msg = "You are not a member of this workspace"
        raise NotAMemberError(msg)


def check_delete(roster: WorkspaceRoster, user_id: str) -> None:
    require_owner(roster, user_id, "delete the workspace")
    if roster.is_personal:
        msg = "Cannot delete your personal workspace"
        raise CannotMutatePersonalWorkspaceError(msg)
