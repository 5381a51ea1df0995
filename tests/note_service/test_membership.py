"""Unit tests for the membership gate (no IO)."""

from __future__ import annotations

import pytest

from notebridge.note_service.errors import (
    AccessDeniedError,
    AlreadyMemberError,
    BannedError,
    CannotBanOwnerError,
    CannotMutatePersonalWorkspaceError,
    NotAMemberError,
    OwnerCannotLeaveError,
)
from notebridge.note_service.membership import (
    can_post,
    can_read,
    check_ban,
    check_delete,
    check_invite,
    check_leave,
    membership_status,
    require_member,
)
from notebridge.note_service.models.enums import MembershipStatus
from notebridge.note_service.models.workspace import WorkspaceRoster


def _roster(**overrides) -> WorkspaceRoster:
    data = {
        "workspace_id": "ws-1",
        "owner_id": "owner",
        "members": frozenset({"owner", "alice"}),
        "banned_members": frozenset({"mallory"}),
        "is_personal": False,
    }
    data.update(overrides)
    return WorkspaceRoster(**data)


# -- Status ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("user_id", "expected"),
    [
        ("owner", MembershipStatus.OWNER),
        ("alice", MembershipStatus.MEMBER),
        ("mallory", MembershipStatus.BANNED),
        ("stranger", MembershipStatus.NOT_MEMBER),
    ],
)
def test_membership_status(user_id: str, expected: MembershipStatus) -> None:
    assert membership_status(_roster(), user_id) == expected


def test_owner_wins_over_banned_and_banned_over_member() -> None:
    # Rosters that break the invariants still classify by fixed precedence.
    roster = _roster(members=frozenset({"owner", "x"}), banned_members=frozenset({"owner", "x"}))
    assert membership_status(roster, "owner") == MembershipStatus.OWNER
    assert membership_status(roster, "x") == MembershipStatus.BANNED


def test_read_and_post_only_for_participants() -> None:
    roster = _roster()
    assert can_read(roster, "owner") and can_post(roster, "owner")
    assert can_read(roster, "alice") and can_post(roster, "alice")
    assert not can_read(roster, "mallory")
    assert not can_post(roster, "stranger")


def test_require_member() -> None:
    assert require_member(_roster(), "alice") == MembershipStatus.MEMBER
    with pytest.raises(AccessDeniedError):
        require_member(_roster(), "mallory")


# -- Invite ------------------------------------------------------------------


def test_any_member_may_invite() -> None:
    check_invite(_roster(), "owner", "bob")
    check_invite(_roster(), "alice", "bob")


def test_invite_failures_are_distinct() -> None:
    with pytest.raises(AccessDeniedError):
        check_invite(_roster(), "stranger", "bob")
    with pytest.raises(AccessDeniedError):
        check_invite(_roster(), "mallory", "bob")
    with pytest.raises(BannedError):
        check_invite(_roster(), "owner", "mallory")
    with pytest.raises(AlreadyMemberError):
        check_invite(_roster(), "owner", "alice")
    with pytest.raises(AlreadyMemberError):
        check_invite(_roster(), "alice", "owner")


def test_personal_workspace_rejects_invite() -> None:
    roster = _roster(members=frozenset({"owner"}), banned_members=frozenset(), is_personal=True)
    with pytest.raises(CannotMutatePersonalWorkspaceError):
        check_invite(roster, "owner", "bob")


# -- Ban ---------------------------------------------------------------------


def test_ban_rules() -> None:
    check_ban(_roster(), "owner", "alice")
    check_ban(_roster(), "owner", "stranger")
    # Already banned passes; the store makes it a no-op.
    check_ban(_roster(), "owner", "mallory")

    with pytest.raises(AccessDeniedError, match="Only workspace owner can ban members"):
        check_ban(_roster(), "alice", "owner")
    with pytest.raises(CannotBanOwnerError):
        check_ban(_roster(), "owner", "owner")
    with pytest.raises(CannotMutatePersonalWorkspaceError):
        check_ban(_roster(is_personal=True), "owner", "alice")


# -- Leave / delete ----------------------------------------------------------


def test_leave_rules() -> None:
    check_leave(_roster(), "alice")

    with pytest.raises(OwnerCannotLeaveError):
        check_leave(_roster(), "owner")
    with pytest.raises(NotAMemberError):
        check_leave(_roster(), "stranger")
    with pytest.raises(NotAMemberError):
        check_leave(_roster(), "mallory")
    with pytest.raises(CannotMutatePersonalWorkspaceError):
        check_leave(_roster(is_personal=True), "owner")


def test_delete_rules() -> None:
    check_delete(_roster(), "owner")

    with pytest.raises(AccessDeniedError):
        check_delete(_roster(), "alice")
    with pytest.raises(CannotMutatePersonalWorkspaceError):
        check_delete(_roster(is_personal=True), "owner")
