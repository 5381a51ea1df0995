"""Shared enumerations used across the note service."""

from __future__ import annotations

from enum import StrEnum

# -- Membership --------------------------------------------------------------


class MembershipStatus(StrEnum):
    """Relationship of a user to a workspace, as computed by the gate."""

    OWNER = "OWNER"
    MEMBER = "MEMBER"
    BANNED = "BANNED"
    NOT_MEMBER = "NOT_MEMBER"


class MembershipRole(StrEnum):
    """Persisted value of ``workspace_memberships.status``."""

    OWNER = "owner"
    MEMBER = "member"
    BANNED = "banned"


# -- Notes -------------------------------------------------------------------


class NoteKind(StrEnum):
    CONTENT = "CONTENT"
    CHAT = "CHAT"
    TEMPLATE = "TEMPLATE"


class FieldType(StrEnum):
    """Discriminator for note field variants."""

    TITLE = "title"
    TEXT = "text"
    DATETIME = "datetime"
    SIGNATURE = "signature"
