"""Domain errors for the note service.

Every violation surfaces as its own named exception so callers can render
"already a member" differently from "banned" differently from "not found".
Each class also derives from the closest builtin (``LookupError``,
``PermissionError``, ``ValueError``) so managers stay HTTP-agnostic; the
``status_code`` attribute is only read by the app-level exception handler.
"""

from __future__ import annotations


class NoteBridgeError(Exception):
    """Base class for all domain errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# -- Not found -----------------------------------------------------------------


class NotFoundError(NoteBridgeError, LookupError):
    code = "not_found"
    status_code = 404


class WorkspaceNotFoundError(NotFoundError):
    def __init__(self, workspace_id: str) -> None:
        self.workspace_id = workspace_id
        super().__init__("Workspace not found")


class NoteNotFoundError(NotFoundError):
    def __init__(self, note_id: str) -> None:
        self.note_id = note_id
        super().__init__("Note not found")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str, message: str = "User not found") -> None:
        self.user_id = user_id
        super().__init__(message)


# -- Authorization -------------------------------------------------------------


class AccessDeniedError(NoteBridgeError, PermissionError):
    """Caller is not a member, or not allowed to perform this specific action."""

    code = "access_denied"
    status_code = 403


class BannedError(NoteBridgeError, PermissionError):
    code = "banned"
    status_code = 403


class OwnerCannotLeaveError(NoteBridgeError, PermissionError):
    code = "owner_cannot_leave"
    status_code = 403


class CannotMutatePersonalWorkspaceError(NoteBridgeError, PermissionError):
    code = "personal_workspace"
    status_code = 403


# -- Invalid transitions -------------------------------------------------------


class AlreadyMemberError(NoteBridgeError, ValueError):
    code = "already_member"
    status_code = 400


class NotAMemberError(NoteBridgeError, ValueError):
    code = "not_a_member"
    status_code = 400


class CannotBanOwnerError(NoteBridgeError, ValueError):
    code = "cannot_ban_owner"
    status_code = 400


class InvalidNoteError(NoteBridgeError, ValueError):
    code = "invalid_note"
    status_code = 400


class DuplicateUserError(NoteBridgeError, ValueError):
    code = "duplicate"
    status_code = 409

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User '{user_id}' already exists.")


# -- Embeddings ----------------------------------------------------------------


class EmbeddingError(NoteBridgeError):
    """Raised by an embedding provider when a vector could not be produced."""

    code = "embedding_error"
    status_code = 502


class EmbeddingUnavailableError(NoteBridgeError):
    """Semantic search was requested but the query could not be embedded.

    Retryable; no partial results are returned.
    """

    code = "embedding_unavailable"
    status_code = 503
