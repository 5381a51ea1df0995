"""Note field variants.

A note's content is an ordered list of fields.  Each field is one variant of a
tagged union keyed by ``field_type``; every variant carries only its own
attributes.  Pydantic picks the variant from the discriminator, and code that
needs per-variant behaviour matches on ``field_type``.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from notebridge.note_service.errors import InvalidNoteError
from notebridge.note_service.models.enums import FieldType


def _field_id() -> str:
    return uuid.uuid4().hex


class TitleField(BaseModel):
    field_type: Literal["title"] = "title"
    field_id: str = Field(default_factory=_field_id)
    label: str = "Title"
    required: bool = True
    content: str = ""


class TextField(BaseModel):
    field_type: Literal["text"] = "text"
    field_id: str = Field(default_factory=_field_id)
    label: str = ""
    required: bool = False
    placeholder: str | None = None
    content: str | None = None


class DateTimeField(BaseModel):
    field_type: Literal["datetime"] = "datetime"
    field_id: str = Field(default_factory=_field_id)
    label: str = ""
    required: bool = False
    min_date: datetime | None = None
    max_date: datetime | None = None
    content: datetime | None = None


class SignatureField(BaseModel):
    field_type: Literal["signature"] = "signature"
    field_id: str = Field(default_factory=_field_id)
    label: str = ""
    required: bool = False
    content: str | None = Field(default=None, description="Path of the stored signature image.")


NoteField = Annotated[
    TitleField | TextField | DateTimeField | SignatureField,
    Field(discriminator="field_type"),
]

_fields_adapter: TypeAdapter[list[NoteField]] = TypeAdapter(list[NoteField])


def field_content_text(field: NoteField) -> str:
    """Render a field's content as plain text (empty string when unset)."""
    match field.field_type:
        case FieldType.DATETIME:
            return field.content.isoformat() if field.content is not None else ""
        case FieldType.TITLE | FieldType.TEXT | FieldType.SIGNATURE:
            return field.content or ""


def build_embedding_text(fields: list[NoteField]) -> str:
    """Concatenate field labels and contents, in order, into one embedding input.

    Every field contributes ``"field label: <label> field content: <content> "``;
    the result is stripped of surrounding whitespace.
    """
    parts: list[str] = []
    for field in fields:
        parts.append("field label: " + (field.label or "") + " ")
        parts.append("field content: " + field_content_text(field) + " ")
    return "".join(parts).strip()


def normalize_fields(fields: list[NoteField]) -> list[NoteField]:
    """Return *fields* with exactly one title, placed at index 0.

    A missing title is inserted empty; more than one title is rejected.
    """
    titles = [f for f in fields if f.field_type == FieldType.TITLE]
    if len(titles) > 1:
        msg = "A note can only have one title field"
        raise InvalidNoteError(msg)
    rest = [f for f in fields if f.field_type != FieldType.TITLE]
    title = titles[0] if titles else TitleField()
    return [title, *rest]


def dump_fields(fields: list[NoteField]) -> list[dict]:
    """Serialize fields for the JSON column."""
    return [f.model_dump(mode="json") for f in fields]


def load_fields(raw: list[dict]) -> list[NoteField]:
    """Parse fields stored in the JSON column."""
    return _fields_adapter.validate_python(raw)
