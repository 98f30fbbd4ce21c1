"""Comment entity, record codec and object key layout.

Key layout (components joined by ``/``, optionally under a store prefix):

- Record: ``posts/{post}/comments/{id}/__comment__``
- Link:   ``posts/{post}/comments/{parent}/comments/{id}``

Top-level comments are linked under the ``__toplevel__`` parent. Records are
JSON with the field names ``id, post, parent, author, created, modified,
body`` and RFC 3339 timestamps, so stores written by other implementations of
the same layout stay readable.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import orjson


TOPLEVEL = "__toplevel__"
RECORD_NAME = "__comment__"


@dataclass
class Comment:
    """A single comment on a post."""

    post: str
    author: str
    body: str
    parent: str = ""
    id: str = ""
    created: datetime | None = None
    modified: datetime | None = None

    def to_record(self) -> bytes:
        """Serialize for storage."""
        return orjson.dumps(
            {
                "id": self.id,
                "post": self.post,
                "parent": self.parent,
                "author": self.author,
                "created": self.created,
                "modified": self.modified,
                "body": self.body,
            },
            option=orjson.OPT_UTC_Z,
        )

    @classmethod
    def from_record(cls, data: bytes) -> "Comment":
        """Deserialize a stored record.

        Raises:
            ValueError: If ``data`` is not a JSON object with string fields
                and RFC 3339 timestamps.
        """
        raw = orjson.loads(data)
        if not isinstance(raw, dict):
            msg = f"comment record must be a JSON object, got {type(raw).__name__}"
            raise ValueError(msg)
        return cls(
            id=_string_field(raw, "id"),
            post=_string_field(raw, "post"),
            parent=_string_field(raw, "parent"),
            author=_string_field(raw, "author"),
            body=_string_field(raw, "body"),
            created=_time_field(raw, "created"),
            modified=_time_field(raw, "modified"),
        )


def _string_field(raw: dict[str, Any], name: str) -> str:
    value = raw.get(name) or ""
    if not isinstance(value, str):
        msg = f"comment field '{name}' must be a string"
        raise ValueError(msg)
    return value


def _time_field(raw: dict[str, Any], name: str) -> datetime | None:
    value = raw.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"comment field '{name}' must be an RFC 3339 timestamp"
        raise ValueError(msg)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        msg = f"comment field '{name}' must carry a UTC offset"
        raise ValueError(msg)
    return parsed


def new_comment_id() -> str:
    """Default ID allocation: a random UUID."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


# ==============================================================================
# Key layout
# ==============================================================================


def record_key(post: str, comment: str) -> str:
    return f"posts/{post}/comments/{comment}/{RECORD_NAME}"


def links_prefix(post: str, parent: str) -> str:
    """Namespace holding one link per reply of ``parent`` (or top level)."""
    return f"posts/{post}/comments/{parent or TOPLEVEL}/comments/"


def link_key(post: str, parent: str, comment: str) -> str:
    return links_prefix(post, parent) + comment


def comment_id_from_link(key: str) -> str:
    """The child ID is the last component of a link key."""
    return key.rsplit("/", 1)[-1]
