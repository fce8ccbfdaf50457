"""
Opaque feed cursors.

A cursor names the last post of the previous page. The token is url-safe
base64 (unpadded) of a small JSON object:

    {"ctx": "<context signature>", "id": <post id>}

`ctx` is a short hash of the listing context (filter, sort, author scope)
the cursor was minted under. Reusing a cursor in another context fails fast
instead of silently continuing from a position in a different ordering.

A bare decimal post id is still accepted as a legacy cursor. It carries no
context, so it is trusted as-is.
"""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from typing import Any

CONTEXT_HASH_CHARS = 16
# posts.id is a bigint.
MAX_POST_ID = 2**63 - 1


class CursorError(ValueError):
    pass


class InvalidCursor(CursorError):
    pass


class CursorMismatch(CursorError):
    pass


class CursorNotFound(CursorError):
    pass


@dataclass(frozen=True)
class Cursor:
    post_id: int
    context: str | None = None

    @property
    def is_legacy(self) -> bool:
        return self.context is None


def context_signature(params: dict[str, Any]) -> str:
    normalized = {k: v for k, v in sorted(params.items()) if v is not None}
    raw = json.dumps(normalized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:CONTEXT_HASH_CHARS]


def encode_cursor(post_id: int, *, context: str) -> str:
    raw = json.dumps({"ctx": context, "id": int(post_id)}, sort_keys=True, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> Cursor:
    raw = (token or "").strip()
    if not raw:
        raise InvalidCursor("Cursor is empty.")

    if raw.isascii() and raw.isdigit():
        post_id = int(raw) if len(raw) <= 19 else 0
        if not 0 < post_id <= MAX_POST_ID:
            raise InvalidCursor("Invalid cursor.")
        return Cursor(post_id=post_id)

    padded = raw + "=" * (-len(raw) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (ValueError, UnicodeError) as exc:
        raise InvalidCursor("Invalid cursor.") from exc

    if not isinstance(data, dict):
        raise InvalidCursor("Invalid cursor.")

    post_id = data.get("id")
    context = data.get("ctx")
    if isinstance(post_id, bool) or not isinstance(post_id, int) or not 0 < post_id <= MAX_POST_ID:
        raise InvalidCursor("Invalid cursor.")
    if not isinstance(context, str) or not context:
        raise InvalidCursor("Invalid cursor.")
    return Cursor(post_id=post_id, context=context)


def ensure_context(cursor: Cursor, expected: str) -> None:
    if cursor.is_legacy:
        return
    if cursor.context != expected:
        raise CursorMismatch("Cursor does not match the current filter or sort. Restart from the first page.")
