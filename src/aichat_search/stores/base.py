"""Shared plumbing for conversation store readers.

Every reader opens its SQLite file read-only, turns raw rows into the
normalized Conversation/Bubble shape and always releases the connection
before returning.
"""

import json
import logging
import sqlite3
import time
from abc import ABC, abstractmethod
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..config import ITEM_TABLE, KV_TABLE
from ..core import Bubble, Conversation, Scope
from ..errors import RecordParseError, StoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class StoreHit:
    """A conversation together with the workspace it belongs to."""

    conversation: Conversation
    workspace_id: str
    workspace_folder: Optional[str] = None


class StoreReader(ABC):
    """Base class for store adapters; ``kind`` tags the on-disk schema."""

    kind: str  # "unified" | "legacy"

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def read(self, scope: Scope) -> list[StoreHit]:
        """Return every conversation in this store that the scope covers.

        Raises StoreUnavailableError if the file cannot be opened and lets
        sqlite3.Error through if it turns out not to be a usable database.
        """
        conn = open_store(self.db_path)
        with closing(conn):
            return self._read(conn, scope)

    @abstractmethod
    def _read(self, conn: sqlite3.Connection, scope: Scope) -> list[StoreHit]:
        ...


def open_store(db_path: Path) -> sqlite3.Connection:
    """Open a store database read-only."""
    db_path = Path(db_path)
    if not db_path.is_file():
        raise StoreUnavailableError(db_path, "file not found")
    try:
        return sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as e:
        raise StoreUnavailableError(db_path, str(e)) from e


def fetch_item(conn: sqlite3.Connection, key: str) -> Optional[Any]:
    """Read a single key from the ItemTable."""
    cur = conn.execute(f"SELECT value FROM {ITEM_TABLE} WHERE key = ?", (key,))
    row = cur.fetchone()
    return row[0] if row else None


def fetch_prefixed(conn: sqlite3.Connection, prefix: str, min_length: int = 0) -> list[tuple]:
    """Read all (key, value) rows of the key/value table under a key prefix."""
    cur = conn.execute(
        f"SELECT key, value FROM {KV_TABLE} WHERE key LIKE ? AND LENGTH(value) > ?",
        (prefix + "%", min_length),
    )
    return cur.fetchall()


def decode_row(value: Any, label: str) -> Optional[Any]:
    """Decode a stored JSON value, or log and return None."""
    try:
        return _decode(value, label)
    except RecordParseError as e:
        logger.warning("%s; skipping", e)
        return None


def _decode(value: Any, label: str) -> Any:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        raise RecordParseError(label, f"unexpected value type {type(value).__name__}")
    try:
        return json.loads(value)
    except (json.JSONDecodeError, RecursionError) as e:
        raise RecordParseError(label, str(e)) from e


def uri_path(obj: Any) -> Optional[str]:
    """Return obj["uri"]["path"] when present."""
    if not isinstance(obj, dict):
        return None
    uri = obj.get("uri")
    if isinstance(uri, dict) and isinstance(uri.get("path"), str):
        return uri["path"]
    return None


def bubble_from_dict(bubble_id: str, data: dict) -> Bubble:
    """Normalize a raw bubble/message payload."""
    text = data.get("text")
    rich_text = data.get("richText")
    relevant = data.get("relevantFiles")
    context = data.get("context")

    selections = []
    if isinstance(context, dict) and isinstance(context.get("fileSelections"), list):
        selections = [p for p in map(uri_path, context["fileSelections"]) if p]

    return Bubble(
        id=bubble_id,
        text=text if isinstance(text, str) else "",
        rich_text=rich_text if isinstance(rich_text, str) else None,
        relevant_files=[f for f in relevant if isinstance(f, str) and f] if isinstance(relevant, list) else [],
        selection_paths=selections,
    )


def text_field(data: dict, name: str) -> str:
    """Return a string field, or "" if it is missing or not a string."""
    value = data.get(name)
    return value if isinstance(value, str) else ""


def now_ms() -> int:
    return int(time.time() * 1000)
