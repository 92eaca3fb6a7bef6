"""Reader for the unified global store.

The unified store (``globalStorage/state.vscdb``) keeps every workspace's
agent conversations in one ``cursorDiskKV`` table under composite keys:

- ``bubbleId:<composerId>:<bubbleId>``: one message
- ``messageRequestContext:<composerId>:<requestId>``: request context,
  including serialized project layouts
- ``composerData:<composerId>``: conversation metadata and bubble order

Agent conversations carry no workspace id, so each one is attributed
through the resolver. Ask tabs live under a single ItemTable key and are
reported against the ``global`` pseudo-workspace.
"""

import logging
import sqlite3
from pathlib import Path

from ..config import (
    ASK_TABS_KEY,
    BUBBLE_PREFIX,
    COMPOSER_PREFIX,
    CONTEXT_PREFIX,
    GLOBAL_WORKSPACE_ID,
    MIN_COMPOSER_VALUE_LENGTH,
)
from ..core import Bubble, Conversation, Scope, WorkspaceEntry
from ..resolver import resolve
from .base import (
    StoreHit,
    StoreReader,
    bubble_from_dict,
    decode_row,
    fetch_item,
    fetch_prefixed,
    now_ms,
    text_field,
    uri_path,
)
from .legacy import ask_tabs_from_document

logger = logging.getLogger(__name__)


class UnifiedStoreReader(StoreReader):
    """Reads the cross-workspace key/value store."""

    kind = "unified"

    def __init__(
        self,
        db_path: Path,
        workspace_entries: list[WorkspaceEntry],
        folder_index: dict[str, str],
    ):
        super().__init__(db_path)
        self.workspace_entries = workspace_entries
        self.folder_index = folder_index
        self._folders = {e.id: e.folder for e in workspace_entries}

    def _read(self, conn: sqlite3.Connection, scope: Scope) -> list[StoreHit]:
        hits = []
        if scope.includes("agent"):
            hits.extend(self._read_agent_conversations(conn))
        if scope.includes("ask"):
            hits.extend(self._read_ask_tabs(conn))
        return hits

    def _read_agent_conversations(self, conn: sqlite3.Connection) -> list[StoreHit]:
        bubbles = read_bubbles(conn)
        layouts = read_project_layouts(conn)

        hits = []
        unresolved = 0
        for key, value in fetch_prefixed(conn, COMPOSER_PREFIX, MIN_COMPOSER_VALUE_LENGTH):
            composer_id = key.split(":")[1]
            if not composer_id:
                continue
            data = decode_row(value, key)
            if not isinstance(data, dict):
                continue

            conversation = conversation_from_composer_data(composer_id, data)
            conversation.bubbles = [bubbles[b] for b in conversation.bubble_ids if b in bubbles]

            workspace_id = resolve(
                conversation,
                composer_id,
                layouts,
                self.folder_index,
                self.workspace_entries,
                bubbles,
            )
            if workspace_id is None:
                unresolved += 1
                logger.debug("No workspace found for conversation %s", composer_id)
                continue

            hits.append(StoreHit(
                conversation=conversation,
                workspace_id=workspace_id,
                workspace_folder=self._folders.get(workspace_id) or None,
            ))

        if unresolved:
            logger.info("Skipped %d conversations with no owning workspace", unresolved)
        return hits

    def _read_ask_tabs(self, conn: sqlite3.Connection) -> list[StoreHit]:
        raw = fetch_item(conn, ASK_TABS_KEY)
        if raw is None:
            return []
        document = decode_row(raw, f"{self.db_path}:{ASK_TABS_KEY}")
        return [
            StoreHit(conversation=c, workspace_id=GLOBAL_WORKSPACE_ID)
            for c in ask_tabs_from_document(document)
        ]


def read_bubbles(conn: sqlite3.Connection) -> dict[str, Bubble]:
    """Build the bubble map from ``bubbleId:`` rows."""
    bubbles = {}
    for key, value in fetch_prefixed(conn, BUBBLE_PREFIX):
        parts = key.split(":")
        if len(parts) < 3:
            continue
        data = decode_row(value, key)
        if isinstance(data, dict):
            bubbles[parts[2]] = bubble_from_dict(parts[2], data)
    return bubbles


def read_project_layouts(conn: sqlite3.Connection) -> dict[str, list[str]]:
    """Collect project layout root paths per composer id."""
    layouts: dict[str, list[str]] = {}
    for key, value in fetch_prefixed(conn, CONTEXT_PREFIX):
        parts = key.split(":")
        if len(parts) < 2:
            continue
        context = decode_row(value, key)
        if not isinstance(context, dict) or not isinstance(context.get("projectLayouts"), list):
            continue

        roots = layouts.setdefault(parts[1], [])
        for layout in context["projectLayouts"]:
            if not isinstance(layout, str):
                continue
            # Each layout is itself serialized JSON
            descriptor = decode_row(layout, f"{key} projectLayout")
            if isinstance(descriptor, dict) and isinstance(descriptor.get("rootPath"), str):
                roots.append(descriptor["rootPath"])
    return layouts


def conversation_from_composer_data(composer_id: str, data: dict) -> Conversation:
    """Normalize a ``composerData:`` record."""
    headers = data.get("fullConversationHeadersOnly")
    bubble_ids = []
    if isinstance(headers, list):
        bubble_ids = [
            h["bubbleId"] for h in headers
            if isinstance(h, dict) and isinstance(h.get("bubbleId"), str)
        ]

    new_files = data.get("newlyCreatedFiles")
    code_blocks = data.get("codeBlockData")

    return Conversation(
        id=composer_id,
        title=text_field(data, "name") or f"Conversation {composer_id[:8]}",
        timestamp=data.get("lastUpdatedAt") or data.get("createdAt") or now_ms(),
        kind="agent",
        bubble_ids=bubble_ids,
        newly_created_files=[p for p in map(uri_path, new_files) if p] if isinstance(new_files, list) else [],
        code_block_paths=list(code_blocks) if isinstance(code_blocks, dict) else [],
    )
