"""Reader for legacy per-workspace stores.

Each ``workspaceStorage/<id>/state.vscdb`` keeps that workspace's chats
inline, as two JSON documents in ``ItemTable``:

- ``workbench.panel.aichat.view.aichat.chatdata``: ask tabs with bubbles
- ``composer.composerData``: agent conversations with their messages

Everything here belongs to the enclosing workspace, so no resolution is
needed.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from ..config import ASK_TABS_KEY, LEGACY_COMPOSER_KEY
from ..core import Conversation, Scope, WorkspaceEntry
from .base import StoreHit, StoreReader, bubble_from_dict, decode_row, fetch_item, now_ms, text_field

logger = logging.getLogger(__name__)


class LegacyStoreReader(StoreReader):
    """Reads one workspace's own store."""

    kind = "legacy"

    def __init__(self, entry: WorkspaceEntry, db_path: Path):
        super().__init__(db_path)
        self.entry = entry

    def _read(self, conn: sqlite3.Connection, scope: Scope) -> list[StoreHit]:
        conversations = []
        if scope.includes("ask"):
            conversations.extend(ask_tabs_from_document(self._document(conn, ASK_TABS_KEY)))
        if scope.includes("agent"):
            conversations.extend(composers_from_document(self._document(conn, LEGACY_COMPOSER_KEY)))

        return [
            StoreHit(
                conversation=c,
                workspace_id=self.entry.id,
                workspace_folder=self.entry.folder or None,
            )
            for c in conversations
        ]

    def _document(self, conn: sqlite3.Connection, key: str) -> Any:
        raw = fetch_item(conn, key)
        if raw is None:
            return None
        return decode_row(raw, f"{self.entry.id}:{key}")


def ask_tabs_from_document(document: Any) -> list[Conversation]:
    """Normalize the tabs of an ask-chat document."""
    if not isinstance(document, dict) or not isinstance(document.get("tabs"), list):
        return []

    conversations = []
    for tab in document["tabs"]:
        tab_id = text_field(tab, "tabId") if isinstance(tab, dict) else ""
        if not tab_id:
            logger.debug("Skipping malformed chat tab: %r", tab)
            continue

        bubbles = _inline_bubbles(tab_id, tab.get("bubbles"))
        conversations.append(Conversation(
            id=tab_id,
            title=text_field(tab, "chatTitle") or f"Chat {tab_id[:8]}",
            timestamp=tab.get("lastSendTime") or now_ms(),
            kind="ask",
            bubble_ids=[b.id for b in bubbles],
            bubbles=bubbles,
        ))
    return conversations


def composers_from_document(document: Any) -> list[Conversation]:
    """Normalize the composers of a workspace composer document."""
    if not isinstance(document, dict) or not isinstance(document.get("allComposers"), list):
        return []

    conversations = []
    for composer in document["allComposers"]:
        composer_id = text_field(composer, "composerId") if isinstance(composer, dict) else ""
        if not composer_id:
            logger.debug("Skipping malformed composer entry: %r", composer)
            continue

        bubbles = _inline_bubbles(composer_id, composer.get("conversation"))
        title = (
            text_field(composer, "text")
            or text_field(composer, "name")
            or f"Composer {composer_id[:8]}"
        )
        conversations.append(Conversation(
            id=composer_id,
            title=title,
            timestamp=composer.get("lastUpdatedAt") or composer.get("createdAt") or now_ms(),
            kind="agent",
            bubble_ids=[b.id for b in bubbles],
            bubbles=bubbles,
        ))
    return conversations


def _inline_bubbles(owner_id: str, raw: Any) -> list:
    if not isinstance(raw, list):
        return []
    bubbles = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        bubble_id = text_field(item, "id") or text_field(item, "bubbleId") or f"{owner_id}:{i}"
        bubbles.append(bubble_from_dict(bubble_id, item))
    return bubbles
