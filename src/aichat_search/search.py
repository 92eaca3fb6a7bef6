"""Search conversations across the unified and legacy stores.

A search runs sequentially: scan the workspace directories, read the
unified store, then each workspace's legacy store, matching every
conversation against the query as it goes. A store that cannot be read
contributes nothing; the rest of the scan proceeds.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .config import ELLIPSIS, SNIPPET_AFTER, SNIPPET_BEFORE, get_workspace_storage_path
from .core import Conversation, Scope, SearchResult
from .errors import MissingQueryError, StoreUnavailableError
from .ranking import rank
from .richtext import bubble_text
from .stores import get_store_readers
from .workspaces import build_folder_index, scan_workspaces

logger = logging.getLogger(__name__)


def make_snippet(text: str, match_index: int, query_len: int) -> str:
    """Cut a window of text around a match, marking truncated edges."""
    start = max(0, match_index - SNIPPET_BEFORE)
    end = min(len(text), match_index + query_len + SNIPPET_AFTER)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(text) else ""
    return prefix + text[start:end] + suffix


def match_conversation(conversation: Conversation, query_lower: str, query_len: int) -> Optional[str]:
    """Return the matching text for a conversation, or None if it does not match.

    A title hit yields the whole title. Otherwise the first bubble
    containing the query yields a snippet, and later bubbles are ignored.
    """
    if query_lower in conversation.title.lower():
        return conversation.title

    for bubble in conversation.bubbles:
        text = bubble_text(bubble)
        index = text.lower().find(query_lower)
        if index != -1:
            return make_snippet(text, index, query_len)
    return None


def search(
    query: Optional[str],
    scope: Union[Scope, str] = Scope.ALL,
    workspace_root: Optional[Path] = None,
) -> list[SearchResult]:
    """Search every store for conversations containing query.

    Raises MissingQueryError if query is empty; no store is opened then.
    Results are deduplicated by chat id and ordered newest first.
    """
    if not query:
        raise MissingQueryError()

    scope = Scope(scope)
    root = Path(workspace_root) if workspace_root is not None else get_workspace_storage_path()
    query_lower = query.lower()

    entries = scan_workspaces(root)
    folder_index = build_folder_index(entries)

    results: list[SearchResult] = []
    for reader in get_store_readers(root, entries, folder_index):
        try:
            hits = reader.read(scope)
        except StoreUnavailableError as e:
            logger.debug("%s", e)
            continue
        except sqlite3.Error as e:
            logger.warning("Failed to read %s store %s: %s", reader.kind, reader.db_path, e)
            continue

        for hit in hits:
            matching_text = match_conversation(hit.conversation, query_lower, len(query))
            if matching_text is None:
                continue
            results.append(SearchResult(
                workspace_id=hit.workspace_id,
                workspace_folder=hit.workspace_folder,
                chat_id=hit.conversation.id,
                chat_title=hit.conversation.title,
                timestamp=hit.conversation.timestamp,
                matching_text=matching_text,
                kind=hit.conversation.kind,
            ))

    ranked = rank(results)
    logger.info(
        "Search %r (%s): %d matches, %d after dedup across %d workspaces",
        query, scope.value, len(results), len(ranked), len(entries),
    )
    return ranked
