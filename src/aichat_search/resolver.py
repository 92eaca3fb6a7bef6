"""Attribute unified-store conversations to an owning workspace.

Resolution runs a fixed chain of heuristics over the same inputs. Each
stage is a plain function returning a workspace id or None, and the first
stage that answers wins.
"""

import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .core import Bubble, Conversation, WorkspaceEntry, strip_file_scheme
from .workspaces import folder_basename

logger = logging.getLogger(__name__)


@dataclass
class ResolverInputs:
    conversation: Conversation
    composer_id: str
    layouts_by_composer_id: dict[str, list[str]] = field(default_factory=dict)
    folder_index: dict[str, str] = field(default_factory=dict)
    workspace_entries: list[WorkspaceEntry] = field(default_factory=list)
    bubble_by_id: dict[str, Bubble] = field(default_factory=dict)


def match_workspace(path: str, entries: list[WorkspaceEntry]) -> Optional[str]:
    """Return the first workspace whose folder is a prefix of path."""
    if not path:
        return None
    normalized = urllib.parse.unquote(strip_file_scheme(path))
    for entry in entries:
        folder_path = entry.folder_path
        if folder_path and normalized.startswith(folder_path):
            return entry.id
    return None


def _first_match(paths: Iterable[str], entries: list[WorkspaceEntry]) -> Optional[str]:
    for path in paths:
        workspace_id = match_workspace(path, entries)
        if workspace_id:
            return workspace_id
    return None


def from_project_layouts(inputs: ResolverInputs) -> Optional[str]:
    for root_path in inputs.layouts_by_composer_id.get(inputs.composer_id, []):
        workspace_id = inputs.folder_index.get(folder_basename(root_path))
        if workspace_id:
            return workspace_id
    return None


def from_new_files(inputs: ResolverInputs) -> Optional[str]:
    return _first_match(inputs.conversation.newly_created_files, inputs.workspace_entries)


def from_code_blocks(inputs: ResolverInputs) -> Optional[str]:
    return _first_match(inputs.conversation.code_block_paths, inputs.workspace_entries)


def from_bubble_references(inputs: ResolverInputs) -> Optional[str]:
    for bubble_id in inputs.conversation.bubble_ids:
        bubble = inputs.bubble_by_id.get(bubble_id)
        if bubble is None:
            continue
        workspace_id = _first_match(
            bubble.relevant_files + bubble.selection_paths, inputs.workspace_entries
        )
        if workspace_id:
            return workspace_id
    return None


STAGES: list[Callable[[ResolverInputs], Optional[str]]] = [
    from_project_layouts,
    from_new_files,
    from_code_blocks,
    from_bubble_references,
]


def resolve(
    conversation: Conversation,
    composer_id: str,
    layouts_by_composer_id: dict[str, list[str]],
    folder_index: dict[str, str],
    workspace_entries: list[WorkspaceEntry],
    bubble_by_id: dict[str, Bubble],
) -> Optional[str]:
    """Return the owning workspace id of a conversation, or None."""
    inputs = ResolverInputs(
        conversation=conversation,
        composer_id=composer_id,
        layouts_by_composer_id=layouts_by_composer_id,
        folder_index=folder_index,
        workspace_entries=workspace_entries,
        bubble_by_id=bubble_by_id,
    )
    for stage in STAGES:
        workspace_id = stage(inputs)
        if workspace_id:
            logger.debug("Resolved %s to %s via %s", composer_id, workspace_id, stage.__name__)
            return workspace_id
    return None
