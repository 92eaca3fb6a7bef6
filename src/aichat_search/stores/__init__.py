"""Adapters for the unified and legacy conversation stores."""

from pathlib import Path

from ..config import STORE_FILENAME, get_global_store_path
from ..core import WorkspaceEntry
from .base import StoreHit, StoreReader
from .legacy import LegacyStoreReader
from .unified import UnifiedStoreReader

__all__ = ["StoreHit", "StoreReader", "LegacyStoreReader", "UnifiedStoreReader", "get_store_readers"]


def get_store_readers(
    workspace_root: Path,
    entries: list[WorkspaceEntry],
    folder_index: dict[str, str],
) -> list[StoreReader]:
    """Return readers in scan order: unified store first, then each workspace."""
    readers: list[StoreReader] = [
        UnifiedStoreReader(get_global_store_path(workspace_root), entries, folder_index)
    ]
    for entry in entries:
        readers.append(LegacyStoreReader(entry, Path(workspace_root) / entry.id / STORE_FILENAME))
    return readers
