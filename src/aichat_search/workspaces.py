"""Workspace directory scanning."""

import json
import logging
import urllib.parse
from pathlib import Path

from .config import WORKSPACE_DESCRIPTOR
from .core import WorkspaceEntry, strip_file_scheme

logger = logging.getLogger(__name__)


def scan_workspaces(root: Path) -> list[WorkspaceEntry]:
    """List workspace directories under root that carry a descriptor.

    Entries are returned in directory-name order. A descriptor that cannot
    be read still yields an entry, with an empty folder.
    """
    root = Path(root)
    if not root.is_dir():
        logger.warning("Workspace root %s does not exist", root)
        return []

    entries = []
    for ws_dir in sorted(root.iterdir(), key=lambda p: p.name):
        if not ws_dir.is_dir():
            continue
        descriptor = ws_dir / WORKSPACE_DESCRIPTOR
        if not descriptor.is_file():
            continue
        entries.append(WorkspaceEntry(id=ws_dir.name, folder=_read_folder(descriptor)))
    return entries


def _read_folder(descriptor: Path) -> str:
    try:
        data = json.loads(descriptor.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError, RecursionError) as e:
        logger.warning("Failed to read %s: %s", descriptor, e)
        return ""
    if not isinstance(data, dict):
        return ""
    folder = data.get("folder")
    return folder if isinstance(folder, str) else ""


def folder_basename(folder: str) -> str:
    """Last path segment of a folder URI or path."""
    path = urllib.parse.unquote(strip_file_scheme(folder)).rstrip("/\\")
    return path.replace("\\", "/").split("/")[-1]


def build_folder_index(entries: list[WorkspaceEntry]) -> dict[str, str]:
    """Map each known folder's basename to its workspace id."""
    index = {}
    for entry in entries:
        if not entry.folder:
            continue
        name = folder_basename(entry.folder)
        if name:
            index[name] = entry.id
    return index
