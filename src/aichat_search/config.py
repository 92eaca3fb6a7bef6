"""Platform-aware path resolution and store layout constants."""

import os
import sys
from pathlib import Path

WORKSPACE_PATH_ENV = "AICHAT_SEARCH_WORKSPACE_PATH"

# Store layout
STORE_FILENAME = "state.vscdb"
WORKSPACE_DESCRIPTOR = "workspace.json"
ITEM_TABLE = "ItemTable"
KV_TABLE = "cursorDiskKV"

ASK_TABS_KEY = "workbench.panel.aichat.view.aichat.chatdata"
LEGACY_COMPOSER_KEY = "composer.composerData"
BUBBLE_PREFIX = "bubbleId:"
CONTEXT_PREFIX = "messageRequestContext:"
COMPOSER_PREFIX = "composerData:"
MIN_COMPOSER_VALUE_LENGTH = 10

GLOBAL_WORKSPACE_ID = "global"

# Snippets
SNIPPET_BEFORE = 50
SNIPPET_AFTER = 100
ELLIPSIS = "..."


def get_workspace_storage_path() -> Path:
    """Return the path to Cursor's workspaceStorage directory."""
    env = os.environ.get(WORKSPACE_PATH_ENV)
    if env:
        return Path(env)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Cursor" / "User" / "workspaceStorage"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "Cursor" / "User" / "workspaceStorage"
    else:  # Linux
        return Path.home() / ".config" / "Cursor" / "User" / "workspaceStorage"


def get_global_store_path(workspace_root: Path) -> Path:
    """Return the unified store that sits alongside workspaceStorage."""
    return Path(workspace_root).parent / "globalStorage" / STORE_FILENAME
