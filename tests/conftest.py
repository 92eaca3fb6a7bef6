"""Shared test fixtures for aichat-search."""

import json
import sqlite3
from datetime import datetime, timezone

import pytest


def _ms(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


T_LEGACY_SHARED = _ms(2025, 1, 2, 9, 0, 0)
T_GLOBAL_TAB = _ms(2025, 1, 10, 8, 0, 0)
T_SCHEDULER_TAB = _ms(2025, 1, 12, 16, 30, 0)
T_DARK_MODE = _ms(2025, 1, 14, 11, 0, 0)
T_STYLING = _ms(2025, 1, 16, 10, 0, 0)
T_REFACTOR = _ms(2025, 1, 20, 10, 0, 0)
T_SHARED = _ms(2025, 1, 22, 15, 0, 0)
T_ORPHAN = _ms(2025, 1, 25, 12, 0, 0)

SCHEDULER_TEXT = (
    "Looking at the logs from last night's deploy, the root cause turned out to be "
    "the race condition in the scheduler which fires two ticks whenever the clock "
    "drifts; we should guard the tick handler with a lock and add a regression test."
)


def rich_text(*paragraphs: str) -> str:
    """Serialize paragraphs as a rich document."""
    return json.dumps({
        "root": {
            "type": "root",
            "children": [
                {"type": "paragraph", "children": [{"type": "text", "text": p}]}
                for p in paragraphs
            ],
        }
    })


@pytest.fixture
def make_store():
    """Return a factory that writes a store database with the given rows."""

    def _make(db_path, items=None, kv=None):
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
        conn.execute("CREATE TABLE cursorDiskKV (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
        for key, value in (items or {}).items():
            if not isinstance(value, str):
                value = json.dumps(value)
            conn.execute("INSERT INTO ItemTable VALUES (?, ?)", (key, value))
        for key, value in (kv or {}).items():
            if not isinstance(value, str):
                value = json.dumps(value)
            conn.execute("INSERT INTO cursorDiskKV VALUES (?, ?)", (key, value))
        conn.commit()
        conn.close()
        return db_path

    return _make


@pytest.fixture
def make_workspace(make_store):
    """Return a factory that creates a workspace directory.

    ``descriptor`` may be a dict (written as JSON), a raw string, or None to
    omit workspace.json entirely. ``items`` creates a legacy store.
    """

    def _make(root, ws_id, descriptor=None, items=None):
        ws_dir = root / ws_id
        ws_dir.mkdir(parents=True, exist_ok=True)
        if descriptor is not None:
            content = descriptor if isinstance(descriptor, str) else json.dumps(descriptor)
            (ws_dir / "workspace.json").write_text(content, encoding="utf-8")
        if items is not None:
            make_store(ws_dir / "state.vscdb", items=items)
        return ws_dir

    return _make


@pytest.fixture
def storage_root(tmp_path):
    """An empty workspaceStorage directory with a sibling globalStorage."""
    root = tmp_path / "User" / "workspaceStorage"
    root.mkdir(parents=True)
    (tmp_path / "User" / "globalStorage").mkdir()
    return root


@pytest.fixture
def global_db(storage_root):
    return storage_root.parent / "globalStorage" / "state.vscdb"


@pytest.fixture
def cursor_storage(storage_root, global_db, make_store, make_workspace):
    """A realistic Cursor layout with unified and legacy stores.

    Workspaces:
    - a1-auth: /Users/testuser/dev/auth-service, legacy copy of comp-shared-001
    - b2-web: /Users/testuser/dev/webapp, ask tab about the scheduler and a
      legacy composer
    - c3-broken: malformed workspace.json, no store
    - d4-nodesc: store but no workspace.json (not a workspace)

    Unified store:
    - comp-refactor-001: resolved to a1-auth through its project layout
    - comp-web-002: resolved to b2-web through a newly created file
    - comp-shared-001: resolved to a1-auth through code block data
    - comp-orphan-001: unresolvable
    - one tiny row, one corrupt row, one corrupt bubble
    - a global ask tab
    """
    make_workspace(
        storage_root, "a1-auth",
        descriptor={"folder": "file:///Users/testuser/dev/auth-service"},
        items={
            "composer.composerData": {
                "allComposers": [
                    {
                        "composerId": "comp-shared-001",
                        "name": "Shared session",
                        "createdAt": T_LEGACY_SHARED,
                        "conversation": [{"text": "old copy of the shared session"}],
                    },
                ],
            },
        },
    )
    make_workspace(
        storage_root, "b2-web",
        descriptor={"folder": "file:///Users/testuser/dev/webapp"},
        items={
            "workbench.panel.aichat.view.aichat.chatdata": {
                "tabs": [
                    {
                        "tabId": "tab-sched-001",
                        "chatTitle": "Background jobs",
                        "lastSendTime": T_SCHEDULER_TAB,
                        "bubbles": [
                            {"type": "user", "text": "Why do jobs run twice?"},
                            {"type": "ai", "text": SCHEDULER_TEXT},
                            {"type": "user", "text": "Is the scheduler thread-safe otherwise?"},
                        ],
                    },
                ],
            },
            "composer.composerData": {
                "allComposers": [
                    {
                        "composerId": "legacy-comp-001",
                        "name": "Add dark mode",
                        "createdAt": T_DARK_MODE - 3_600_000,
                        "lastUpdatedAt": T_DARK_MODE,
                        "conversation": [
                            {"type": 1, "text": "Add a toggle in the settings page"},
                            {"type": 2, "text": "Added ThemeToggle component"},
                        ],
                    },
                ],
            },
        },
    )
    make_workspace(storage_root, "c3-broken", descriptor="{not json")
    make_workspace(
        storage_root, "d4-nodesc",
        items={"workbench.panel.aichat.view.aichat.chatdata": {"tabs": [
            {"tabId": "tab-hidden", "chatTitle": "Refactor hidden", "bubbles": []},
        ]}},
    )

    make_store(
        global_db,
        items={
            "workbench.panel.aichat.view.aichat.chatdata": {
                "tabs": [
                    {
                        "tabId": "global-tab-001",
                        "chatTitle": "Python basics",
                        "lastSendTime": T_GLOBAL_TAB,
                        "bubbles": [{"type": "user", "text": "What is a refactor in Python?"}],
                    },
                ],
            },
        },
        kv={
            "composerData:comp-refactor-001": {
                "name": "Refactor auth module",
                "createdAt": T_REFACTOR - 600_000,
                "lastUpdatedAt": T_REFACTOR,
                "fullConversationHeadersOnly": [
                    {"bubbleId": "b-001", "type": 1},
                    {"bubbleId": "b-002", "type": 2},
                ],
            },
            "messageRequestContext:comp-refactor-001:req-1": {
                "projectLayouts": [
                    json.dumps({"rootPath": "/Users/testuser/dev/auth-service", "children": []}),
                    "{broken layout",
                ],
            },
            "bubbleId:comp-refactor-001:b-001": {
                "type": 1,
                "text": "Split the token validation out of the middleware",
            },
            "bubbleId:comp-refactor-001:b-002": {
                "type": 2,
                "text": "",
                "richText": rich_text("Done. Extracted validateToken into its own module."),
            },
            "composerData:comp-web-002": {
                "name": "Styling pass",
                "createdAt": T_STYLING,
                "fullConversationHeadersOnly": [{"bubbleId": "b-101"}],
                "newlyCreatedFiles": [
                    {"uri": {"path": "/Users/testuser/dev/webapp/src/theme.css"}},
                ],
            },
            "bubbleId:comp-web-002:b-101": {
                "text": "   ",
                "richText": rich_text("Switch the palette to ", "use CSS variables"),
            },
            "composerData:comp-shared-001": {
                "name": "Shared session",
                "lastUpdatedAt": T_SHARED,
                "codeBlockData": {
                    "file:///Users/testuser/dev/auth-service/src/session.ts": {},
                },
            },
            "composerData:comp-orphan-001": {
                "name": "Refactor orphaned notes",
                "lastUpdatedAt": T_ORPHAN,
            },
            "composerData:tiny": "{}",
            "composerData:comp-corrupt": "{this is definitely not json",
            "bubbleId:comp-corrupt:b-bad": "not json either",
        },
    )

    return storage_root
