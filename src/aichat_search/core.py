"""Core data models for aichat-search."""

import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

Timestamp = Union[int, float, str]


class Scope(str, Enum):
    """Which conversation sources a search covers."""

    ALL = "all"
    ASK = "ask"
    AGENT = "agent"

    def includes(self, kind: str) -> bool:
        return self is Scope.ALL or self.value == kind


@dataclass
class WorkspaceEntry:
    """A workspace directory with a readable or unreadable descriptor."""

    id: str
    folder: str = ""  # raw folder URI, "" if the descriptor was unusable

    @property
    def folder_path(self) -> str:
        """The folder URI without the file scheme, percent-decoded."""
        return urllib.parse.unquote(strip_file_scheme(self.folder))


@dataclass
class Leaf:
    text: str


@dataclass
class Container:
    children: list = field(default_factory=list)  # list[Leaf | Container]


@dataclass
class Bubble:
    """A single message turn."""

    id: str
    text: str = ""
    rich_text: Optional[str] = None  # serialized rich document
    relevant_files: list[str] = field(default_factory=list)
    selection_paths: list[str] = field(default_factory=list)


@dataclass
class Conversation:
    """A normalized conversation from any store."""

    id: str
    title: str
    timestamp: Timestamp
    kind: str  # "ask" | "agent"
    bubble_ids: list[str] = field(default_factory=list)
    bubbles: list[Bubble] = field(default_factory=list)
    newly_created_files: list[str] = field(default_factory=list)
    code_block_paths: list[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """A conversation that matched a query."""

    workspace_id: str
    workspace_folder: Optional[str]
    chat_id: str
    chat_title: str
    timestamp: Timestamp
    matching_text: str
    kind: str

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "workspace_folder": self.workspace_folder,
            "chat_id": self.chat_id,
            "chat_title": self.chat_title,
            "timestamp": self.timestamp,
            "matching_text": self.matching_text,
            "kind": self.kind,
        }


def strip_file_scheme(uri: str) -> str:
    """Drop a leading file:// marker, if any."""
    if uri.startswith("file://"):
        return uri[7:]
    return uri
