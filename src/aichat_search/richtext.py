"""Flatten message payloads into plain text.

A bubble carries either direct text or a serialized rich document: a JSON
tree of the form ``{"root": {"children": [...]}}`` where text nodes hold
``{"type": "text", "text": ...}`` and any other node may hold ``children``.
"""

import json
import logging
from typing import Optional, Union

from .core import Bubble, Container, Leaf

logger = logging.getLogger(__name__)

MAX_DEPTH = 64

Node = Union[Leaf, Container]


def parse_rich_document(raw: str) -> Optional[Container]:
    """Parse a serialized rich document, or return None if it is malformed."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        logger.debug("Unparseable rich text: %s", e)
        return None

    root = data.get("root") if isinstance(data, dict) else None
    if not isinstance(root, dict) or not isinstance(root.get("children"), list):
        return None
    return Container(children=_convert_children(root["children"], 1))


def _convert_children(raw_children: list, depth: int) -> list[Node]:
    nodes: list[Node] = []
    if depth > MAX_DEPTH:
        return nodes
    for child in raw_children:
        if not isinstance(child, dict):
            continue
        if child.get("type") == "text" and isinstance(child.get("text"), str) and child["text"]:
            nodes.append(Leaf(child["text"]))
        elif isinstance(child.get("children"), list):
            nodes.append(Container(children=_convert_children(child["children"], depth + 1)))
    return nodes


def extract_text(node: Node) -> str:
    """Concatenate leaf text in document order."""
    if isinstance(node, Leaf):
        return node.text
    return "".join(extract_text(child) for child in node.children)


def bubble_text(bubble: Bubble) -> str:
    """Return the searchable text of a bubble; never raises."""
    if bubble.text and bubble.text.strip():
        return bubble.text
    if not bubble.rich_text:
        return ""
    document = parse_rich_document(bubble.rich_text)
    if document is None:
        return ""
    return extract_text(document)
