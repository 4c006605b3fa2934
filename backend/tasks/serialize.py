"""
Board serialization.
Persisted per node: title, description, dueDate, links, isCompleted, isExpanded, color, children.
progress / x / y / subtree_extent are derived and rebuilt after load. Missing or malformed
fields fall back to defaults; nothing here raises on bad data.
"""

import time
from typing import Any, Dict, List, Optional

from .node import Forest, TodoNode, random_branch_color
from .progress import recompute_all


def serialize_node(forest: Forest, node: TodoNode, with_state: bool = False) -> Dict[str, Any]:
    """with_state adds id and derived progress for the renderer; never used for storage."""
    data = {
        "title": node.title,
        "description": node.description,
        "dueDate": node.due_date,
        "links": [dict(link) for link in node.links],
        "isCompleted": node.is_completed,
        "isExpanded": node.is_expanded,
        "color": node.color,
        "children": [serialize_node(forest, c, with_state) for c in forest.children_of(node)],
    }
    if with_state:
        data["id"] = node.id
        data["progress"] = node.progress
    return data


def serialize_forest(forest: Forest, timestamp: Optional[int] = None, with_state: bool = False) -> Dict[str, Any]:
    """Top-level document: {timestamp, roots}. Timestamp is epoch millis."""
    return {
        "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
        "roots": [serialize_node(forest, r, with_state) for r in forest.root_nodes()],
    }


def _clean_links(raw: Any) -> List[Dict[str, str]]:
    if not isinstance(raw, list):
        return []
    links = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("url"):
            continue
        url = str(item["url"])
        links.append({"url": url, "text": str(item.get("text") or url)})
    return links


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def deserialize_node(forest: Forest, data: Dict[str, Any], parent: Optional[TodoNode] = None) -> TodoNode:
    """Rebuild one node and its children into forest. A child without a color inherits its parent's."""
    color = data.get("color")
    if not isinstance(color, str) or not color:
        color = parent.color if parent else random_branch_color()
    is_expanded = data.get("isExpanded")
    node = TodoNode(
        title=_text(data.get("title")),
        description=_text(data.get("description")),
        due_date=_text(data.get("dueDate")),
        links=_clean_links(data.get("links")),
        color=color,
        is_completed=bool(data.get("isCompleted") or False),
        is_expanded=is_expanded if isinstance(is_expanded, bool) else True,
    )
    forest.add(node, parent.id if parent else None)
    children = data.get("children")
    if isinstance(children, list):
        for child_data in children:
            if isinstance(child_data, dict):
                deserialize_node(forest, child_data, node)
    return node


def deserialize_forest(data: Any, forest: Optional[Forest] = None) -> Forest:
    """Build a forest from a persisted document; progress is recomputed bottom-up."""
    forest = forest if forest is not None else Forest()
    roots = data.get("roots") if isinstance(data, dict) else None
    if isinstance(roots, list):
        for root_data in roots:
            if isinstance(root_data, dict):
                deserialize_node(forest, root_data)
    recompute_all(forest)
    return forest
