"""
Board controller: owns one forest plus the active-node selection and exposes the commands
the front end calls. Every command that changes completion state or tree shape ends with a
full re-layout, so the returned view state never carries stale positions.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from layout import layout_forest
from tasks.node import Forest, TodoNode, random_branch_color
from tasks.progress import has_incomplete_children, recompute_progress, set_complete_state
from tasks.serialize import deserialize_forest, serialize_forest

DEFAULT_ROOT_TITLE = "New Task"
DEFAULT_CHILD_TITLE = "New Subtask"
STARTER_TITLE = "Make List..."
STARTER_DESCRIPTION = (
    "The first task on your to-do list should always be make list so you have something to check off."
)

DIRECTIONS = ("up", "down", "left", "right")


class ConfirmationRequired(Exception):
    """A command needs explicit user confirmation before it can proceed."""

    def __init__(self, title: str, message: str, button: str):
        super().__init__(message)
        self.title = title
        self.message = message
        self.button = button

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "message": self.message, "button": self.button}


class TodoBoard:
    def __init__(self, layout_options: Optional[Mapping[str, float]] = None):
        self.forest = Forest()
        self.active_id: Optional[str] = None
        self.layout_options: Dict[str, float] = dict(layout_options or {})
        self.last_layout: Optional[Dict[str, Any]] = None

    # -------------------- layout / view --------------------
    def relayout(self) -> Optional[Dict[str, Any]]:
        self.last_layout = layout_forest(self.forest, **self.layout_options)
        return self.last_layout

    def view(self) -> Dict[str, Any]:
        """treeData + layout + selection for the renderer."""
        data = serialize_forest(self.forest, with_state=True)
        return {
            "treeData": data["roots"],
            "layout": self.last_layout,
            "activeNodeId": self.active_id,
        }

    def report_heights(self, heights: Mapping[str, float]) -> Optional[Dict[str, Any]]:
        """Record measured heights from the renderer; unknown ids and non-finite values are ignored."""
        for node_id, height in heights.items():
            node = self.forest.nodes.get(node_id)
            if node is None:
                continue
            if not math.isfinite(height):
                logger.warning("Ignoring non-finite height {} for {}", height, node_id)
                continue
            node.height = height
        return self.relayout()

    # -------------------- lifecycle --------------------
    def create_node(self, title: Optional[str] = None, parent_id: Optional[str] = None,
                    x: float = 0, y: float = 0) -> TodoNode:
        """Create a root (parent_id None) or a child. x/y are only the spawn hint before layout."""
        parent = self.forest.get(parent_id) if parent_id else None
        if title is None:
            title = DEFAULT_CHILD_TITLE if parent else DEFAULT_ROOT_TITLE
        node = TodoNode(title=title, color=parent.color if parent else random_branch_color(), x=x, y=y)
        if parent:
            node.x, node.y = parent.x, parent.y
        self.forest.add(node, parent.id if parent else None)
        recompute_progress(self.forest, node)
        if parent:
            parent.is_expanded = True
        self.relayout()
        self.active_id = node.id
        return node

    def is_pristine(self, node: TodoNode) -> bool:
        """Untouched nodes can be deleted without a prompt."""
        default_title = node.title in (DEFAULT_ROOT_TITLE, DEFAULT_CHILD_TITLE) or not node.title.strip()
        return default_title and not node.description.strip() and not node.links and not node.children

    def remove_node(self, node_id: str, confirm: bool = False) -> None:
        node = self.forest.get(node_id)
        if not confirm and not self.is_pristine(node):
            raise ConfirmationRequired(
                "Delete Task",
                "Are you sure you want to delete this task? This will also delete all of its subtasks.",
                "Yes, Delete",
            )
        removed = set(self.forest.subtree_ids(node))
        parent = self.forest.remove(node_id)
        logger.debug("Removed {} ({} nodes)", node_id, len(removed))
        if self.active_id in removed:
            if parent is not None:
                self.active_id = parent.id
            else:
                self.active_id = self.forest.roots[0] if self.forest.roots else None
        if parent is not None:
            recompute_progress(self.forest, parent)
        self.relayout()

    def spawn_default_task(self) -> TodoNode:
        node = TodoNode(title=STARTER_TITLE, description=STARTER_DESCRIPTION)
        self.forest.add(node)
        recompute_progress(self.forest, node)
        self.relayout()
        self.active_id = node.id
        return node

    def clear(self) -> TodoNode:
        """Wipe the board and seed the starter task."""
        self.forest.clear()
        self.active_id = None
        return self.spawn_default_task()

    # -------------------- completion / expansion --------------------
    def set_completed(self, node_id: str, completed: bool, confirm: bool = False) -> List[Any]:
        """
        Checking a node with incomplete children completes the whole subtree and needs confirm.
        Returns the progress updates, (id, progress, is_completed), in cascade order.
        """
        node = self.forest.get(node_id)
        if completed and has_incomplete_children(self.forest, node):
            if not confirm:
                raise ConfirmationRequired(
                    "Complete All Subtasks?",
                    "Marking this parent task as complete will automatically complete all of its subtasks.",
                    "Yes, Complete All",
                )
            updates = set_complete_state(self.forest, node, True, recursive=True)
        else:
            updates = set_complete_state(self.forest, node, completed)
        self.relayout()
        return updates

    def set_expanded(self, node_id: str, expanded: bool) -> None:
        node = self.forest.get(node_id)
        node.is_expanded = expanded
        self.relayout()

    def toggle_expanded(self, node_id: str) -> bool:
        node = self.forest.get(node_id)
        self.set_expanded(node_id, not node.is_expanded)
        return node.is_expanded

    # -------------------- content edits --------------------
    def set_title(self, node_id: str, title: str) -> None:
        node = self.forest.get(node_id)
        node.title = title if title.strip() else ""
        self.relayout()

    def set_description(self, node_id: str, description: str) -> None:
        node = self.forest.get(node_id)
        node.description = description if description.strip() else ""
        self.relayout()

    def set_due_date(self, node_id: str, due_date: Optional[str]) -> None:
        self.forest.get(node_id).due_date = due_date or ""
        self.relayout()

    def add_link(self, node_id: str, url: str, text: str = "") -> Dict[str, str]:
        node = self.forest.get(node_id)
        if not url:
            raise ValueError("url must be a non-empty string")
        valid_url = url if url.startswith("http") else f"https://{url}"
        display = text.strip() or valid_url.split("://", 1)[-1]
        link = {"url": valid_url, "text": display}
        node.links.append(link)
        self.relayout()
        return link

    def remove_link(self, node_id: str, index: int) -> None:
        node = self.forest.get(node_id)
        if index < 0 or index >= len(node.links):
            raise IndexError(f"No link #{index} on node {node_id}")
        node.links.pop(index)
        self.relayout()

    # -------------------- selection --------------------
    def set_active(self, node_id: Optional[str]) -> Optional[TodoNode]:
        if node_id is None:
            self.active_id = None
            return None
        node = self.forest.get(node_id)
        self.active_id = node.id
        return node

    def active_node(self) -> Optional[TodoNode]:
        if self.active_id is None:
            return None
        return self.forest.nodes.get(self.active_id)

    def navigate(self, direction: str) -> Optional[TodoNode]:
        """Arrow-key movement. right expands a collapsed node before entering it."""
        if direction not in DIRECTIONS:
            raise ValueError(f"Invalid direction: {direction}")
        active = self.active_node()
        if active is None:
            if self.forest.roots:
                return self.set_active(self.forest.roots[0])
            return None

        siblings = self.forest.siblings_of(active)
        index = siblings.index(active.id)
        if direction == "right" and active.children:
            if not active.is_expanded:
                self.set_expanded(active.id, True)
            return self.set_active(active.children[0])
        if direction == "left" and active.parent_id is not None:
            return self.set_active(active.parent_id)
        if direction == "up" and index > 0:
            return self.set_active(siblings[index - 1])
        if direction == "down" and index < len(siblings) - 1:
            return self.set_active(siblings[index + 1])
        return active

    def focus_target(self) -> Optional[TodoNode]:
        """First incomplete node depth-first, else the first root. Selects and returns it."""
        if not self.forest.roots:
            return None
        target = next((n for n in self.forest.walk() if not n.is_completed), None)
        return self.set_active(target.id if target else self.forest.roots[0])

    # -------------------- persistence --------------------
    def to_dict(self) -> Dict[str, Any]:
        return serialize_forest(self.forest)

    def load(self, data: Any) -> None:
        """Replace the forest from persisted data; nothing usable seeds the starter task."""
        self.forest.clear()
        self.active_id = None
        deserialize_forest(data, self.forest)
        if not self.forest.roots:
            self.spawn_default_task()
            return
        self.relayout()

    @classmethod
    def from_dict(cls, data: Any, layout_options: Optional[Mapping[str, float]] = None) -> "TodoBoard":
        board = cls(layout_options)
        board.load(data)
        return board
