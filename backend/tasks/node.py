"""
Task node entity and the forest arena that owns it.
Children are held as ordered id lists; parent links are ids resolved through the forest.
"""

import random
import string
import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

BRANCH_COLORS = ["#ffadad", "#ffd6a5", "#fdffb6", "#caffbf", "#9bf6ff", "#a0c4ff", "#bdb2ff", "#ffc6ff"]


class NodeNotFound(KeyError):
    """Raised when a node id is not present in the forest."""


def new_node_id() -> str:
    """Opaque id: node_<millis>_<9 random chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"node_{int(time.time() * 1000)}_{suffix}"


def random_branch_color() -> str:
    return random.choice(BRANCH_COLORS)


@dataclass
class TodoNode:
    title: str
    id: str = field(default_factory=new_node_id)
    description: str = ""
    due_date: str = ""
    links: List[Dict[str, str]] = field(default_factory=list)
    color: str = field(default_factory=random_branch_color)

    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    is_expanded: bool = True

    is_completed: bool = False
    progress: int = 0

    # Layout fields, recomputed every pass and never persisted
    height: Optional[float] = None
    subtree_extent: float = 0
    x: float = 0
    y: float = 0
    visible: bool = False

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"TodoNode(id={self.id}, title={self.title!r}, progress={self.progress})"


class Forest:
    """Arena of nodes plus the ordered root list."""

    def __init__(self):
        self.nodes: Dict[str, TodoNode] = {}
        self.roots: List[str] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def get(self, node_id: str) -> TodoNode:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise NodeNotFound(node_id) from None

    def parent_of(self, node: TodoNode) -> Optional[TodoNode]:
        if node.parent_id is None:
            return None
        return self.nodes.get(node.parent_id)

    def children_of(self, node: TodoNode) -> List[TodoNode]:
        return [self.nodes[cid] for cid in node.children]

    def root_nodes(self) -> List[TodoNode]:
        return [self.nodes[rid] for rid in self.roots]

    def siblings_of(self, node: TodoNode) -> List[str]:
        """The id list that owns node (parent's children or the root list)."""
        parent = self.parent_of(node)
        return parent.children if parent else self.roots

    def add(self, node: TodoNode, parent_id: Optional[str] = None) -> TodoNode:
        """Attach node as the last child of parent_id, or as a new root."""
        if parent_id is None:
            node.parent_id = None
            self.roots.append(node.id)
        else:
            parent = self.get(parent_id)
            node.parent_id = parent.id
            parent.children.append(node.id)
        self.nodes[node.id] = node
        return node

    def subtree_ids(self, node: TodoNode) -> List[str]:
        """Pre-order ids of node and all its descendants."""
        result = []
        stack = [node.id]
        while stack:
            nid = stack.pop()
            result.append(nid)
            stack.extend(reversed(self.nodes[nid].children))
        return result

    def remove(self, node_id: str) -> Optional[TodoNode]:
        """Detach node and drop its whole subtree from the arena. Returns the former parent."""
        node = self.get(node_id)
        parent = self.parent_of(node)
        owner = parent.children if parent else self.roots
        if node.id in owner:
            owner.remove(node.id)
        for nid in self.subtree_ids(node):
            del self.nodes[nid]
        return parent

    def walk(self) -> Iterator[TodoNode]:
        """Depth-first, pre-order over every node in root order."""
        stack = list(reversed(self.roots))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def clear(self) -> None:
        self.nodes.clear()
        self.roots.clear()
