"""Tree builders shared by the test modules."""

from typing import Optional

from tasks.node import Forest, TodoNode


def add(forest: Forest, title: str, parent: Optional[TodoNode] = None, height: Optional[float] = None,
        completed: bool = False, expanded: bool = True) -> TodoNode:
    node = TodoNode(title=title, height=height, is_completed=completed, is_expanded=expanded)
    return forest.add(node, parent.id if parent else None)
