"""
Progress aggregation.
A leaf's progress is 0 or 100 from its own flag; a branch's is the floored average of its children
and its completed flag follows from that. Every recompute cascades up to the root.
"""

from typing import List, Tuple

from .node import Forest, TodoNode

ProgressUpdate = Tuple[str, int, bool]


def _aggregate(forest: Forest, node: TodoNode) -> None:
    children = forest.children_of(node)
    if node.is_leaf:
        node.progress = 100 if node.is_completed else 0
    else:
        node.progress = sum(c.progress for c in children) // len(children)
        node.is_completed = node.progress == 100


def recompute_progress(forest: Forest, node: TodoNode) -> List[ProgressUpdate]:
    """Recompute node and every ancestor. Returns (id, progress, is_completed) in cascade order."""
    updates: List[ProgressUpdate] = []
    current = node
    while current is not None:
        _aggregate(forest, current)
        updates.append((current.id, current.progress, current.is_completed))
        current = forest.parent_of(current)
    return updates


def recompute_subtree(forest: Forest, node: TodoNode) -> None:
    """Post-order recompute of node's whole subtree, no upward cascade."""
    for nid in reversed(forest.subtree_ids(node)):
        _aggregate(forest, forest.nodes[nid])


def recompute_all(forest: Forest) -> None:
    for root in forest.root_nodes():
        recompute_subtree(forest, root)


def has_incomplete_children(forest: Forest, node: TodoNode) -> bool:
    return any(c.progress < 100 for c in forest.children_of(node))


def set_complete_state(forest: Forest, node: TodoNode, complete: bool, recursive: bool = False) -> List[ProgressUpdate]:
    """
    Set node's completed flag and cascade.
    recursive=True with complete=True force-completes every descendant first (bulk set,
    not aggregation). A branch's flag is still overwritten by its children's average.
    """
    if recursive and complete:
        for nid in forest.subtree_ids(node):
            forest.nodes[nid].is_completed = True
        recompute_subtree(forest, node)
    else:
        node.is_completed = complete
    return recompute_progress(forest, node)
