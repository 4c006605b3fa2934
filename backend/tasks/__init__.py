"""
Tasks module
Node entity, forest arena, progress aggregation and persistence codec.
"""

from .node import BRANCH_COLORS, Forest, NodeNotFound, TodoNode, new_node_id
from .progress import has_incomplete_children, recompute_all, recompute_progress, set_complete_state
from .serialize import deserialize_forest, serialize_forest

__all__ = [
    "BRANCH_COLORS",
    "Forest",
    "NodeNotFound",
    "TodoNode",
    "new_node_id",
    "has_incomplete_children",
    "recompute_all",
    "recompute_progress",
    "set_complete_state",
    "deserialize_forest",
    "serialize_forest",
]
