"""Layout module - computes canvas positions for the task forest."""

from .tree_layout import assign_positions, compute_subtree_extent, layout_forest, own_height, sort_siblings

__all__ = ["assign_positions", "compute_subtree_extent", "layout_forest", "own_height", "sort_siblings"]
