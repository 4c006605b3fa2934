"""
Horizontal tree layout for the task forest.
Depth grows along x by a fixed step; each node's visible subtree gets a vertical band sized to
its measured extent, and the node is centered on the union of its children's bands.

Two passes per layout:
  1. extent pass (post-order): siblings sorted incomplete-first, subtree extents measured
  2. position pass (pre-order): bands distributed top-down, collapsed branches skipped
"""

import math
from typing import Any, Dict, List, Optional

from tasks.node import Forest, TodoNode

from .constants import (
    DEFAULT_NODE_HEIGHT,
    EDGE_CURVATURE,
    HORIZONTAL_SPACING,
    NODE_WIDTH,
    ROOT_GAP,
    VERTICAL_GAP,
)


def sort_siblings(forest: Forest, ids: List[str]) -> None:
    """In-place stable sort: incomplete nodes before completed ones."""
    ids.sort(key=lambda nid: forest.nodes[nid].is_completed)


def own_height(node: TodoNode, default_height: float = DEFAULT_NODE_HEIGHT) -> float:
    """Reported visual height, or default_height when the node has not been measured."""
    if node.height is None or not math.isfinite(node.height) or node.height <= 0:
        return default_height
    return node.height


def compute_subtree_extent(
    forest: Forest,
    node: TodoNode,
    vertical_gap: float = VERTICAL_GAP,
    default_height: float = DEFAULT_NODE_HEIGHT,
) -> float:
    sort_siblings(forest, node.children)
    height = own_height(node, default_height)
    if node.is_leaf or not node.is_expanded:
        node.subtree_extent = height
        return height

    children_extent = sum(
        compute_subtree_extent(forest, child, vertical_gap, default_height)
        for child in forest.children_of(node)
    )
    children_extent += vertical_gap * (len(node.children) - 1)
    node.subtree_extent = max(height, children_extent)
    return node.subtree_extent


def assign_positions(
    forest: Forest,
    node: TodoNode,
    x: float,
    center_y: float,
    horizontal_spacing: float = HORIZONTAL_SPACING,
    vertical_gap: float = VERTICAL_GAP,
) -> None:
    """Place node at (x, center_y) and its visible descendants inside its band."""
    node.x = x
    node.y = center_y
    node.visible = True
    if node.is_leaf or not node.is_expanded:
        return

    current_y = center_y - node.subtree_extent / 2
    for child in forest.children_of(node):
        child_center_y = current_y + child.subtree_extent / 2
        assign_positions(forest, child, x + horizontal_spacing, child_center_y, horizontal_spacing, vertical_gap)
        current_y += child.subtree_extent + vertical_gap


def _edge_points(parent: TodoNode, child: TodoNode, node_width: float) -> List[List[float]]:
    """Cubic bezier from the parent's right edge to the child's left edge."""
    start_x = parent.x + node_width / 2
    end_x = child.x - node_width / 2
    delta_x = end_x - start_x
    return [
        [round(start_x, 1), round(parent.y, 1)],
        [round(start_x + delta_x * EDGE_CURVATURE, 1), round(parent.y, 1)],
        [round(end_x - delta_x * EDGE_CURVATURE, 1), round(child.y, 1)],
        [round(end_x, 1), round(child.y, 1)],
    ]


def _collapse_glyph(node: TodoNode) -> Optional[str]:
    if node.is_leaf:
        return None
    return "−" if node.is_expanded else "+"


def layout_forest(
    forest: Forest,
    horizontal_spacing: float = HORIZONTAL_SPACING,
    vertical_gap: float = VERTICAL_GAP,
    root_gap: float = ROOT_GAP,
    default_height: float = DEFAULT_NODE_HEIGHT,
    node_width: float = NODE_WIDTH,
) -> Optional[Dict[str, Any]]:
    """
    Lay out every root tree, stacked vertically and centered on y = 0 at x = 0.
    Mutates node layout fields and sibling order. Returns the render payload
    {nodes: {id: {...}}, edges: [{from, to, completed, points}], width, height}
    for visible nodes only, or None for an empty forest.
    """
    if not forest.roots:
        return None

    sort_siblings(forest, forest.roots)
    roots = forest.root_nodes()

    # Collapsed branches are skipped by the extent pass, so their descendants are sorted here
    all_nodes = list(forest.walk())
    for node in all_nodes:
        node.visible = True
        sort_siblings(forest, node.children)
    for root in roots:
        compute_subtree_extent(forest, root, vertical_gap, default_height)
    for node in all_nodes:
        node.visible = False

    total_height = sum(r.subtree_extent for r in roots) + root_gap * (len(roots) - 1)
    current_top = -total_height / 2
    for root in roots:
        assign_positions(forest, root, 0, current_top + root.subtree_extent / 2, horizontal_spacing, vertical_gap)
        current_top += root.subtree_extent + root_gap

    visible = [n for n in forest.walk() if n.visible]
    nodes_out: Dict[str, Dict[str, Any]] = {}
    edges_out: List[Dict[str, Any]] = []
    for node in visible:
        nodes_out[node.id] = {
            "x": round(node.x, 1),
            "y": round(node.y, 1),
            "h": own_height(node, default_height),
            "progress": node.progress,
            "isCompleted": node.is_completed,
            "isExpanded": node.is_expanded,
            "collapseGlyph": _collapse_glyph(node),
        }
        if node.is_expanded:
            for child in forest.children_of(node):
                edges_out.append({
                    "from": node.id,
                    "to": child.id,
                    "completed": child.is_completed,
                    "points": _edge_points(node, child, node_width),
                })

    min_x = min(n.x for n in visible) - node_width / 2
    max_x = max(n.x for n in visible) + node_width / 2
    width = round(max_x - min_x, 1)
    height = round(total_height, 1)

    return {"nodes": nodes_out, "edges": edges_out, "width": width, "height": height}
