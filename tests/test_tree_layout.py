"""Tests for subtree extents, position assignment and the forest orchestrator."""

import random

import pytest

from layout import assign_positions, compute_subtree_extent, layout_forest, own_height
from layout.constants import DEFAULT_NODE_HEIGHT, HORIZONTAL_SPACING, NODE_WIDTH, ROOT_GAP, VERTICAL_GAP
from tasks.progress import recompute_all

from helpers import add


@pytest.fixture
def three_children(forest):
    """Parent (150) with leaf children of height 100, 150, 100."""
    parent = add(forest, "P", height=150)
    kids = [add(forest, f"c{i}", parent, height=h) for i, h in enumerate((100, 150, 100))]
    return parent, kids


def _random_forest(forest, seed=7, size=40):
    rng = random.Random(seed)
    nodes = []
    for i in range(size):
        parent = rng.choice(nodes) if nodes and rng.random() < 0.8 else None
        node = add(
            forest,
            f"n{i}",
            parent,
            height=rng.choice([None, 80, 120, 150, 220]),
            completed=rng.random() < 0.3,
            expanded=rng.random() < 0.8,
        )
        nodes.append(node)
    recompute_all(forest)
    return nodes


def _snapshot(forest):
    return {n.id: (n.x, n.y, n.visible, n.subtree_extent) for n in forest.walk()}


class TestSubtreeExtent:
    def test_sum_of_children_plus_gaps(self, forest, three_children):
        parent, _ = three_children
        assert compute_subtree_extent(forest, parent, vertical_gap=30) == 410
        assert parent.subtree_extent == 410

    def test_own_height_wins_over_small_children(self, forest):
        parent = add(forest, "P", height=500)
        add(forest, "c", parent, height=100)
        assert compute_subtree_extent(forest, parent) == 500

    def test_leaf_extent_is_own_height(self, forest):
        leaf = add(forest, "leaf", height=123)
        assert compute_subtree_extent(forest, leaf) == 123

    def test_missing_height_falls_back(self, forest):
        leaf = add(forest, "leaf")
        zero = add(forest, "zero", height=0)
        assert own_height(leaf) == DEFAULT_NODE_HEIGHT
        assert compute_subtree_extent(forest, zero) == DEFAULT_NODE_HEIGHT

    @pytest.mark.parametrize("height", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_height_falls_back(self, forest, height):
        root = add(forest, "root", height=height)
        child = add(forest, "child", root)
        result = layout_forest(forest)
        assert root.subtree_extent == DEFAULT_NODE_HEIGHT
        assert (root.y, child.y) == (0, 0)
        assert result["nodes"][root.id]["h"] == DEFAULT_NODE_HEIGHT

    def test_collapse_drops_and_expand_restores(self, forest, three_children):
        parent, kids = three_children
        add(forest, "grandchild", kids[0], height=300)
        expanded_extent = compute_subtree_extent(forest, parent)
        assert expanded_extent == 300 + 30 + 150 + 30 + 100

        parent.is_expanded = False
        assert compute_subtree_extent(forest, parent) == 150

        parent.is_expanded = True
        assert compute_subtree_extent(forest, parent) == expanded_extent

    def test_children_sorted_incomplete_first_and_stable(self, forest):
        parent = add(forest, "P")
        a = add(forest, "A", parent, completed=True)
        b = add(forest, "B", parent)
        c = add(forest, "C", parent, completed=True)
        d = add(forest, "D", parent)
        compute_subtree_extent(forest, parent)
        assert parent.children == [b.id, d.id, a.id, c.id]


class TestAssignPositions:
    def test_three_children_bands(self, forest, three_children):
        parent, kids = three_children
        compute_subtree_extent(forest, parent)
        assign_positions(forest, parent, 0, 0)
        assert [k.y for k in kids] == [-155, 0, 155]
        assert all(k.x == HORIZONTAL_SPACING for k in kids)
        assert all(k.visible for k in kids)

    def test_collapsed_node_does_not_descend(self, forest):
        parent = add(forest, "P", expanded=False)
        child = add(forest, "c", parent)
        compute_subtree_extent(forest, parent)
        assign_positions(forest, parent, 10, 20)
        assert (parent.x, parent.y, parent.visible) == (10, 20, True)
        assert child.visible is False


class TestLayoutForest:
    def test_empty_forest_is_noop(self, forest):
        assert layout_forest(forest) is None

    def test_single_child_centers_on_parent(self, forest):
        root = add(forest, "root")
        child = add(forest, "child", root)
        layout_forest(forest)
        assert root.x == 0
        assert child.x == root.x + HORIZONTAL_SPACING
        assert child.y == root.y

    def test_roots_stack_and_center_on_zero(self, forest):
        first = add(forest, "r1")
        second = add(forest, "r2")
        result = layout_forest(forest)
        total = 2 * DEFAULT_NODE_HEIGHT + ROOT_GAP
        assert first.y == -total / 2 + DEFAULT_NODE_HEIGHT / 2
        assert second.y == total / 2 - DEFAULT_NODE_HEIGHT / 2
        assert first.y == -second.y
        assert result["height"] == total

    def test_completed_roots_sink(self, forest):
        done = add(forest, "done", completed=True)
        open_ = add(forest, "open")
        recompute_all(forest)
        layout_forest(forest)
        assert forest.roots == [open_.id, done.id]
        assert open_.y < done.y

    def test_sibling_order_everywhere(self, forest):
        _random_forest(forest)
        layout_forest(forest)
        for ids in [forest.roots] + [n.children for n in forest.walk()]:
            flags = [forest.nodes[i].is_completed for i in ids]
            assert flags == sorted(flags)

    def test_children_stay_inside_parent_band(self, forest):
        _random_forest(forest)
        layout_forest(forest)
        for node in forest.walk():
            if not node.visible or not node.is_expanded:
                continue
            top = node.y - node.subtree_extent / 2
            bottom = node.y + node.subtree_extent / 2
            for child in forest.children_of(node):
                assert child.visible
                assert top - 1e-9 <= child.y - child.subtree_extent / 2
                assert child.y + child.subtree_extent / 2 <= bottom + 1e-9

    def test_sibling_bands_do_not_overlap(self, forest):
        _random_forest(forest, seed=11)
        layout_forest(forest)
        for node in forest.walk():
            if not node.visible or not node.is_expanded:
                continue
            bands = [(c.y - c.subtree_extent / 2, c.y + c.subtree_extent / 2) for c in forest.children_of(node)]
            for (_, prev_bottom), (next_top, _) in zip(bands, bands[1:]):
                assert next_top - prev_bottom == pytest.approx(VERTICAL_GAP)

    def test_idempotent(self, forest):
        _random_forest(forest, seed=3)
        first_payload = layout_forest(forest)
        first = _snapshot(forest)
        second_payload = layout_forest(forest)
        assert _snapshot(forest) == first
        assert second_payload == first_payload

    def test_hidden_descendants_left_out_of_payload(self, forest):
        root = add(forest, "root")
        mid = add(forest, "mid", root, expanded=False)
        hidden = add(forest, "hidden", mid)
        result = layout_forest(forest)
        assert set(result["nodes"]) == {root.id, mid.id}
        assert hidden.visible is False
        assert [(e["from"], e["to"]) for e in result["edges"]] == [(root.id, mid.id)]
        assert result["nodes"][mid.id]["collapseGlyph"] == "+"
        assert result["nodes"][root.id]["collapseGlyph"] == "−"

    def test_payload_fields_and_edge_geometry(self, forest):
        root = add(forest, "root")
        child = add(forest, "child", root, completed=True)
        recompute_all(forest)
        result = layout_forest(forest)

        entry = result["nodes"][child.id]
        assert entry["progress"] == 100
        assert entry["isCompleted"] is True
        assert entry["collapseGlyph"] is None
        assert result["nodes"][root.id]["progress"] == 100

        edge = result["edges"][0]
        assert edge["completed"] is True
        start_x = NODE_WIDTH / 2
        end_x = HORIZONTAL_SPACING - NODE_WIDTH / 2
        mid_x = start_x + (end_x - start_x) / 2
        assert edge["points"] == [[start_x, 0], [mid_x, 0], [mid_x, 0], [end_x, 0]]
        assert result["width"] == HORIZONTAL_SPACING + NODE_WIDTH

    def test_custom_spacing(self, forest):
        root = add(forest, "root")
        child = add(forest, "child", root)
        layout_forest(forest, horizontal_spacing=200)
        assert child.x == 200
