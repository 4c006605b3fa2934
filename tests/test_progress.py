"""Tests for progress aggregation and the upward cascade."""

from tasks.progress import (
    has_incomplete_children,
    recompute_all,
    recompute_progress,
    set_complete_state,
)

from helpers import add


class TestLeafProgress:
    def test_incomplete_leaf_is_zero(self, forest):
        leaf = add(forest, "leaf")
        recompute_progress(forest, leaf)
        assert leaf.progress == 0

    def test_completed_leaf_is_hundred(self, forest):
        leaf = add(forest, "leaf", completed=True)
        recompute_progress(forest, leaf)
        assert leaf.progress == 100


class TestBranchProgress:
    def test_half_done_parent(self, forest):
        parent = add(forest, "P")
        a = add(forest, "A", parent)
        b = add(forest, "B", parent, completed=True)
        recompute_all(forest)
        assert parent.progress == 50
        assert parent.is_completed is False

        updates = set_complete_state(forest, a, True)
        assert parent.progress == 100
        assert parent.is_completed is True
        assert updates == [(a.id, 100, True), (parent.id, 100, True)]
        assert b.progress == 100

    def test_average_is_floored(self, forest):
        parent = add(forest, "P")
        add(forest, "A", parent, completed=True)
        add(forest, "B", parent)
        add(forest, "C", parent)
        recompute_all(forest)
        assert parent.progress == 33

    def test_cascade_reaches_every_ancestor(self, forest):
        root = add(forest, "root")
        mid = add(forest, "mid", root)
        add(forest, "sibling", root)
        leaf = add(forest, "leaf", mid)
        add(forest, "leaf2", mid)
        recompute_all(forest)
        assert (root.progress, mid.progress) == (0, 0)

        updates = set_complete_state(forest, leaf, True)
        assert [u[0] for u in updates] == [leaf.id, mid.id, root.id]
        assert mid.progress == 50
        assert root.progress == 25

    def test_branch_flag_is_always_derived(self, forest):
        parent = add(forest, "P")
        add(forest, "A", parent)
        parent.is_completed = True
        recompute_progress(forest, parent)
        assert parent.is_completed is False
        assert parent.progress == 0

    def test_unchecking_a_branch_does_not_stick(self, forest):
        parent = add(forest, "P")
        add(forest, "A", parent, completed=True)
        recompute_all(forest)
        set_complete_state(forest, parent, False)
        assert parent.is_completed is True
        assert parent.progress == 100


class TestForceComplete:
    def test_recursive_completion_sets_every_descendant(self, forest):
        root = add(forest, "root")
        mid = add(forest, "mid", root)
        deep = add(forest, "deep", mid)
        other = add(forest, "other", root)
        recompute_all(forest)
        assert has_incomplete_children(forest, root)

        set_complete_state(forest, root, True, recursive=True)
        for node in (root, mid, deep, other):
            assert node.is_completed is True
            assert node.progress == 100
        assert not has_incomplete_children(forest, root)

    def test_child_edit_after_force_complete_reopens_branch(self, forest):
        root = add(forest, "root")
        a = add(forest, "A", root)
        add(forest, "B", root)
        set_complete_state(forest, root, True, recursive=True)

        set_complete_state(forest, a, False)
        assert root.progress == 50
        assert root.is_completed is False

    def test_has_incomplete_children_false_for_leaf(self, forest):
        leaf = add(forest, "leaf")
        assert has_incomplete_children(forest, leaf) is False
