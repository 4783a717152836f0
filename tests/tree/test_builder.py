"""Tests for building the change tree from a merged document."""

from typing import Any

from diffpane.alignment.flatten import render_line
from diffpane.tree.builder import build_change_tree
from diffpane.tree.index import BlockTreeIndex
from diffpane.tree.models import (
    ChangeNode,
    DiffAction,
    DiffType,
    DisplayCondition,
    Side,
    TokenRole,
    validate_counts,
)


def _node(tree: ChangeNode, block_id: str) -> ChangeNode:
    node = BlockTreeIndex.build(tree).node(block_id)
    assert node is not None, block_id
    return node


def _rows(tree: ChangeNode, side: Side) -> list[str]:
    out: list[str] = []
    stack = [tree]
    while stack:
        node = stack.pop()
        if node.tokens:
            out.append(render_line(node, side))
        stack.extend(reversed(node.children))
    return out


class TestBuildYaml:
    """YAML tree shape and tokens."""

    def test_given_flat_document_when_built_then_one_row_per_key(
        self, abc_tree: ChangeNode
    ) -> None:
        # Then
        assert abc_tree.id == ""
        assert not abc_tree.tokens
        assert [c.id for c in abc_tree.children] == ["a", "b", "c"]
        assert [c.line_index for c in abc_tree.children] == [1, 2, 3]
        assert _rows(abc_tree, Side.AFTER) == ["a: 1", "b: 2", "c: 3"]

    def test_root_counts(self, abc_tree: ChangeNode) -> None:
        assert abc_tree.aggregate_counts == (2, 1, 1, 0, 0)
        assert validate_counts(abc_tree) == []

    def test_change_metadata_attached(self, abc_tree: ChangeNode) -> None:
        b = _node(abc_tree, "b")

        assert b.diff is not None
        assert b.diff.action is DiffAction.ADD
        assert b.diff.type is DiffType.NON_BREAKING
        assert not b.inherited
        assert _node(abc_tree, "a").diff is None

    def test_nested_indent_and_ids(self, api_tree: ChangeNode) -> None:
        summary = _node(api_tree, "paths/~1pets/get/summary")

        assert summary.indent == 6
        assert summary.line_index == 7
        assert render_line(summary, Side.AFTER) == "      summary: List pets"

    def test_given_added_block_when_built_then_children_inherit(
        self, api_tree: ChangeNode
    ) -> None:
        post = _node(api_tree, "paths/~1pets/post")
        summary = _node(api_tree, "paths/~1pets/post/summary")

        assert post.own_change is not None
        assert summary.inherited
        assert summary.own_change is None
        assert summary.diff is not None and summary.diff.action is DiffAction.ADD
        assert post.aggregate_counts == (1, 0, 1, 0, 0)

    def test_given_replaced_value_when_built_then_sides_differ(self, api_tree: ChangeNode) -> None:
        title = _node(api_tree, "info/title")

        assert render_line(title, Side.BEFORE) == "  title: Pet API"
        assert render_line(title, Side.AFTER) == "  title: Pets API"

    def test_given_renamed_key_when_built_then_key_split(self, api_tree: ChangeNode) -> None:
        license_node = _node(api_tree, "license")

        assert render_line(license_node, Side.BEFORE) == "licence: MIT"
        assert render_line(license_node, Side.AFTER) == "license: MIT"
        key_roles = {t.role for t in license_node.tokens if t.condition is not DisplayCondition.BOTH}
        assert key_roles == {TokenRole.KEY}

    def test_header_carries_counter_tokens(self, api_tree: ChangeNode) -> None:
        paths = _node(api_tree, "paths")
        counters = [t for t in paths.tokens if t.role is TokenRole.COUNTER]

        assert [(t.text, t.counter_type) for t in counters] == [
            ("1", DiffType.BREAKING),
            ("1", DiffType.NON_BREAKING),
        ]
        assert render_line(paths, Side.AFTER) == "paths:"

    def test_array_of_scalars(self, api_tree: ChangeNode) -> None:
        tags = _node(api_tree, "tags")

        assert [c.id for c in tags.children] == ["tags/0", "tags/1"]
        assert render_line(tags.children[0], Side.AFTER) == "  - pets"

    def test_array_of_objects_uses_dash_prefix(self) -> None:
        merged = {"servers": [{"url": "x", "name": "y"}]}

        tree = build_change_tree(merged, "yaml")

        assert _rows(tree, Side.AFTER) == ["servers:", "  - url: x", "    name: y"]
        item = _node(tree, "servers/0")
        assert not item.tokens

    def test_array_item_metadata(self) -> None:
        merged: dict[str, Any] = {
            "servers": [{"url": "a"}, {"url": "b"}],
            "$diff": {"servers": {"array": {"1": {"action": "add", "type": "non-breaking"}}}},
        }

        tree = build_change_tree(merged, "yaml")

        item = _node(tree, "servers/1")
        assert item.own_change is not None
        assert item.own_change.action is DiffAction.ADD
        assert _node(tree, "servers/1/url").inherited
        assert _node(tree, "servers").own_change is None
        assert tree.aggregate_counts == (1, 0, 1, 0, 0)

    def test_empty_containers_are_leaves(self) -> None:
        tree = build_change_tree({"a": {}, "b": []}, "yaml")

        assert _rows(tree, Side.AFTER) == ["a: {}", "b: []"]
        assert all(not c.children for c in tree.children)

    def test_given_all_children_added_when_built_then_empty_marker_before(self) -> None:
        merged = {"a": {"x": 1, "$diff": {"x": {"action": "add", "type": "non-breaking"}}}}

        tree = build_change_tree(merged, "yaml")

        a = _node(tree, "a")
        assert render_line(a, Side.BEFORE) == "a: {}"
        assert render_line(a, Side.AFTER) == "a:"

    def test_keys_with_slashes_are_escaped(self) -> None:
        tree = build_change_tree({"a/b": {"c~d": 1}}, "yaml")

        assert _node(tree, "a~1b/c~0d").line_index == 2

    def test_unknown_action_treated_as_unchanged(self) -> None:
        tree = build_change_tree({"a": 1, "$diff": {"a": {"action": "moved"}}}, "yaml")

        assert _node(tree, "a").diff is None
        assert tree.total_changes == 0

    def test_scalar_document_has_no_rows(self) -> None:
        tree = build_change_tree(5, "yaml")

        assert tree.children == ()


class TestBuildJson:
    """JSON punctuation and brace rows."""

    def test_given_nested_object_when_built_then_closing_row_added(self) -> None:
        tree = build_change_tree({"info": {"title": "x"}, "n": 1}, "json")

        assert _rows(tree, Side.AFTER) == [
            '"info": {',
            '  "title": "x"',
            "},",
            '"n": 1',
        ]

    def test_closing_row_inherits_block_change(self) -> None:
        merged = {"info": {"title": "x"}, "$diff": {"info": {"action": "remove", "type": "breaking"}}}

        tree = build_change_tree(merged, "json")

        info = _node(tree, "info")
        closing = info.children[-1]
        assert closing.id == ""
        assert closing.inherited
        assert closing.diff is not None and closing.diff.action is DiffAction.REMOVE
        assert info.aggregate_counts == (1, 1, 0, 0, 0)

    def test_array_punctuation(self) -> None:
        tree = build_change_tree({"tags": ["a", "b"]}, "json")

        assert _rows(tree, Side.AFTER) == ['"tags": [', '  "a",', '  "b"', "]"]

    def test_collapsed_marker_not_rendered(self) -> None:
        tree = build_change_tree({"info": {"title": "x"}, "n": 1}, "json")

        info = _node(tree, "info")
        collapsed = [t.text for t in info.tokens if t.condition is DisplayCondition.COLLAPSED]
        assert collapsed == ["{...},"]
