"""Annotated change tree: models, builder and lookup index."""

from diffpane.tree.builder import build_change_tree
from diffpane.tree.formats import FormatStrategy, JsonFormat, YamlFormat, get_format
from diffpane.tree.index import BlockIndexEntry, BlockTreeIndex, ChangedBlock
from diffpane.tree.models import (
    DIFF_TYPES,
    NOT_SET,
    ChangeMeta,
    ChangeNode,
    DiffAction,
    DiffType,
    DisplayCondition,
    Side,
    Token,
    TokenRole,
    iter_preorder,
    validate_counts,
)

__all__ = [
    "build_change_tree",
    "get_format",
    "iter_preorder",
    "validate_counts",
    "BlockIndexEntry",
    "BlockTreeIndex",
    "ChangedBlock",
    "ChangeMeta",
    "ChangeNode",
    "DIFF_TYPES",
    "DiffAction",
    "DiffType",
    "DisplayCondition",
    "FormatStrategy",
    "JsonFormat",
    "NOT_SET",
    "Side",
    "Token",
    "TokenRole",
    "YamlFormat",
]
