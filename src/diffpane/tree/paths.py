"""Block id <-> document path helpers.

A block id is the ``/``-joined list of JSON-Pointer-escaped path segments
(``~`` -> ``~0``, ``/`` -> ``~1``), without a leading slash. A path is either
that string form or a list of decoded segments.
"""

from __future__ import annotations

from typing import Any

DiffPath = str | list[str] | tuple[str, ...]


def encode_segment(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def decode_segment(key: str) -> str:
    return key.replace("~1", "/").replace("~0", "~")


def parse_path(path: DiffPath) -> list[str]:
    """Convert a path to decoded segments."""
    if isinstance(path, (list, tuple)):
        return [str(segment) for segment in path]
    if path == "":
        return []
    return [decode_segment(segment) for segment in path.split("/")]


def format_path(segments: list[str] | tuple[str, ...]) -> str:
    """Convert decoded segments to the string form used as a block id."""
    return "/".join(encode_segment(str(segment)) for segment in segments)


def to_block_id(path: DiffPath) -> str:
    return path if isinstance(path, str) else format_path(path)


def parent_id(block_id: str) -> str | None:
    """Id of the enclosing block, or None at the top level."""
    slash = block_id.rfind("/")
    if slash <= 0:
        return None
    return block_id[:slash]


def ancestor_prefixes(block_id: str) -> list[str]:
    """Every proper prefix id of ``block_id``, root first."""
    out: list[str] = []
    current = parent_id(block_id)
    while current is not None:
        out.append(current)
        current = parent_id(current)
    out.reverse()
    return out


def get_path_value(data: Any, segments: list[str]) -> Any:
    """Value at ``segments`` inside nested dicts/lists, or None when absent."""
    item = data
    for key in segments:
        if isinstance(item, dict):
            if key not in item:
                return None
            item = item[key]
        elif isinstance(item, list):
            if not key.isdigit() or int(key) >= len(item):
                return None
            item = item[int(key)]
        else:
            return None
    return item
