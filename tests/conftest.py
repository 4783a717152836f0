"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides the merged documents shared across test modules.
"""

import sys
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local diffpane package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of diffpane modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("diffpane"):
        del sys.modules[module_name]

from diffpane.tree.builder import build_change_tree  # noqa: E402
from diffpane.tree.models import ChangeNode  # noqa: E402


@pytest.fixture
def abc_merged() -> dict[str, Any]:
    """Unchanged ``a``, added non-breaking ``b``, removed breaking ``c``."""
    return {
        "a": 1,
        "b": 2,
        "c": 3,
        "$diff": {
            "b": {"action": "add", "type": "non-breaking"},
            "c": {"action": "remove", "type": "breaking"},
        },
    }


@pytest.fixture
def abc_tree(abc_merged: dict[str, Any]) -> ChangeNode:
    return build_change_tree(abc_merged, "yaml")


@pytest.fixture
def api_merged() -> dict[str, Any]:
    """A small API document touching every action."""
    return {
        "info": {
            "title": "Pets API",
            "version": "1.0",
            "$diff": {
                "title": {"action": "replace", "type": "annotation", "replaced": "Pet API"},
            },
        },
        "paths": {
            "/pets": {
                "get": {"summary": "List pets", "operationId": "listPets"},
                "post": {"summary": "Create pet"},
                "$diff": {
                    "post": {"action": "add", "type": "non-breaking"},
                },
            },
            "/users": {
                "get": {"summary": "List users"},
            },
            "$diff": {
                "/users": {"action": "remove", "type": "breaking"},
            },
        },
        "tags": ["pets", "store"],
        "license": "MIT",
        "$diff": {
            "license": {"action": "rename", "type": "unclassified", "replaced": "licence"},
        },
    }


@pytest.fixture
def api_tree(api_merged: dict[str, Any]) -> ChangeNode:
    return build_change_tree(api_merged, "yaml")
