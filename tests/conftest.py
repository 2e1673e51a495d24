"""Shared test fixtures for treesync."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from treesync.tree import DirNode


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


def make_tree(name: str, layout: dict) -> DirNode:
    """Build a tree from a nested dict: bytes values are files, dicts are dirs."""
    tree = DirNode(name=name)
    for child_name, value in layout.items():
        if isinstance(value, dict):
            tree.add_child_dir(make_tree(child_name, value))
        else:
            tree.add_file(child_name, contents=value)
    return tree


def write_tree(tree: DirNode, path: Path) -> Path:
    """Save a tree as a JSON document."""
    path.write_text(json.dumps(tree.to_dict()))
    return path


@pytest.fixture
def from_tree() -> DirNode:
    """
    Structure:
        addon/
        ├── _main.cfg
        ├── unchanged.txt
        ├── old_name.txt
        ├── images/
        │   ├── a.png
        │   └── b.png
        └── obsolete/
            └── gone.txt
    """
    return make_tree(
        "addon",
        {
            "_main.cfg": b"[campaign]\n",
            "unchanged.txt": b"same\n",
            "old_name.txt": b"renamed content\n",
            "images": {"a.png": b"\x89PNG a", "b.png": b"\x89PNG b"},
            "obsolete": {"gone.txt": b"bye\n"},
        },
    )


@pytest.fixture
def to_tree() -> DirNode:
    """
    Structure:
        addon/
        ├── _main.cfg        (modified)
        ├── unchanged.txt
        ├── new_name.txt     (renamed from old_name.txt)
        ├── images/
        │   ├── a.png
        │   └── c.png        (new)
        ├── maps/            (new)
        │   └── m.map
        └── empty/           (new, empty)
    """
    return make_tree(
        "addon",
        {
            "_main.cfg": b"[campaign]\nid=x\n",
            "unchanged.txt": b"same\n",
            "new_name.txt": b"renamed content\n",
            "images": {"a.png": b"\x89PNG a", "c.png": b"\x89PNG c"},
            "maps": {"m.map": b"Gg, Gg\r\n\x00"},
            "empty": {},
        },
    )
