"""Tests for tree records and their JSON form."""

import json

import pytest

from tests.conftest import make_tree
from treesync.errors import MalformedTreeError
from treesync.tree import DirNode, FileNode


class TestDirNode:
    """Tests for the tree record contract."""

    def test_find_dir(self, from_tree: DirNode):
        images = from_tree.find_dir("images")

        assert images is not None
        assert [f.name for f in images.files] == ["a.png", "b.png"]
        assert from_tree.find_dir("Images") is None
        assert from_tree.find_dir("_main.cfg") is None

    def test_add_children(self):
        root = DirNode(name="root")
        f = root.add_file("a.txt", contents=b"a")
        sub = root.add_dir("sub")

        assert root.files == [f]
        assert root.dirs == [sub]
        assert sub.is_empty
        assert not root.is_empty

    def test_iter_files(self, from_tree: DirNode):
        paths = [path for path, _ in from_tree.iter_files()]

        assert paths == [
            "_main.cfg",
            "unchanged.txt",
            "old_name.txt",
            "images/a.png",
            "images/b.png",
            "obsolete/gone.txt",
        ]

    def test_depth(self):
        assert DirNode().depth() == 1
        assert make_tree("r", {"a": {"b": {}}, "c": {}}).depth() == 3


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip_through_json(self, to_tree: DirNode):
        data = json.loads(json.dumps(to_tree.to_dict()))
        restored = DirNode.from_dict(data)

        assert restored == to_tree

    def test_contents_are_escaped(self):
        f = FileNode("m.map", contents=b"a\r\n\x00")
        assert f.to_dict()["contents"] == "a\x01\x0e\n\x01\x01"

    def test_hash_only_file(self):
        data = {"name": "a", "hash": "abc"}
        f = FileNode.from_dict(data)

        assert f.contents is None
        assert f.hash == "abc"
        assert f.to_dict() == data

    def test_missing_payload_rejected(self):
        with pytest.raises(MalformedTreeError, match="neither contents nor hash"):
            FileNode.from_dict({"name": "a"})

    def test_missing_payload_allowed_for_name_lists(self):
        f = FileNode.from_dict({"name": "a"}, require_payload=False)
        assert f == FileNode("a")

    def test_missing_name_rejected(self):
        with pytest.raises(MalformedTreeError):
            FileNode.from_dict({"contents": ""})

    def test_non_latin1_contents_rejected(self):
        with pytest.raises(MalformedTreeError, match="undecodable"):
            FileNode.from_dict({"name": "a", "contents": "€"})

    def test_non_mapping_dir_rejected(self):
        with pytest.raises(MalformedTreeError):
            DirNode.from_dict(["not", "a", "dir"])  # type: ignore[arg-type]

    def test_missing_keys_default_to_empty(self):
        assert DirNode.from_dict({"name": "x"}) == DirNode(name="x")

    def test_non_list_children_rejected(self):
        with pytest.raises(MalformedTreeError, match="lists of files and dirs"):
            DirNode.from_dict({"name": "r", "files": 5})
        with pytest.raises(MalformedTreeError):
            DirNode.from_dict({"name": "r", "dirs": {"a": {}}})
