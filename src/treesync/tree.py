"""Tree records holding file contents, digests and directory structure."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedTreeError
from .escape import bytes_to_text, text_to_bytes


@dataclass
class FileNode:
    """A file in a content tree.

    Either ``contents`` or ``hash`` may be absent: hashlists and removelists
    carry no payload, and a missing ``hash`` means it is computed on demand.
    """

    name: str
    contents: bytes | None = None
    hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {"name": self.name}
        if self.contents is not None:
            result["contents"] = bytes_to_text(self.contents)
        if self.hash:
            result["hash"] = self.hash
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], require_payload: bool = True) -> FileNode:
        """Deserialize from dictionary.

        With *require_payload* a record carrying neither contents nor hash
        is rejected.
        """
        if not isinstance(data, dict) or "name" not in data:
            raise MalformedTreeError(f"file record without a name: {data!r}")

        contents = None
        if data.get("contents") is not None:
            try:
                contents = text_to_bytes(data["contents"])
            except (AttributeError, UnicodeEncodeError) as e:
                raise MalformedTreeError(
                    f"file {data['name']!r} has undecodable contents"
                ) from e

        file_hash = data.get("hash") or None
        if require_payload and contents is None and file_hash is None:
            raise MalformedTreeError(f"file {data['name']!r} has neither contents nor hash")

        return cls(name=data["name"], contents=contents, hash=file_hash)


@dataclass
class DirNode:
    """A directory holding files and subdirectories in insertion order."""

    name: str = ""
    files: list[FileNode] = field(default_factory=list)
    dirs: list[DirNode] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.dirs

    def find_dir(self, name: str) -> DirNode | None:
        """Return the first subdirectory called *name*, if any."""
        for d in self.dirs:
            if d.name == name:
                return d
        return None

    def find_file(self, name: str) -> FileNode | None:
        for f in self.files:
            if f.name == name:
                return f
        return None

    def add_file(
        self, name: str, contents: bytes | None = None, hash: str | None = None
    ) -> FileNode:
        node = FileNode(name=name, contents=contents, hash=hash)
        self.files.append(node)
        return node

    def add_dir(self, name: str) -> DirNode:
        node = DirNode(name=name)
        self.dirs.append(node)
        return node

    def add_child_dir(self, node: DirNode) -> DirNode:
        self.dirs.append(node)
        return node

    def iter_files(self, prefix: str = "") -> Iterator[tuple[str, FileNode]]:
        """Yield ``(relative_path, file)`` for every file below this directory."""
        for f in self.files:
            yield prefix + f.name, f
        for d in self.dirs:
            yield from d.iter_files(prefix + d.name + "/")

    def depth(self) -> int:
        """Number of directory levels, counting this one."""
        return 1 + max((d.depth() for d in self.dirs), default=0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "name": self.name,
            "files": [f.to_dict() for f in self.files],
            "dirs": [d.to_dict() for d in self.dirs],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], require_payload: bool = True) -> DirNode:
        """Deserialize from dictionary."""
        if not isinstance(data, dict):
            raise MalformedTreeError(f"directory record must be a mapping: {data!r}")
        files = data.get("files", [])
        dirs = data.get("dirs", [])
        if not isinstance(files, list) or not isinstance(dirs, list):
            raise MalformedTreeError(
                f"directory {data.get('name', '')!r} must hold lists of files and dirs"
            )
        return cls(
            name=data.get("name", ""),
            files=[FileNode.from_dict(f, require_payload=require_payload) for f in files],
            dirs=[cls.from_dict(d, require_payload=require_payload) for d in dirs],
        )
