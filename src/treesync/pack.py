"""Update packs: the delta that turns one content tree into another."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from .digest import DEFAULT_DIGEST, DigestFunction, files_equal, resolve_digest
from .errors import HashMismatchError, MalformedTreeError
from .hashlist import contains
from .tree import DirNode, FileNode

logger = logging.getLogger(__name__)


@dataclass
class UpdatePack:
    """Files to delete (``removelist``) and files to create (``addlist``).

    Both sides are shaped like the trees they were computed from. Only
    ``addlist`` files carry contents and digests.
    """

    removelist: DirNode = field(default_factory=DirNode)
    addlist: DirNode = field(default_factory=DirNode)

    @property
    def is_empty(self) -> bool:
        return self.removelist.is_empty and self.addlist.is_empty

    def to_dict(self) -> dict[str, Any]:
        return {
            "removelist": self.removelist.to_dict(),
            "addlist": self.addlist.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UpdatePack:
        if not isinstance(data, dict):
            raise MalformedTreeError(f"update pack must be a mapping: {data!r}")
        return cls(
            removelist=DirNode.from_dict(data.get("removelist", {}), require_payload=False),
            addlist=DirNode.from_dict(data.get("addlist", {}), require_payload=False),
        )


def difference(
    output: DirNode,
    from_tree: DirNode,
    to_tree: DirNode,
    with_content: bool,
    digest: DigestFunction = DEFAULT_DIGEST,
) -> bool:
    """Write into *output* every file of *to_tree* missing from *from_tree*.

    Directories are recursed into, with an absent directory standing in as
    empty, and only attached when they hold changes. Returns whether
    anything was written at this level or below.
    """
    output.name = to_tree.name
    has_changes = False

    for f in to_tree.files:
        if any(files_equal(f, d, digest) for d in from_tree.files):
            continue
        if with_content:
            output.add_file(f.name, contents=f.contents, hash=resolve_digest(f, digest))
        else:
            output.add_file(f.name)
        has_changes = True

    for d in to_tree.dirs:
        origin = from_tree.find_dir(d.name)
        if origin is None:
            origin = DirNode(name=d.name)
        sub = DirNode()
        if difference(sub, origin, d, with_content, digest):
            output.add_child_dir(sub)
            has_changes = True
        else:
            logger.debug("Pruning unchanged directory %r", d.name)

    return has_changes


def make_update_pack(
    from_tree: DirNode, to_tree: DirNode, digest: DigestFunction = DEFAULT_DIGEST
) -> UpdatePack:
    """Compute the pack that turns *from_tree* into *to_tree*.

    Renames are not detected: a renamed file shows up as a removal of the
    old name plus an addition of the new one.
    """
    pack = UpdatePack()
    difference(pack.removelist, to_tree, from_tree, with_content=False, digest=digest)
    difference(pack.addlist, from_tree, to_tree, with_content=True, digest=digest)
    logger.debug(
        "Update pack %r -> %r: %d to remove, %d to add",
        from_tree.name,
        to_tree.name,
        sum(1 for _ in pack.removelist.iter_files()),
        sum(1 for _ in pack.addlist.iter_files()),
    )
    return pack


def verify_pack(pack: UpdatePack, digest: DigestFunction = DEFAULT_DIGEST) -> None:
    """Check that every addlist file's contents match its shipped digest."""
    for path, f in pack.addlist.iter_files():
        if f.contents is None or not f.hash:
            continue
        actual = digest(f.contents)
        if actual != f.hash:
            raise HashMismatchError(path, f.hash, actual)


def _remove_entries(target: DirNode, removelist: DirNode) -> None:
    names = {f.name for f in removelist.files}
    target.files = [f for f in target.files if f.name not in names]

    for d in removelist.dirs:
        sub = target.find_dir(d.name)
        if sub is None:
            continue
        _remove_entries(sub, d)
        if sub.is_empty:
            target.dirs.remove(sub)


def _add_entries(target: DirNode, addlist: DirNode) -> None:
    for f in addlist.files:
        new_file = FileNode(name=f.name, contents=f.contents, hash=f.hash)
        # an empty directory never reaches the removelist, so clear it here
        shadowed = target.find_dir(f.name)
        if shadowed is not None and shadowed.is_empty:
            target.dirs.remove(shadowed)
        existing = target.find_file(f.name)
        if existing is None:
            target.files.append(new_file)
        else:
            target.files[target.files.index(existing)] = new_file

    for d in addlist.dirs:
        sub = target.find_dir(d.name)
        if sub is None:
            sub = target.add_dir(d.name)
        _add_entries(sub, d)


def apply_update_pack(tree: DirNode, pack: UpdatePack) -> DirNode:
    """Return a copy of *tree* with *pack* applied.

    Removals run first so a file listed on both sides ends up with the
    new contents.
    """
    result = copy.deepcopy(tree)
    _remove_entries(result, pack.removelist)
    _add_entries(result, pack.addlist)
    if pack.addlist.name:
        result.name = pack.addlist.name
    return result


def trees_equivalent(a: DirNode, b: DirNode, digest: DigestFunction = DEFAULT_DIGEST) -> bool:
    """Check that *a* and *b* hold the same files, ignoring empty directories."""
    return contains(a, b, digest) and contains(b, a, digest)
