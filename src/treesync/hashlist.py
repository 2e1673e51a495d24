"""Hashlists: name and digest projections of content trees."""

from __future__ import annotations

import logging

from .digest import DEFAULT_DIGEST, DigestFunction, compute_file_digest, files_equal
from .tree import DirNode

logger = logging.getLogger(__name__)


def build_hashlist(tree: DirNode, digest: DigestFunction = DEFAULT_DIGEST) -> DirNode:
    """Project *tree* into a fresh tree of file names and digests.

    Digests are always recomputed from contents, so a stale stored hash
    never leaks into the hashlist.
    """
    hashlist = DirNode(name=tree.name)

    for f in tree.files:
        hashlist.add_file(f.name, hash=compute_file_digest(f, digest))

    for d in tree.dirs:
        hashlist.add_child_dir(build_hashlist(d, digest))

    return hashlist


def contains(
    reference: DirNode, candidate: DirNode, digest: DigestFunction = DEFAULT_DIGEST
) -> bool:
    """Check that every file of *candidate* exists in *reference*.

    Files match on name and digest at the same level. A directory missing
    from *reference* is treated as empty, so empty new directories are
    contained while any file inside one is not.
    """
    for f in candidate.files:
        if not any(files_equal(f, r, digest) for r in reference.files):
            logger.debug("File %r not found in %r", f.name, reference.name)
            return False

    for d in candidate.dirs:
        origin = reference.find_dir(d.name)
        if origin is None:
            origin = DirNode(name=d.name)
        if not contains(origin, d, digest):
            return False

    return True
