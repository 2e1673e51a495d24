"""Content digests and file equality."""

from __future__ import annotations

import base64
import hashlib
from collections.abc import Callable

from .errors import MalformedTreeError
from .tree import FileNode

DigestFunction = Callable[[bytes], str]


def md5_base64(content: bytes) -> str:
    """MD5 digest rendered as standard base64 (24 characters)."""
    return base64.b64encode(hashlib.md5(content).digest()).decode("ascii")


def sha256_hex(content: bytes) -> str:
    """SHA-256 digest rendered as lowercase hex."""
    return hashlib.sha256(content).hexdigest()


DIGEST_FUNCTIONS: dict[str, DigestFunction] = {
    "md5": md5_base64,
    "sha256": sha256_hex,
}

DEFAULT_DIGEST: DigestFunction = md5_base64


def get_digest_function(name: str) -> DigestFunction:
    """Look up a digest function by algorithm name."""
    try:
        return DIGEST_FUNCTIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown digest algorithm: {name!r} (expected one of {', '.join(DIGEST_FUNCTIONS)})"
        ) from None


def compute_file_digest(file: FileNode, digest: DigestFunction = DEFAULT_DIGEST) -> str:
    """Digest the file's contents, ignoring any stored hash."""
    if file.contents is None:
        raise MalformedTreeError(f"file {file.name!r} has no contents to digest")
    return digest(file.contents)


def resolve_digest(file: FileNode, digest: DigestFunction = DEFAULT_DIGEST) -> str:
    """Return the stored hash if present, else digest the contents.

    The file node is never updated with the computed value.
    """
    if file.hash:
        return file.hash
    return compute_file_digest(file, digest)


def files_equal(a: FileNode, b: FileNode, digest: DigestFunction = DEFAULT_DIGEST) -> bool:
    """Two files are equal when both name and digest match exactly."""
    return a.name == b.name and resolve_digest(a, digest) == resolve_digest(b, digest)
