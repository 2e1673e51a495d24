"""Tests for digest resolution and file equality."""

import pytest

from treesync.digest import (
    files_equal,
    get_digest_function,
    md5_base64,
    resolve_digest,
    sha256_hex,
)
from treesync.errors import MalformedTreeError
from treesync.tree import FileNode

EMPTY_MD5 = "1B2M2Y8AsgTpgAmY7PhCfg=="
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestDigestFunctions:
    """Tests for the digest primitives."""

    def test_md5_base64(self):
        assert md5_base64(b"") == EMPTY_MD5
        assert len(md5_base64(b"anything")) == 24

    def test_sha256_hex(self):
        assert sha256_hex(b"") == EMPTY_SHA256

    def test_lookup(self):
        assert get_digest_function("md5") is md5_base64
        assert get_digest_function("sha256") is sha256_hex

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError, match="Unknown digest algorithm"):
            get_digest_function("crc32")


class TestResolveDigest:
    """Tests for stored-or-computed digests."""

    def test_stored_hash_wins(self):
        f = FileNode("a.txt", contents=b"", hash="stored")
        assert resolve_digest(f) == "stored"

    def test_computed_when_missing(self):
        f = FileNode("a.txt", contents=b"")
        assert resolve_digest(f) == EMPTY_MD5

    def test_empty_hash_is_recomputed(self):
        f = FileNode("a.txt", contents=b"", hash="")
        assert resolve_digest(f) == EMPTY_MD5

    def test_does_not_mutate(self):
        f = FileNode("a.txt", contents=b"data")
        resolve_digest(f)
        assert f.hash is None

    def test_custom_digest(self):
        f = FileNode("a.txt", contents=b"")
        assert resolve_digest(f, sha256_hex) == EMPTY_SHA256

    def test_no_contents_no_hash(self):
        with pytest.raises(MalformedTreeError):
            resolve_digest(FileNode("a.txt"))


class TestFilesEqual:
    """Tests for name + digest equality."""

    def test_same_name_same_content(self):
        assert files_equal(FileNode("a", b"x"), FileNode("a", b"x"))

    def test_stored_hash_matches_contents(self):
        assert files_equal(FileNode("a", b"x"), FileNode("a", hash=md5_base64(b"x")))

    def test_different_content(self):
        assert not files_equal(FileNode("a", b"x"), FileNode("a", b"y"))

    def test_name_is_case_sensitive(self):
        assert not files_equal(FileNode("a", b"x"), FileNode("A", b"x"))

    def test_name_mismatch_skips_digest(self):
        # no payload on either side, but names already differ
        assert not files_equal(FileNode("a"), FileNode("b"))
