"""Name validation for trees that will be materialized on real filesystems.

Names are checked against the strictest rules of the supported platforms:
Windows device names, characters reserved by common shells and filesystems,
and byte sequences that do not survive a UTF-8 round trip.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from enum import StrEnum

from .errors import DuplicateNameError, InvalidFilenameError, InvalidIdentifierError
from .tree import DirNode

MAX_FILENAME_BYTES = 255

# Reserved DOS device names, matched against the stem before the first dot.
# "CON.foo.bar" still refers to CON on Windows.
DOS_DEVICE_NAMES = frozenset(
    {
        "NUL",
        "CON",
        "AUX",
        "PRN",
        "CONIN$",
        "CONOUT$",
        *(f"COM{i}" for i in range(1, 10)),
        *(f"LPT{i}" for i in range(1, 10)),
    }
)

ILLEGAL_FILENAME_CHARS = frozenset(' "*/:<>?\\|~\x7f')

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_-]+")

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class CheckMode(StrEnum):
    """How tree checks report violations."""

    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a tree-wide name check.

    In fail-fast mode ``violations`` holds at most the first offending path.
    """

    ok: bool
    violations: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.ok


class AddonType(StrEnum):
    """Kinds of content a published tree can declare."""

    UNKNOWN = "unknown"
    CORE = "core"
    CAMPAIGN = "campaign"
    SCENARIO = "scenario"
    CAMPAIGN_SP_MP = "campaign_sp_mp"
    CAMPAIGN_MP = "campaign_mp"
    SCENARIO_MP = "scenario_mp"
    MAP_PACK = "map_pack"
    ERA = "era"
    FACTION = "faction"
    MOD_MP = "mod_mp"
    MEDIA = "media"
    OTHER = "other"


def get_addon_type(name: str) -> AddonType:
    """Map a type string to an AddonType; empty or unrecognized gives UNKNOWN."""
    try:
        return AddonType(name)
    except ValueError:
        return AddonType.UNKNOWN


def get_addon_type_string(addon_type: AddonType) -> str:
    return AddonType(addon_type).value


def ascii_lower(text: str) -> str:
    """Lowercase ASCII letters only, independent of locale."""
    return text.translate(_ASCII_LOWER)


def identifier_legal(name: str) -> bool:
    """Check that *name* is non-empty and only uses [A-Za-z0-9_-]."""
    if isinstance(name, bytes):
        try:
            name = name.decode("ascii")
        except UnicodeDecodeError:
            return False
    if not isinstance(name, str):
        return False
    return _IDENTIFIER_RE.fullmatch(name) is not None


def require_identifier(name: str) -> str:
    """Return *name* unchanged, raising if it is not a legal identifier."""
    if not identifier_legal(name):
        raise InvalidIdentifierError(name)
    return name


def _is_illegal_codepoint(c: str) -> bool:
    cp = ord(c)
    return (
        c in ILLEGAL_FILENAME_CHARS
        or cp < 0x20  # C0 controls
        or 0x80 <= cp < 0xA0  # C1 controls
        or 0xD800 <= cp < 0xE000  # surrogates
    )


def filename_illegal_reason(name: str | bytes) -> str | None:
    """Return the first rule *name* breaks, or None if it is a legal filename."""
    if isinstance(name, str):
        # surrogatepass keeps lone surrogates so they fail the round trip below
        raw = name.encode("utf-8", "surrogatepass")
    elif isinstance(name, bytes):
        raw = name
    else:
        return "not-a-string"

    if not raw:
        return "empty"
    if raw.endswith(b"."):
        return "trailing-dot"
    if b".." in raw:
        return "double-dot"
    if len(raw) > MAX_FILENAME_BYTES:
        return "too-long"

    # bytes.upper() only folds ASCII, whatever the locale
    stem = raw.split(b".", 1)[0].upper()
    if stem.decode("latin-1") in DOS_DEVICE_NAMES:
        return "reserved-device"

    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        return "invalid-utf8"
    if decoded.encode("utf-8") != raw:
        return "invalid-utf8"

    if any(_is_illegal_codepoint(c) for c in decoded):
        return "illegal-character"
    return None


def filename_legal(name: str | bytes) -> bool:
    """Check that *name* is safe to use as a file or directory name."""
    return filename_illegal_reason(name) is None


def _check_names(dir_node: DirNode, prefix: str, bad: list[str], collect: bool) -> bool:
    if prefix:
        prefix += "/"

    for f in dir_node.files:
        if not filename_legal(f.name):
            bad.append(prefix + str(f.name))
            if not collect:
                return False

    for d in dir_node.dirs:
        new_prefix = prefix + str(d.name)
        if not filename_legal(d.name):
            bad.append(new_prefix + "/")
            if not collect:
                return False
        if not _check_names(d, new_prefix, bad, collect) and not collect:
            return False

    return not bad


def check_tree_names_legal(
    tree: DirNode, mode: CheckMode = CheckMode.FAIL_FAST
) -> CheckResult:
    """Check every file and directory name below *tree*.

    The root's own name is not checked; paths are reported relative to it,
    with a trailing slash for directories.
    """
    bad: list[str] = []
    ok = _check_names(tree, "", bad, mode == CheckMode.COLLECT_ALL)
    return CheckResult(ok=ok, violations=tuple(bad))


def _check_duplicates(dir_node: DirNode, prefix: str, bad: list[str], collect: bool) -> bool:
    # lowercase name -> (already reported, original path)
    seen: dict[str, tuple[bool, str]] = {}

    def record(name: str) -> bool:
        key = ascii_lower(name)
        with_prefix = prefix + name
        if key not in seen:
            seen[key] = (False, with_prefix)
            return True
        if not collect:
            bad.append(with_prefix)
            return False
        printed, original = seen[key]
        if not printed:
            bad.append(original)
            seen[key] = (True, original)
        bad.append(with_prefix)
        return True

    for f in dir_node.files:
        if not record(str(f.name)):
            return False

    for d in dir_node.dirs:
        if not record(str(d.name)):
            return False
        if not _check_duplicates(d, prefix + str(d.name) + "/", bad, collect) and not collect:
            return False

    return not bad


def check_case_insensitive_duplicates(
    tree: DirNode, mode: CheckMode = CheckMode.FAIL_FAST
) -> CheckResult:
    """Find names that collide within a directory when case is ignored.

    Files and directories share one namespace per level. In collect-all mode
    the first holder of a name is reported once, followed by every later
    collision.
    """
    bad: list[str] = []
    ok = _check_duplicates(tree, "", bad, mode == CheckMode.COLLECT_ALL)
    return CheckResult(ok=ok, violations=tuple(bad))


def validate_tree(
    tree: DirNode,
    mode: CheckMode = CheckMode.FAIL_FAST,
    check_duplicates: bool = True,
) -> None:
    """Raise if *tree* contains illegal or case-colliding names."""
    names = check_tree_names_legal(tree, mode)
    if not names:
        raise InvalidFilenameError(names.violations)
    if check_duplicates:
        dupes = check_case_insensitive_duplicates(tree, mode)
        if not dupes:
            raise DuplicateNameError(dupes.violations)
