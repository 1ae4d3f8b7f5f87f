"""
    Tolerant dotted-version parsing and ordering.

    "3.10" == "3.10.0", "3.9.12" < "3.10.0", and suffixes such as "rc1" or
    "(default, ...)" are ignored for ordering rather than rejected.
"""
import logging
import re
from itertools import zip_longest

from core.errors import VersionParseError

logger = logging.getLogger(__name__)

# Leading dotted numeric run, with an optional "v" prefix ("v2.43.0")
_LEADING_VERSION = re.compile(r"[vV]?(\d+(?:\.\d+)*)")


def parse_version(text) -> tuple[int, ...]:
    """
    Parse the leading dotted numeric part of a version string.

    Raises VersionParseError when the (stripped) string does not start with a number.
    """
    if not isinstance(text, str):
        raise VersionParseError(f"version must be a string, got {type(text).__name__}")

    match = _LEADING_VERSION.match(text.strip())
    if match is None:
        raise VersionParseError(f"unparsable version: {text!r}")

    return tuple(int(part) for part in match.group(1).split("."))


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1. Missing trailing components count as zero."""
    left = parse_version(a)
    right = parse_version(b)

    for x, y in zip_longest(left, right, fillvalue=0):
        if x != y:
            return -1 if x < y else 1
    return 0


def version_satisfies(actual, minimum) -> bool:
    """Fail-closed `actual >= minimum`: anything unparsable is treated as not satisfied."""
    try:
        return compare_versions(actual, minimum) >= 0
    except VersionParseError as e:
        logger.debug("Version comparison %r >= %r not satisfied: %s", actual, minimum, e)
        return False


def extract_version(output: str, pattern: str) -> str | None:
    """Pull a version out of tool output using group 1 of `pattern`."""
    if not output:
        return None
    match = re.search(pattern, output)
    if match is None:
        return None
    return match.group(1).strip() or None
