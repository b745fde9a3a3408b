"""Ordering of dotted-numeric version strings such as ``2.17`` or ``3.1.2``."""

from collections.abc import Iterable

from .exceptions import UnparsableVersionError


def version_key(version: str) -> tuple[int, ...]:
    """
    Returns the numeric components of a dotted version.

    Keys compare component by component; a key that is a strict prefix of
    another sorts first, so ``2.17`` < ``2.17.0`` and ``2.9`` < ``2.10.1``.
    """
    parts = version.strip().split(".")
    if not all(part.isdecimal() for part in parts):
        raise UnparsableVersionError(f"Not a dotted-numeric version: {version!r}")
    return tuple(int(part) for part in parts)


def compare_versions(left: str, right: str) -> int:
    left_key, right_key = version_key(left), version_key(right)
    return (left_key > right_key) - (left_key < right_key)


def version_at_least(version: str, floor: str) -> bool:
    return compare_versions(version, floor) >= 0


def max_version(versions: Iterable[str]) -> str:
    candidates = list(versions)
    if not candidates:
        raise ValueError("max_version() requires at least one version")
    return max(candidates, key=version_key)
