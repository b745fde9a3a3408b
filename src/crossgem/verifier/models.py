"""Structured facts about inspected artifacts and what they are checked against."""

from pathlib import Path
from typing import TYPE_CHECKING

from attrs import define, field

from .versions import max_version

if TYPE_CHECKING:
    from .exceptions import VerificationError
    from .platforms import PlatformDescriptor

# Initialization function every compiled extension must export.
ENTRY_POINT = "Init_nokogiri"


@define(frozen=True, slots=True)
class ArtifactDump:
    declared_format: str | None = None
    exported_symbols: frozenset[str] = field(factory=frozenset, converter=frozenset)
    required_libraries: tuple[str, ...] = field(factory=tuple, converter=tuple)
    versioned_symbol_refs: tuple[tuple[str, str], ...] = field(
        factory=tuple, converter=tuple
    )

    @property
    def library_set(self) -> frozenset[str]:
        return frozenset(self.required_libraries)

    def exports(self, symbol: str) -> bool:
        return symbol in self.exported_symbols

    def symbol_version_floors(self) -> dict[str, str]:
        """Highest referenced version per library family, e.g. ``{"GLIBC": "2.17"}``."""
        by_family: dict[str, list[str]] = {}
        for family, version in self.versioned_symbol_refs:
            by_family.setdefault(family, []).append(version)
        return {family: max_version(versions) for family, versions in by_family.items()}


@define(frozen=True)
class ExpectationSet:
    expected_format: str | None
    entry_point: str
    expected_libraries: frozenset[str]
    expected_min_versions: dict[str, str] | None = None


@define(frozen=True)
class VerificationReport:
    descriptor: "PlatformDescriptor"
    artifact: Path
    dump: ArtifactDump

    def summary(self) -> str:
        return f"{self.artifact}: Looks good!"


@define(frozen=True)
class VerificationOutcome:
    descriptor: "PlatformDescriptor"
    artifact: Path
    report: VerificationReport | None = None
    error: "VerificationError | None" = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None
