"""Loads the list of cross-compile targets from a ``version:host`` file."""

from collections.abc import Iterable, Iterator
from pathlib import Path
import re
from typing import Self

from attrs import define, field

from .exceptions import ConfigurationError
from .platforms import OsFamily, PlatformDescriptor, PlatformTag

_ENTRY_RE = re.compile(r"([^#]+):([^#]+)")


@define(frozen=True)
class CrossCompileCatalog:
    """Distinct platform descriptors, kept in the order they first appear."""

    descriptors: tuple[PlatformDescriptor, ...] = field(factory=tuple)

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[PlatformDescriptor]) -> Self:
        return cls(descriptors=tuple(dict.fromkeys(descriptors)))

    def __iter__(self) -> Iterator[PlatformDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self.descriptors

    def platforms(self) -> list[PlatformTag]:
        return list(dict.fromkeys(d.platform for d in self.descriptors))

    def windows_platforms(self) -> list[PlatformTag]:
        return self._platforms_of(OsFamily.WINDOWS)

    def linux_platforms(self) -> list[PlatformTag]:
        return self._platforms_of(OsFamily.LINUX)

    def _platforms_of(self, family: OsFamily) -> list[PlatformTag]:
        return list(
            dict.fromkeys(d.platform for d in self.descriptors if d.os_family is family)
        )

    def for_platform(self, platform: PlatformTag) -> list[PlatformDescriptor]:
        return [d for d in self.descriptors if d.platform is platform]

    def ruby_cc_version(self) -> str:
        """Colon-joined distinct versions, the value passed as RUBY_CC_VERSION."""
        return ":".join(dict.fromkeys(d.semantic_version for d in self.descriptors))


def parse_catalog(lines: Iterable[str]) -> CrossCompileCatalog:
    descriptors = []
    for line in lines:
        content = line.split("#", 1)[0]
        entry = _ENTRY_RE.match(content)
        if not entry or not entry.group(2).strip():
            continue
        descriptors.append(PlatformDescriptor.parse(entry.group(1), entry.group(2)))
    return CrossCompileCatalog.from_descriptors(descriptors)


def load_catalog(path: Path | str) -> CrossCompileCatalog:
    catalog_path = Path(path)
    try:
        text = catalog_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read cross compile catalog at {catalog_path}: {e}"
        ) from e
    return parse_catalog(text.splitlines())
