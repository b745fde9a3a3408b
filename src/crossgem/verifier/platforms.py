"""
Platform identities for cross-compiled extension artifacts.

A `PlatformDescriptor` is built from one ``version:host`` entry of the cross
compile catalog and derives every platform-dependent fact the verifier
needs: the binutils prefix, the expected container format and the expected
dynamic dependencies and symbol-version floors.
"""

import enum
from pathlib import Path
import re
from typing import Self

from attrs import define, field

from .exceptions import (
    UnparsableVersionError,
    UnsupportedHostError,
    UnsupportedVersionError,
)
from .models import ENTRY_POINT, ExpectationSet
from .versions import compare_versions


class OsFamily(enum.Enum):
    WINDOWS = "windows"
    LINUX = "linux"


class PlatformTag(enum.Enum):
    X64_MINGW32 = "x64-mingw32"
    X86_MINGW32 = "x86-mingw32"
    X86_64_LINUX = "x86_64-linux"
    X86_LINUX = "x86-linux"

    def __str__(self) -> str:
        return self.value


@define(frozen=True, slots=True)
class PlatformTraits:
    family: OsFamily
    toolchain_prefix: str
    target_format: str | None = None
    runtime_dll_template: str | None = None


PLATFORM_TRAITS: dict[PlatformTag, PlatformTraits] = {
    PlatformTag.X64_MINGW32: PlatformTraits(
        family=OsFamily.WINDOWS,
        toolchain_prefix="x86_64-w64-mingw32-",
        target_format="pei-x86-64",
        runtime_dll_template="x64-msvcrt-ruby{suffix}.dll",
    ),
    PlatformTag.X86_MINGW32: PlatformTraits(
        family=OsFamily.WINDOWS,
        toolchain_prefix="i686-w64-mingw32-",
        target_format="pei-i386",
        runtime_dll_template="msvcrt-ruby{suffix}.dll",
    ),
    PlatformTag.X86_64_LINUX: PlatformTraits(
        family=OsFamily.LINUX,
        toolchain_prefix="x86_64-linux-gnu-",
    ),
    PlatformTag.X86_LINUX: PlatformTraits(
        family=OsFamily.LINUX,
        toolchain_prefix="i686-linux-gnu-",
    ),
}

if set(PLATFORM_TRAITS) != set(PlatformTag):
    raise AssertionError(
        f"Platform traits missing for: {set(PlatformTag) - set(PLATFORM_TRAITS)}"
    )

# Order matters: the first matching pattern wins.
HOST_PATTERNS: tuple[tuple[re.Pattern[str], PlatformTag], ...] = (
    (re.compile(r"x86_64.*mingw32"), PlatformTag.X64_MINGW32),
    (re.compile(r"i[3-6]86.*mingw32"), PlatformTag.X86_MINGW32),
    (re.compile(r"x86_64.*linux"), PlatformTag.X86_64_LINUX),
    (re.compile(r"i[3-6]86.*linux"), PlatformTag.X86_LINUX),
)

WINDOWS_BASE_DLLS = ("kernel32.dll", "msvcrt.dll", "ws2_32.dll")
WINDOWS_USER32_SINCE = "2.0.0"
LINUX_PTHREAD_BEFORE = "2.6.0"
LINUX_SYMBOL_VERSION_FLOORS = {"GLIBC": "2.17"}

_SEMANTIC_VERSION_RE = re.compile(r"[^-]+")
_MINOR_VERSION_RE = re.compile(r"\d+\.\d+(?=\.)")


def match_platform(host: str) -> PlatformTag:
    for pattern, tag in HOST_PATTERNS:
        if pattern.match(host):
            return tag
    raise UnsupportedHostError(f"unsupported host: {host}")


@define(frozen=True, slots=True)
class PlatformDescriptor:
    raw_version: str
    raw_host: str
    semantic_version: str = field(init=False, eq=False, repr=False)
    minor_version: str | None = field(init=False, eq=False, repr=False)
    platform: PlatformTag = field(init=False, eq=False)

    def __attrs_post_init__(self) -> None:
        version_match = _SEMANTIC_VERSION_RE.match(self.raw_version)
        if not version_match:
            raise UnparsableVersionError(
                f"Cannot parse a version from {self.raw_version!r}"
            )
        semantic_version = version_match.group(0)
        minor_match = _MINOR_VERSION_RE.match(semantic_version)

        object.__setattr__(self, "semantic_version", semantic_version)
        object.__setattr__(
            self, "minor_version", minor_match.group(0) if minor_match else None
        )
        object.__setattr__(self, "platform", match_platform(self.raw_host))

    @classmethod
    def parse(cls, raw_version: str, raw_host: str) -> Self:
        return cls(raw_version=raw_version.strip(), raw_host=raw_host.strip())

    @property
    def spec_string(self) -> str:
        return f"{self.raw_version}:{self.raw_host}"

    @property
    def traits(self) -> PlatformTraits:
        return PLATFORM_TRAITS[self.platform]

    @property
    def os_family(self) -> OsFamily:
        return self.traits.family

    @property
    def is_windows(self) -> bool:
        return self.os_family is OsFamily.WINDOWS

    @property
    def is_linux(self) -> bool:
        return self.os_family is OsFamily.LINUX

    @property
    def api_version_suffix(self) -> str:
        """``3.1.2`` becomes ``310``, the suffix of the runtime DLL name."""
        if self.minor_version is None:
            raise UnsupportedVersionError(
                f"unsupported version: {self.semantic_version}"
            )
        return self.minor_version.replace(".", "") + "0"

    def toolchain_prefix(self) -> str:
        return self.traits.toolchain_prefix

    def tool(self, name: str) -> str:
        return self.toolchain_prefix() + name

    def expected_format(self) -> str | None:
        return self.traits.target_format

    def runtime_dll(self) -> str | None:
        template = self.traits.runtime_dll_template
        if template is None:
            return None
        return template.format(suffix=self.api_version_suffix)

    def expected_dynamic_libraries(self) -> frozenset[str]:
        match self.os_family:
            case OsFamily.WINDOWS:
                dlls = set(WINDOWS_BASE_DLLS)
                if compare_versions(self.semantic_version, WINDOWS_USER32_SINCE) >= 0:
                    dlls.add("user32.dll")
                dlls.add(self.runtime_dll())
                return frozenset(dlls)
            case OsFamily.LINUX:
                libs = {"libm.so.6", "libc.so.6"}
                if compare_versions(self.semantic_version, LINUX_PTHREAD_BEFORE) < 0:
                    libs.add("libpthread.so.0")
                return frozenset(libs)

    def expected_min_symbol_versions(self) -> dict[str, str] | None:
        if self.is_linux:
            return dict(LINUX_SYMBOL_VERSION_FLOORS)
        return None

    def expectations(self) -> ExpectationSet:
        return ExpectationSet(
            expected_format=self.expected_format(),
            entry_point=ENTRY_POINT,
            expected_libraries=self.expected_dynamic_libraries(),
            expected_min_versions=self.expected_min_symbol_versions(),
        )

    def staged_artifact_path(
        self, stage_dir: Path | str, extension_name: str = "nokogiri"
    ) -> Path:
        """Where the cross build stages the compiled extension for this platform."""
        if self.minor_version is None:
            raise UnsupportedVersionError(
                f"unsupported version: {self.semantic_version}"
            )
        return (
            Path(stage_dir)
            / str(self.platform)
            / "stage"
            / "lib"
            / extension_name
            / self.minor_version
            / f"{extension_name}.so"
        )
