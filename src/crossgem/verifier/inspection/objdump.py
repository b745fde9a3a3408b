"""Runs binutils `objdump -p` and extracts the facts the verifier checks."""

import os
from pathlib import Path
import re
import shutil
import subprocess

from pyvider.telemetry import logger

from ..exceptions import ToolInvocationError
from ..models import ENTRY_POINT, ArtifactDump
from ..platforms import OsFamily, PlatformDescriptor

DEFAULT_TOOL_TIMEOUT = 60.0

_FILE_FORMAT_RE = re.compile(r"file format (\S+)")
_NAME_POINTER_HEADER = "[Ordinal/Name Pointer] Table"
_TABLE_ENTRY_RE = re.compile(r"\s*\[\s*\d+\].*?(\S+)\s*$")
_DLL_NAME_RE = re.compile(r"DLL Name: (.*)$", re.MULTILINE)
_NEEDED_RE = re.compile(r"NEEDED\s+(.*)")
_VERSION_REF_RE = re.compile(
    r"0x[\da-f]+ 0x[\da-f]+ \d+ (\w+)_(\d+(?:\.\d+)*)\s*$", re.IGNORECASE | re.MULTILINE
)


def run_objdump(
    tool_path: str, artifact_path: Path | str, *, timeout: float = DEFAULT_TOOL_TIMEOUT
) -> str:
    """Returns the private-headers dump of an artifact, produced with a C locale."""
    if not shutil.which(tool_path):
        raise ToolInvocationError(f"Inspection tool '{tool_path}' not found in PATH.")

    command = [tool_path, "-p", str(artifact_path)]
    env = dict(os.environ, LANG="C", LC_ALL="C")
    logger.info(f"Running command: {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            env=env,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise ToolInvocationError(
            f"Command timed out after {timeout} seconds: {' '.join(command)}"
        ) from e
    except OSError as e:
        raise ToolInvocationError(
            f"Could not start '{tool_path}': {e}"
        ) from e

    if result.returncode != 0:
        raise ToolInvocationError(
            f"Command failed with exit code {result.returncode}.\n"
            f"  Command: {' '.join(command)}\n"
            f"  Stdout:\n{result.stdout.strip()}\n"
            f"  Stderr:\n{result.stderr.strip()}"
        )
    if result.stderr:
        logger.debug("Command stderr", output=result.stderr.strip())
    if not result.stdout.strip():
        raise ToolInvocationError(
            f"Command produced no output: {' '.join(command)}"
        )
    return result.stdout


def _name_pointer_entries(text: str) -> list[str]:
    names: list[str] = []
    in_table = False
    for line in text.splitlines():
        if _NAME_POINTER_HEADER in line:
            in_table = True
            continue
        if not in_table:
            continue
        if not line.strip():
            break
        entry = _TABLE_ENTRY_RE.match(line)
        if entry:
            names.append(entry.group(1))
    return names


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def parse_dump(text: str, family: OsFamily) -> ArtifactDump:
    """
    Extracts the declared format, exports, dynamic dependencies and
    versioned symbol references from `objdump -p` output.

    Windows (PE) dumps list dependencies as ``DLL Name:`` entries, which are
    lower-cased; ELF dumps list them as ``NEEDED`` entries, kept as printed.
    Versioned symbol references are only read from ELF dumps.
    """
    format_match = _FILE_FORMAT_RE.search(text)
    declared_format = format_match.group(1) if format_match else None

    exported = set(_name_pointer_entries(text))
    if ENTRY_POINT.lower() in {name.lower() for name in exported}:
        exported.add(ENTRY_POINT)

    if family is OsFamily.WINDOWS:
        libraries = _unique(
            [name.strip().lower() for name in _DLL_NAME_RE.findall(text)]
        )
        version_refs: list[tuple[str, str]] = []
    else:
        libraries = _unique([name.strip() for name in _NEEDED_RE.findall(text)])
        version_refs = _VERSION_REF_RE.findall(text)

    dump = ArtifactDump(
        declared_format=declared_format,
        exported_symbols=exported,
        required_libraries=libraries,
        versioned_symbol_refs=version_refs,
    )
    logger.debug(
        "Parsed artifact dump",
        declared_format=declared_format,
        libraries=libraries,
        version_refs=len(version_refs),
    )
    return dump


class ObjdumpInspector:
    """Inspects artifacts built for one platform with its cross `objdump`."""

    def __init__(
        self, descriptor: PlatformDescriptor, timeout: float = DEFAULT_TOOL_TIMEOUT
    ) -> None:
        self.descriptor = descriptor
        self.timeout = timeout
        self.tool_path = descriptor.tool("objdump")

    def dump(self, artifact_path: Path | str) -> str:
        return run_objdump(self.tool_path, artifact_path, timeout=self.timeout)

    def inspect(self, artifact_path: Path | str) -> ArtifactDump:
        return parse_dump(self.dump(artifact_path), self.descriptor.os_family)
