"""Pytest fixtures for the entire crossgem-verifier test suite."""

from pathlib import Path
import subprocess
from typing import Any, Callable

import pytest
from pytest import MonkeyPatch

from crossgem.verifier.platforms import PlatformDescriptor

ASSETS_DIR = Path(__file__).parent / "assets"


@pytest.fixture
def load_dump() -> Callable[[str], str]:
    """Returns the text of a recorded `objdump -p` output from tests/assets."""

    def _load(name: str) -> str:
        return (ASSETS_DIR / f"{name}.dump").read_text()

    return _load


@pytest.fixture
def linux_descriptor() -> PlatformDescriptor:
    return PlatformDescriptor.parse("3.1.2", "x86_64-linux")


@pytest.fixture
def windows_descriptor() -> PlatformDescriptor:
    return PlatformDescriptor.parse("3.1.2", "x86_64-w64-mingw32")


@pytest.fixture
def make_artifact(tmp_path: Path) -> Callable[..., Path]:
    """A factory fixture that creates a placeholder artifact file."""

    def _make(relative: str = "nokogiri.so") -> Path:
        artifact = tmp_path / relative
        artifact.parent.mkdir(parents=True, exist_ok=True)
        artifact.write_bytes(b"\x7fELF placeholder")
        return artifact

    return _make


@pytest.fixture
def fake_objdump(monkeypatch: MonkeyPatch) -> Callable[..., list[list[str]]]:
    """
    Replaces the objdump subprocess with canned output.

    Returns a function that installs the output and gives back the list the
    intercepted commands are recorded into.
    """

    def _install(
        stdout: str, returncode: int = 0, stderr: str = ""
    ) -> list[list[str]]:
        calls: list[list[str]] = []

        def mock_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            calls.append(command)
            return subprocess.CompletedProcess(
                args=command, returncode=returncode, stdout=stdout, stderr=stderr
            )

        monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/bin/{cmd}")
        monkeypatch.setattr("subprocess.run", mock_run)
        return calls

    return _install
