"""Tests for the verifier's command-line interface."""

from pathlib import Path
from typing import Callable

from click.testing import CliRunner
import pytest

from crossgem.verifier.cli import cli

LINUX_DUMP = """
nokogiri.so:     file format elf64-x86-64
  NEEDED               libm.so.6
  NEEDED               libc.so.6
    0x06969197 0x00 03 GLIBC_2.17
"""


@pytest.fixture
def make_sample_project() -> Callable[[Path], Path]:
    """A factory fixture to create a project with a catalog and staged artifacts."""

    def _make_project(root_dir: Path) -> Path:
        (root_dir / "pyproject.toml").write_text(
            '[tool.crossgem]\ncatalog = ".cross_rubies"\nstage_dir = "tmp"\n'
            'gem_full_name = "nokogiri-1.15.0"\n'
        )
        (root_dir / ".cross_rubies").write_text(
            "3.1.2:x86_64-linux\n2.5.9:x86_64-linux\n"
        )
        for minor in ("3.1", "2.5"):
            artifact = root_dir / f"tmp/x86_64-linux/stage/lib/nokogiri/{minor}/nokogiri.so"
            artifact.parent.mkdir(parents=True)
            artifact.write_bytes(b"\x7fELF")
        return root_dir

    return _make_project


def test_cli_verify_success(
    tmp_path: Path,
    fake_objdump: Callable[..., list[list[str]]],
    make_artifact: Callable[..., Path],
) -> None:
    calls = fake_objdump(LINUX_DUMP)
    artifact = make_artifact()

    runner = CliRunner()
    result = runner.invoke(
        cli, ["verify", str(artifact), "--target", "3.1.2:x86_64-linux", "--timeout", "5"]
    )

    assert result.exit_code == 0, result.output
    assert f"✅ {artifact}: Looks good!" in result.output
    assert calls[0][0] == "x86_64-linux-gnu-objdump"


def test_cli_verify_mismatch(
    fake_objdump: Callable[..., list[list[str]]],
    make_artifact: Callable[..., Path],
) -> None:
    fake_objdump(LINUX_DUMP.replace("GLIBC_2.17", "GLIBC_2.28"))
    artifact = make_artifact()

    result = CliRunner().invoke(
        cli, ["verify", str(artifact), "--target", "3.1.2:x86_64-linux"]
    )

    assert result.exit_code != 0
    assert "❌ Verification failed" in result.output
    assert "unexpected symbol version requirements" in result.output
    assert "'GLIBC': '2.28'" in result.output
    assert "'GLIBC': '2.17'" in result.output


def test_cli_verify_invalid_target(make_artifact: Callable[..., Path]) -> None:
    artifact = make_artifact()
    runner = CliRunner()

    result = runner.invoke(cli, ["verify", str(artifact), "--target", "3.1.2:arm64-darwin"])
    assert result.exit_code != 0
    assert "❌ Invalid target: unsupported host: arm64-darwin" in result.output

    result = runner.invoke(cli, ["verify", str(artifact), "--target", "x86_64-linux"])
    assert result.exit_code != 0
    assert "is not of the form VERSION:HOST" in result.output


def test_cli_verify_missing_artifact(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["verify", str(tmp_path / "missing.so"), "--target", "3.1.2:x86_64-linux"]
    )
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_cli_verify_all(
    tmp_path: Path,
    fake_objdump: Callable[..., list[list[str]]],
    make_sample_project: Callable[[Path], Path],
) -> None:
    """2.5.9 still expects libpthread, so only the 3.1 artifact passes."""
    fake_objdump(LINUX_DUMP)
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td_str:
        make_sample_project(Path(td_str))
        result = runner.invoke(cli, ["verify-all"])

    assert result.exit_code != 0
    assert "3.1/nokogiri.so: Looks good!" in result.output
    assert "unexpected library imports" in result.output
    assert "1 of 2 artifacts failed verification" in result.output


def test_cli_verify_all_success(
    tmp_path: Path,
    fake_objdump: Callable[..., list[list[str]]],
    make_sample_project: Callable[[Path], Path],
) -> None:
    fake_objdump(LINUX_DUMP)
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td_str:
        td = make_sample_project(Path(td_str))
        (td / ".cross_rubies").write_text("3.1.2:x86_64-linux\n")
        result = runner.invoke(cli, ["verify-all"])

    assert result.exit_code == 0, result.output
    assert "✅ All 1 artifacts verified." in result.output


def test_cli_verify_all_without_catalog(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        result = runner.invoke(cli, ["verify-all"])
    assert result.exit_code != 0
    assert "Cannot read cross compile catalog" in result.output


def test_cli_list(tmp_path: Path, make_sample_project: Callable[[Path], Path]) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td_str:
        make_sample_project(Path(td_str))
        result = runner.invoke(cli, ["list"])

    assert result.exit_code == 0, result.output
    assert "x86_64-linux" in result.output
    assert "nokogiri/2.5/nokogiri.so" in result.output
    assert "RUBY_CC_VERSION=3.1.2:2.5.9" in result.output


def test_cli_plan(tmp_path: Path, make_sample_project: Callable[[Path], Path]) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td_str:
        make_sample_project(Path(td_str))
        result = runner.invoke(cli, ["plan"])
        override = runner.invoke(cli, ["plan", "--gem", "nokogiri-9.9.9"])

    assert result.exit_code == 0, result.output
    assert "gem:linux => x86_64-linux" in result.output
    assert "gem:windows => -" in result.output
    assert "pkg/nokogiri-1.15.0-x86_64-linux.gem" in result.output
    assert "pkg/nokogiri-9.9.9-x86_64-linux.gem" in override.output


def test_cli_plan_requires_gem_name(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        Path(".cross_rubies").write_text("3.1.2:x86_64-linux\n")
        result = runner.invoke(cli, ["plan"])
    assert result.exit_code != 0
    assert "No gem name given" in result.output


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "crossgem-verify version" in result.output
