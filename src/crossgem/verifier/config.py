"""Reads verifier settings from the ``[tool.crossgem]`` table of pyproject.toml."""

from pathlib import Path
import tomllib
from typing import Any, Self

from attrs import define

from .exceptions import ConfigurationError

DEFAULT_MANIFEST = "pyproject.toml"


@define(frozen=True, slots=True)
class VerifierConfig:
    catalog_path: Path
    stage_dir: Path
    extension_name: str = "nokogiri"
    tool_timeout: float = 60.0
    gem_full_name: str | None = None

    @classmethod
    def defaults(cls, root: Path) -> Self:
        return cls(catalog_path=root / ".cross_rubies", stage_dir=root / "tmp")

    @classmethod
    def from_table(cls, table: dict[str, Any], root: Path) -> Self:
        timeout = table.get("tool_timeout", 60.0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ConfigurationError(
                f"'tool_timeout' must be a number, got {timeout!r}."
            )
        if timeout <= 0:
            raise ConfigurationError(f"'tool_timeout' must be positive, got {timeout}.")

        for key in ("catalog", "stage_dir", "extension_name", "gem_full_name"):
            value = table.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"'{key}' must be a string, got {value!r}.")

        return cls(
            catalog_path=root / table.get("catalog", ".cross_rubies"),
            stage_dir=root / table.get("stage_dir", "tmp"),
            extension_name=table.get("extension_name", "nokogiri"),
            tool_timeout=float(timeout),
            gem_full_name=table.get("gem_full_name"),
        )


def load_config(manifest_path: Path | str = DEFAULT_MANIFEST) -> VerifierConfig:
    """
    Loads settings relative to the manifest's directory. A missing manifest
    or a manifest without a ``[tool.crossgem]`` table yields the defaults.
    """
    manifest = Path(manifest_path)
    root = manifest.parent
    if not manifest.exists():
        return VerifierConfig.defaults(root)

    try:
        with manifest.open("rb") as f:
            pyproject_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {manifest}: {e}") from e

    crossgem_conf = pyproject_data.get("tool", {}).get("crossgem", {})
    if not isinstance(crossgem_conf, dict):
        raise ConfigurationError("[tool.crossgem] must be a table.")
    return VerifierConfig.from_table(crossgem_conf, root)
