"""
Renders the per-platform scripts a containerized cross build would run.

Nothing here executes a build; the plan only describes which artifacts the
build stages and which command produces each platform's native gem.
"""

from pathlib import Path

import jinja2
from attrs import define, field

from .catalog import CrossCompileCatalog
from .platforms import PlatformDescriptor, PlatformTag

_TEMPLATE_DIR = Path(__file__).parent / "templates"


def _get_template_env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


@define(frozen=True)
class PlatformBuild:
    platform: PlatformTag
    script: str
    artifacts: tuple[Path, ...] = field(factory=tuple)


@define(frozen=True)
class BuildPlan:
    ruby_cc_version: str
    groups: dict[str, tuple[PlatformTag, ...]]
    builds: tuple[PlatformBuild, ...]

    def build_for(self, platform: PlatformTag) -> PlatformBuild:
        for build in self.builds:
            if build.platform is platform:
                return build
        raise KeyError(str(platform))


def render_build_script(
    platform: PlatformTag, gem_full_name: str, ruby_cc_version: str
) -> str:
    template = _get_template_env().get_template("native_gem.sh.j2")
    return template.render(
        platform=str(platform),
        gem_full_name=gem_full_name,
        ruby_cc_version=ruby_cc_version,
    )


def _artifacts(
    descriptors: list[PlatformDescriptor], stage_dir: Path, extension_name: str
) -> tuple[Path, ...]:
    return tuple(d.staged_artifact_path(stage_dir, extension_name) for d in descriptors)


def build_plan(
    catalog: CrossCompileCatalog,
    gem_full_name: str,
    stage_dir: Path | str,
    extension_name: str = "nokogiri",
) -> BuildPlan:
    ruby_cc_version = catalog.ruby_cc_version()
    builds = tuple(
        PlatformBuild(
            platform=platform,
            script=render_build_script(platform, gem_full_name, ruby_cc_version),
            artifacts=_artifacts(
                catalog.for_platform(platform), Path(stage_dir), extension_name
            ),
        )
        for platform in catalog.platforms()
    )
    return BuildPlan(
        ruby_cc_version=ruby_cc_version,
        groups={
            "native": tuple(catalog.platforms()),
            "windows": tuple(catalog.windows_platforms()),
            "linux": tuple(catalog.linux_platforms()),
        },
        builds=builds,
    )
