"""The `crossgem-verify` command-line interface."""

import importlib.metadata
from pathlib import Path

import click

from .catalog import CrossCompileCatalog, load_catalog, parse_catalog
from .config import DEFAULT_MANIFEST, VerifierConfig, load_config
from .exceptions import ConfigurationError, DescriptorError, VerificationError
from .plan import build_plan
from .platforms import PlatformDescriptor
from .verifier import Verifier

try:
    __version__ = importlib.metadata.version("crossgem-verifier")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"


def _load_settings(
    manifest: str, catalog_path: str | None, stage_dir: str | None = None
) -> tuple[VerifierConfig, CrossCompileCatalog, Path]:
    config = load_config(manifest)
    final_catalog = Path(catalog_path) if catalog_path else config.catalog_path
    final_stage_dir = Path(stage_dir) if stage_dir else config.stage_dir
    return config, load_catalog(final_catalog), final_stage_dir


def _parse_target(target: str) -> PlatformDescriptor:
    catalog = parse_catalog([target])
    if len(catalog) != 1:
        raise click.UsageError(
            f"Target '{target}' is not of the form VERSION:HOST."
        )
    return next(iter(catalog))


manifest_option = click.option(
    "--manifest",
    default=DEFAULT_MANIFEST,
    type=click.Path(dir_okay=False, resolve_path=True),
    help="Path to the pyproject.toml holding the [tool.crossgem] table.",
)
catalog_option = click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Override the cross compile catalog path from pyproject.toml.",
)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="crossgem-verify",
    message="%(prog)s version %(version)s",
)
def cli() -> None:
    """Verifies cross-compiled native extension artifacts."""
    pass


@cli.command("verify")
@click.argument(
    "artifact",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
)
@click.option(
    "--target",
    required=True,
    help="The VERSION:HOST pair the artifact was built for, e.g. 3.1.2:x86_64-linux.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for objdump. Defaults to the configured tool_timeout.",
)
@manifest_option
def verify_command(
    artifact: str, target: str, timeout: float | None, manifest: str
) -> None:
    """Verifies one compiled artifact against its target platform."""
    try:
        config = load_config(manifest)
        descriptor = _parse_target(target)
        click.echo(
            f"🔍 Verifying '{artifact}' for {descriptor.platform} "
            f"(Ruby {descriptor.semantic_version})..."
        )
        verifier = Verifier(timeout=timeout or config.tool_timeout)
        report = verifier.verify(descriptor, artifact)
    except ConfigurationError as e:
        click.secho(f"❌ Invalid configuration: {e}", fg="red", err=True)
        raise click.Abort() from e
    except DescriptorError as e:
        click.secho(f"❌ Invalid target: {e}", fg="red", err=True)
        raise click.Abort() from e
    except VerificationError as e:
        click.secho(f"❌ Verification failed: {e}", fg="red", err=True)
        raise click.Abort() from e

    click.secho(f"✅ {report.summary()}", fg="green")


@cli.command("verify-all")
@manifest_option
@catalog_option
@click.option(
    "--stage-dir",
    type=click.Path(file_okay=False, resolve_path=True),
    help="Override the staging directory from pyproject.toml.",
)
def verify_all_command(
    manifest: str, catalog_path: str | None, stage_dir: str | None
) -> None:
    """Verifies the staged artifact of every catalog entry."""
    try:
        config, catalog, final_stage_dir = _load_settings(
            manifest, catalog_path, stage_dir
        )
    except (ConfigurationError, DescriptorError) as e:
        click.secho(f"❌ Could not load catalog: {e}", fg="red", err=True)
        raise click.Abort() from e

    if not len(catalog):
        click.secho("i️ Catalog is empty, nothing to verify.", fg="yellow")
        return

    verifier = Verifier(timeout=config.tool_timeout)
    try:
        outcomes = verifier.verify_catalog(
            catalog, final_stage_dir, config.extension_name
        )
    except DescriptorError as e:
        click.secho(f"❌ Invalid catalog entry: {e}", fg="red", err=True)
        raise click.Abort() from e

    for outcome in outcomes:
        if outcome.ok:
            click.secho(f"✅ {outcome.report.summary()}", fg="green")
        else:
            click.secho(f"❌ {outcome.error}", fg="red", err=True)

    failures = [outcome for outcome in outcomes if not outcome.ok]
    if failures:
        click.secho(
            f"❌ {len(failures)} of {len(outcomes)} artifacts failed verification.",
            fg="red",
            err=True,
        )
        raise click.Abort()
    click.secho(f"✅ All {len(outcomes)} artifacts verified.", fg="green")


@cli.command("list")
@manifest_option
@catalog_option
def list_command(manifest: str, catalog_path: str | None) -> None:
    """Lists the cross compile targets and where their artifacts are staged."""
    try:
        config, catalog, stage_dir = _load_settings(manifest, catalog_path)
        artifacts = [
            descriptor.staged_artifact_path(stage_dir, config.extension_name)
            for descriptor in catalog
        ]
    except (ConfigurationError, DescriptorError) as e:
        click.secho(f"❌ Could not load catalog: {e}", fg="red", err=True)
        raise click.Abort() from e

    for descriptor, artifact in zip(catalog, artifacts):
        click.echo(
            f"{descriptor.semantic_version:<10} {descriptor.raw_host:<28} "
            f"{descriptor.platform!s:<14} {artifact}"
        )
    click.echo(f"RUBY_CC_VERSION={catalog.ruby_cc_version()}")


@cli.command("plan")
@click.option(
    "--gem",
    "gem_full_name",
    help="Full gem name and version, e.g. nokogiri-1.15.0. Overrides gem_full_name.",
)
@manifest_option
@catalog_option
def plan_command(
    gem_full_name: str | None, manifest: str, catalog_path: str | None
) -> None:
    """Prints the native gem build plan for every catalog platform."""
    try:
        config, catalog, stage_dir = _load_settings(manifest, catalog_path)
    except (ConfigurationError, DescriptorError) as e:
        click.secho(f"❌ Could not load catalog: {e}", fg="red", err=True)
        raise click.Abort() from e

    final_gem = gem_full_name or config.gem_full_name
    if not final_gem:
        raise click.UsageError(
            "No gem name given. Pass --gem or set gem_full_name in [tool.crossgem]."
        )

    try:
        plan = build_plan(catalog, final_gem, stage_dir, config.extension_name)
    except DescriptorError as e:
        click.secho(f"❌ Invalid catalog entry: {e}", fg="red", err=True)
        raise click.Abort() from e
    click.echo(f"RUBY_CC_VERSION={plan.ruby_cc_version}")
    for group, platforms in plan.groups.items():
        click.echo(f"gem:{group} => {', '.join(str(p) for p in platforms) or '-'}")
    for build in plan.builds:
        click.echo("\n" + "=" * 20 + f" gem:{build.platform} " + "=" * 20)
        for artifact in build.artifacts:
            click.echo(f"  verifies {artifact}")
        click.echo(build.script.rstrip())


main = cli
