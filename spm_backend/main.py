"""
spm-backend — CLI entrypoint.

Usage:
    spm-backend --help
    spm-backend install apple/swift-format 600.0.0
    spm-backend ls-remote apple/swift-format
    spm-backend cache-clear
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import NoReturn

import click

from spm_backend import __version__
from spm_backend.core.config.loader import ConfigError, Settings, load_settings
from spm_backend.core.errors import SpmError
from spm_backend.core.observability.logging_config import level_from_flags, setup_logging


class EchoReporter:
    """Prints build output lines to the terminal."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def on_line(self, line: str) -> None:
        if not self.quiet:
            click.secho(f"   {line}", dim=True)


def _settings(ctx: click.Context) -> Settings:
    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _fail(error: Exception) -> NoReturn:
    click.secho(f"❌ {error}", fg="red", err=True)
    sys.exit(1)


def default_install_root(settings: Settings, package: str, version: str) -> Path:
    """``<data_dir>/installs/<package>/<version>`` with the package made path-safe."""
    from spm_backend.core.services.spm.workspace import sanitize

    return settings.installs_dir / sanitize(package) / version


@click.group()
@click.version_option(version=__version__, prog_name="spm-backend")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: SPM_CONFIG or ~/.config/spm-backend/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """spm-backend — build and install Swift packages from source."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=level_from_flags(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("SPM_LOG_LEVEL"),
        ),
        log_file=os.environ.get("SPM_LOG_FILE"),
        log_file_level=os.environ.get("SPM_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.argument("package")
@click.argument("version", default="latest")
@click.option(
    "--install-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Versioned install directory (binaries go to <install-root>/bin).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    package: str,
    version: str,
    install_root: str | None,
    as_json: bool,
) -> None:
    """Build PACKAGE at VERSION from source and install its executables."""
    from spm_backend.core.services.spm import RemoteVersionCache, install_version, resolve_version

    settings = _settings(ctx)
    quiet = ctx.obj.get("quiet", False) or as_json

    try:
        versions = RemoteVersionCache.from_settings(settings)
        if install_root is None:
            settings.ensure_experimental("spm backend")
            concrete = resolve_version(package, version, versions)
            root = default_install_root(settings, package, concrete)
        else:
            root = Path(install_root)

        if not quiet:
            click.secho(f"\n📦 {package}@{version}", fg="cyan", bold=True)
        report = install_version(
            package,
            version,
            root,
            settings=settings,
            reporter=EchoReporter(quiet=quiet),
            versions=versions,
        )
    except SpmError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.secho(f"✅ Installed {package}@{report.version}", fg="green")
    for path in report.installed:
        click.echo(f"     • {path}")


@cli.command("ls-remote")
@click.argument("package")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def ls_remote(ctx: click.Context, package: str, as_json: bool) -> None:
    """List remote versions of PACKAGE, oldest first."""
    from spm_backend.core.services.spm import list_remote_versions

    settings = _settings(ctx)
    try:
        versions = list_remote_versions(package, settings=settings)
    except SpmError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(versions))
        return
    for v in versions:
        click.echo(v)


@cli.command("cache-clear")
@click.argument("package", required=False)
@click.pass_context
def cache_clear(ctx: click.Context, package: str | None) -> None:
    """Forget cached remote versions (of PACKAGE, or of every package)."""
    from spm_backend.core.services.spm import RemoteVersionCache

    settings = _settings(ctx)
    removed = RemoteVersionCache.from_settings(settings).clear(package)
    if not ctx.obj.get("quiet", False):
        click.echo(f"Removed {removed} cached version list(s).")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
