"""CLI entry points: mcpmux-install and mcpmux-apt-setup."""

import asyncio
import logging
import shutil
import sys

import click

from mcpmux_installer import output, probe
from mcpmux_installer.config import InstallerSettings, load_settings
from mcpmux_installer.errors import EXIT_FAILURE, InstallerError, format_error
from mcpmux_installer.execution import CommandRunner, SubprocessRunner
from mcpmux_installer.installer import (
    InstallContext,
    InstallRequest,
    InstallResult,
    configure_repository,
    run_install,
)
from mcpmux_installer.output import setup_logging
from mcpmux_installer.paths import get_home_dir, get_search_path
from mcpmux_installer.versions import resolve_version

_logging = logging.getLogger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class InstallerCommand(click.Command):
    """Click command whose usage errors (unknown flags etc.) exit with 1."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_FAILURE
            raise


async def prepare_context(
    version: str | None,
    skip_verify: bool,
    runner: CommandRunner,
    settings: InstallerSettings,
    which=shutil.which,
    machine: str | None = None,
    exists=None,
) -> InstallContext:
    """Probe the host and resolve the version into an immutable context.

    Probing runs first, so an unsupported host fails before any network call.
    """
    probe_kwargs = {"which": which, "machine": machine}
    if exists is not None:
        probe_kwargs["exists"] = exists
    caps = probe.probe(settings, **probe_kwargs)
    output.info(f"Detected architecture: {caps.architecture.value}")

    request = InstallRequest(version=version, architecture=caps.architecture, skip_verify=skip_verify)
    if not request.version:
        output.info("Fetching latest release...")
    resolved = await resolve_version(request.version, runner, settings)
    _logging.debug(f"Resolved version: {resolved}")

    return InstallContext(
        request=request,
        capabilities=caps,
        version=resolved,
        home=get_home_dir(),
        search_path=tuple(get_search_path()),
        settings=settings,
        is_root=probe.is_root(),
    )


async def run_install_flow(
    version: str | None,
    skip_verify: bool,
    runner: CommandRunner,
    settings: InstallerSettings,
    **probe_overrides,
) -> InstallResult:
    context = await prepare_context(version, skip_verify, runner, settings, **probe_overrides)
    return await run_install(context, runner)


def _fail(error: InstallerError):
    output.fail(format_error(str(error)))
    sys.exit(error.exit_code)


@click.command(cls=InstallerCommand, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--version",
    "-v",
    "version",
    metavar="VERSION",
    default=None,
    help="Install a specific version (default: latest release)",
)
@click.option(
    "--skip-verify",
    is_flag=True,
    help="Skip GPG signature verification",
)
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def install(ctx, version: str | None, skip_verify: bool, debug: bool):
    """Install McpMux on this Linux host."""
    setup_logging(debug)
    obj = ctx.obj or {}
    runner = obj.get("runner") or SubprocessRunner()
    probe_overrides = {
        key: obj[key] for key in ("which", "machine", "exists") if key in obj
    }
    try:
        probe.require_tools(probe.REQUIRED_TOOLS, obj.get("which", shutil.which))
        settings = load_settings()
        asyncio.run(run_install_flow(version, skip_verify, runner, settings, **probe_overrides))
    except InstallerError as e:
        _fail(e)


@click.command(cls=InstallerCommand, context_settings=CONTEXT_SETTINGS)
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def apt_setup(ctx, debug: bool):
    """Add the McpMux APT repository and install through apt (requires root)."""
    setup_logging(debug)
    obj = ctx.obj or {}
    runner = obj.get("runner") or SubprocessRunner()
    which = obj.get("which", shutil.which)
    is_root = obj.get("is_root")
    if is_root is None:
        is_root = probe.is_root()
    try:
        if is_root:
            probe.require_tools(("curl", "gpg", "dpkg", "apt-get"), which)
        settings = load_settings()
        asyncio.run(configure_repository(runner, settings, is_root))
    except InstallerError as e:
        _fail(e)


__all__ = [
    "InstallerCommand",
    "prepare_context",
    "run_install_flow",
    "install",
    "apt_setup",
]


if __name__ == "__main__":
    install()
