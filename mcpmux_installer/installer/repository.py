"""APT repository configuration for managed updates.

Reruns overwrite the keyring and source list with the same content; nothing
is ever removed or rolled back.
"""

import logging
import tempfile
from pathlib import Path

from mcpmux_installer import output
from mcpmux_installer.config import InstallerSettings
from mcpmux_installer.errors import DownloadFailed, InstallFailed, PermissionDenied
from mcpmux_installer.execution import CommandRunner

from .dispatch import run_checked
from .fetch import download

_logging = logging.getLogger(__name__)


def render_source_entry(settings: InstallerSettings, dpkg_arch: str) -> str:
    return (
        f"deb [arch={dpkg_arch} signed-by={settings.apt_keyring}] "
        f"{settings.apt_repo_url} {settings.apt_suite} {settings.apt_component}\n"
    )


async def host_package_architecture(runner: CommandRunner, settings: InstallerSettings) -> str:
    result = await runner.run(
        ["dpkg", "--print-architecture"], timeout=settings.timeouts.default
    )
    if not result.ok or not result.stdout.strip():
        raise InstallFailed(result.command, result.returncode or 1)
    return result.stdout.strip()


async def install_keyring(runner: CommandRunner, settings: InstallerSettings, workdir: Path) -> None:
    """Download the armored signing key and store it de-armored at the keyring path."""
    armored = workdir / "key.gpg"
    if not await download(settings.key_url, armored, runner, settings.timeouts.default):
        raise DownloadFailed(settings.key_url)

    settings.apt_keyring.parent.mkdir(parents=True, exist_ok=True)
    await run_checked(
        runner,
        [
            "gpg",
            "--batch",
            "--yes",
            "--dearmor",
            "-o",
            str(settings.apt_keyring),
            str(armored),
        ],
        settings.timeouts.default,
        capture=True,
    )


def write_source_list(settings: InstallerSettings, dpkg_arch: str) -> Path:
    path = settings.apt_source_list
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_source_entry(settings, dpkg_arch), encoding="utf-8")
    _logging.debug(f"Wrote APT source entry to {path}")
    return path


async def configure_repository(
    runner: CommandRunner,
    settings: InstallerSettings,
    is_root: bool,
) -> None:
    """Add the APT repository and install the package through it.

    Raises:
        PermissionDenied: not running as root
        DownloadFailed: signing key could not be fetched
        InstallFailed: gpg, dpkg or apt-get exited non-zero
    """
    if not is_root:
        raise PermissionDenied()

    output.info(f"Adding {settings.display_name} APT repository...")
    with tempfile.TemporaryDirectory(prefix="mcpmux-apt-") as tmp:
        await install_keyring(runner, settings, Path(tmp))

    dpkg_arch = await host_package_architecture(runner, settings)
    write_source_list(settings, dpkg_arch)

    await run_checked(runner, ["apt-get", "update"], settings.timeouts.install)
    await run_checked(
        runner, ["apt-get", "install", "-y", settings.package_name], settings.timeouts.install
    )

    output.success(f"{settings.display_name} installed!")
    output.plain("Updates will arrive automatically via 'apt upgrade'.")


__all__ = [
    "render_source_entry",
    "host_package_architecture",
    "install_keyring",
    "write_source_list",
    "configure_repository",
]
