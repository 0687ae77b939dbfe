"""Release artifact naming and download."""

import logging
from pathlib import Path

from mcpmux_installer.config import InstallerSettings
from mcpmux_installer.errors import DownloadFailed
from mcpmux_installer.execution import CommandRunner

from .models import Architecture, ReleaseArtifact, StrategyKind

_logging = logging.getLogger(__name__)

SIGNATURE_SUFFIX = ".sig"


def artifact_name(
    kind: StrategyKind,
    version: str,
    arch: Architecture,
    settings: InstallerSettings,
) -> str:
    """Return the release asset filename for a strategy.

    Raises:
        ValueError: for strategies that do not download a release asset
    """
    if kind == StrategyKind.APT_GET:
        return f"{settings.package_name}_{version}_{arch.value}.deb"
    if kind == StrategyKind.DNF:
        return f"{settings.package_name}-{version}-1.{arch.value}.rpm"
    if kind == StrategyKind.APPIMAGE:
        return f"{settings.display_name}_{version}_{arch.value}.AppImage"
    raise ValueError(f"Strategy '{kind.value}' does not download a release artifact")


def artifact_for(
    kind: StrategyKind,
    version: str,
    arch: Architecture,
    settings: InstallerSettings,
    workdir: Path,
) -> ReleaseArtifact:
    name = artifact_name(kind, version, arch, settings)
    download_url = f"{settings.download_base_url(version)}/{name}"
    return ReleaseArtifact(
        name=name,
        download_url=download_url,
        signature_url=download_url + SIGNATURE_SUFFIX,
        local_path=workdir / name,
    )


async def download(
    url: str,
    dest: Path,
    runner: CommandRunner,
    timeout: int,
) -> bool:
    """Download url to dest with curl. Attempted exactly once."""
    result = await runner.run(["curl", "-fsSL", "-o", str(dest), url], timeout=timeout)
    if not result.ok:
        _logging.debug(f"curl exited {result.returncode} for {url}: {result.stderr}")
    return result.ok


async def fetch(
    artifact: ReleaseArtifact,
    runner: CommandRunner,
    settings: InstallerSettings,
) -> ReleaseArtifact:
    """Download the artifact to its local path.

    Raises:
        DownloadFailed: curl reported an error; nothing is retried
    """
    if not await download(
        artifact.download_url, artifact.local_path, runner, settings.timeouts.download
    ):
        artifact.local_path.unlink(missing_ok=True)
        raise DownloadFailed(artifact.download_url)
    return artifact


__all__ = [
    "SIGNATURE_SUFFIX",
    "artifact_name",
    "artifact_for",
    "download",
    "fetch",
]
