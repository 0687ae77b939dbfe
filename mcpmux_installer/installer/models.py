"""Data models for the install flow."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mcpmux_installer.config import InstallerSettings


class Architecture(Enum):
    AMD64 = "amd64"
    ARM64 = "arm64"


class StrategyKind(Enum):
    MANAGED_REPO = "managed-repo"
    APT_GET = "apt-get"
    DNF = "dnf"
    PACMAN_AUR = "pacman-aur"
    APPIMAGE = "appimage"


class VerificationOutcome(Enum):
    VERIFIED = "verified"
    SKIPPED_BY_FLAG = "skipped-by-flag"
    SKIPPED_NO_TOOL = "skipped-no-tool"
    SKIPPED_NO_SIGNATURE = "skipped-no-signature"
    FAILED_SOFT = "failed-soft"


@dataclass(frozen=True)
class InstallRequest:
    version: str | None
    architecture: Architecture
    skip_verify: bool = False


@dataclass(frozen=True)
class HostCapabilities:
    architecture: Architecture
    has_apt_repo_configured: bool = False
    has_apt_get: bool = False
    has_dnf: bool = False
    has_pacman: bool = False
    has_yay: bool = False
    has_paru: bool = False
    has_gpg: bool = False


@dataclass(frozen=True)
class Strategy:
    kind: StrategyKind
    helper: str | None = None

    def __post_init__(self):
        if self.helper is not None and self.kind != StrategyKind.PACMAN_AUR:
            raise ValueError(f"helper is only valid for {StrategyKind.PACMAN_AUR.value}")


@dataclass(frozen=True)
class InstallContext:
    """Everything a strategy needs, collected once at startup."""
    request: InstallRequest
    capabilities: HostCapabilities
    version: str
    home: Path
    search_path: tuple[str, ...]
    settings: InstallerSettings
    is_root: bool = False

    def __post_init__(self):
        if not self.version:
            raise ValueError("version must be a non-empty string")

    @property
    def architecture(self) -> Architecture:
        return self.request.architecture

    @property
    def install_dir(self) -> Path:
        return self.settings.install_dir or self.home / ".local" / "bin"


@dataclass(frozen=True)
class ReleaseArtifact:
    name: str
    download_url: str
    signature_url: str
    local_path: Path


@dataclass
class InstallResult:
    strategy: Strategy
    version: str
    verification: VerificationOutcome | None = None
    installed_path: Path | None = None
    path_warning: bool = False


__all__ = [
    "Architecture",
    "StrategyKind",
    "VerificationOutcome",
    "InstallRequest",
    "HostCapabilities",
    "Strategy",
    "InstallContext",
    "ReleaseArtifact",
    "InstallResult",
]
