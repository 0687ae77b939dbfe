"""Host environment probing: architecture and available package managers."""

import logging
import os
import platform
import shutil
from typing import Callable, Iterable

from .config import InstallerSettings
from .errors import MissingDependency, UnsupportedArchitecture
from .installer.models import Architecture, HostCapabilities

_logging = logging.getLogger(__name__)

REQUIRED_TOOLS = ("curl",)

_MACHINE_MAP = {
    "x86_64": Architecture.AMD64,
    "aarch64": Architecture.ARM64,
}

Which = Callable[[str], str | None]


def detect_architecture(machine: str | None = None) -> Architecture:
    """Map a CPU identifier (as reported by ``uname -m``) to a package architecture.

    Raises:
        UnsupportedArchitecture: for anything other than x86_64 or aarch64
    """
    if machine is None:
        machine = platform.machine()
    arch = _MACHINE_MAP.get(machine)
    if arch is None:
        raise UnsupportedArchitecture(machine)
    return arch


def require_tools(tools: Iterable[str] = REQUIRED_TOOLS, which: Which = shutil.which) -> None:
    for tool in tools:
        if which(tool) is None:
            raise MissingDependency(tool)


def has_tool(name: str, which: Which = shutil.which) -> bool:
    return which(name) is not None


def probe(
    settings: InstallerSettings | None = None,
    which: Which = shutil.which,
    machine: str | None = None,
    exists: Callable[[str], bool] = os.path.exists,
) -> HostCapabilities:
    """Detect architecture and package manager presence.

    The download tool is checked first so nothing else runs on a host that
    cannot fetch artifacts. Manager checks are independent of each other;
    several can be reported present at once.

    Raises:
        MissingDependency: curl is not installed
        UnsupportedArchitecture: CPU is neither x86_64 nor aarch64
    """
    settings = settings or InstallerSettings()
    require_tools(REQUIRED_TOOLS, which)
    arch = detect_architecture(machine)

    caps = HostCapabilities(
        architecture=arch,
        has_apt_repo_configured=exists(str(settings.apt_source_list)),
        has_apt_get=has_tool("apt-get", which),
        has_dnf=has_tool("dnf", which),
        has_pacman=has_tool("pacman", which),
        has_yay=has_tool("yay", which),
        has_paru=has_tool("paru", which),
        has_gpg=has_tool("gpg", which),
    )
    _logging.debug(f"Probed host capabilities: {caps}")
    return caps


def is_root() -> bool:
    return os.geteuid() == 0


__all__ = [
    "REQUIRED_TOOLS",
    "detect_architecture",
    "require_tools",
    "has_tool",
    "probe",
    "is_root",
]
