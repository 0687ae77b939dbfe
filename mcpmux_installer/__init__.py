"""Linux installer for McpMux."""

from .config import (
    DEFAULT_TIMEOUT,
    DOWNLOAD_TIMEOUT,
    INSTALL_TIMEOUT,
    InstallerSettings,
    load_settings,
)
from .errors import (
    ConfigError,
    DownloadFailed,
    InstallerError,
    InstallFailed,
    MissingDependency,
    NoAurHelper,
    PermissionDenied,
    ReleaseNotFound,
    UnsupportedArchitecture,
    format_error,
)
from .execution import CommandResult, CommandRunner, SubprocessRunner
from .output import setup_logging

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "DEFAULT_TIMEOUT",
    "DOWNLOAD_TIMEOUT",
    "INSTALL_TIMEOUT",
    "InstallerSettings",
    "load_settings",
    "ConfigError",
    "DownloadFailed",
    "InstallerError",
    "InstallFailed",
    "MissingDependency",
    "NoAurHelper",
    "PermissionDenied",
    "ReleaseNotFound",
    "UnsupportedArchitecture",
    "format_error",
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "setup_logging",
]
