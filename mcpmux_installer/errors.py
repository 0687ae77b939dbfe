"""Fatal error types and message formatting for the installer.

Every condition that must stop an install run is an ``InstallerError``
subclass. Core code raises them; the CLI layer catches ``InstallerError``,
prints the formatted message to stderr and exits with ``EXIT_FAILURE``.

Recoverable problems (missing gpg, missing signature, failed verification,
install dir absent from PATH) are never raised. They are reported as
warnings and surface as values such as ``VerificationOutcome``.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Use present tense: 'is required', 'is not supported'
- Include actionable hints where helpful
"""

EXIT_FAILURE = 1


class InstallerError(Exception):
    """Base class for fatal installer errors."""

    exit_code = EXIT_FAILURE


class UnsupportedArchitecture(InstallerError):
    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(f"Unsupported architecture: {machine}")


class MissingDependency(InstallerError):
    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"'{tool}' is required but not installed.")


class ReleaseNotFound(InstallerError):
    def __init__(self, detail: str = ""):
        message = "Could not determine latest version"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DownloadFailed(InstallerError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Download failed: {url}")


class InstallFailed(InstallerError):
    def __init__(self, command: str, returncode: int):
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {command}")


class InstallPathError(InstallerError):
    def __init__(self, path, error: OSError):
        self.path = path
        super().__init__(f"Could not install to {path}: {error.strerror or error}")


class NoAurHelper(InstallerError):
    def __init__(self):
        super().__init__("No AUR helper found (yay or paru)")


class PermissionDenied(InstallerError):
    def __init__(self, hint: str = "use: sudo mcpmux-apt-setup"):
        super().__init__(f"This command must be run as root ({hint})")


class ConfigError(InstallerError):
    """Raised when the installer config file cannot be loaded or validated."""

    pass


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("Unsupported architecture: i686")
        'Error: Unsupported architecture: i686'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Config", "timeouts.install", "must be a positive integer")
        "Config field 'timeouts.install' must be a positive integer"
    """
    return f"{entity} field '{field}' {issue}"


__all__ = [
    "EXIT_FAILURE",
    "InstallerError",
    "UnsupportedArchitecture",
    "MissingDependency",
    "ReleaseNotFound",
    "DownloadFailed",
    "InstallFailed",
    "InstallPathError",
    "NoAurHelper",
    "PermissionDenied",
    "ConfigError",
    "format_error",
    "format_field_error",
]
