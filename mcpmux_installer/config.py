"""Installer settings and YAML config loading."""

from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .errors import ConfigError, format_field_error
from .paths import APT_KEYRING, APT_SOURCE_LIST, APPIMAGE_FILENAME, get_config_path

DEFAULT_TIMEOUT = 30
DOWNLOAD_TIMEOUT = 300
INSTALL_TIMEOUT = 600


@dataclass(frozen=True)
class Timeouts:
    """Per-command timeouts in seconds."""
    default: int = DEFAULT_TIMEOUT
    download: int = DOWNLOAD_TIMEOUT
    install: int = INSTALL_TIMEOUT

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    format_field_error("Config", f"timeouts.{f.name}", "must be a positive integer")
                )


@dataclass(frozen=True)
class InstallerSettings:
    """Endpoints, package names and locations used by every install flow."""
    github_repo: str = "mcpmux/mcp-mux"
    package_name: str = "mcpmux"
    display_name: str = "McpMux"
    aur_package: str = "mcpmux-bin"
    key_url: str = "https://apt.mcpmux.com/key.gpg"
    key_id: str = "hello@mcpmux.com"
    apt_repo_url: str = "https://apt.mcpmux.com"
    apt_suite: str = "stable"
    apt_component: str = "main"
    apt_source_list: Path = APT_SOURCE_LIST
    apt_keyring: Path = APT_KEYRING
    appimage_filename: str = APPIMAGE_FILENAME
    install_dir: Path | None = None
    timeouts: Timeouts = field(default_factory=Timeouts)

    def __post_init__(self):
        for name in (
            "github_repo",
            "package_name",
            "display_name",
            "aur_package",
            "key_url",
            "key_id",
            "apt_repo_url",
            "apt_suite",
            "apt_component",
            "appimage_filename",
        ):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(format_field_error("Config", name, "must be a non-empty string"))
        if "/" not in self.github_repo:
            raise ValueError(
                format_field_error("Config", "github_repo", "must look like 'owner/name'")
            )

    @property
    def releases_api_url(self) -> str:
        return f"https://api.github.com/repos/{self.github_repo}/releases/latest"

    @property
    def releases_page_url(self) -> str:
        return f"https://github.com/{self.github_repo}/releases/latest"

    def download_base_url(self, version: str) -> str:
        return f"https://github.com/{self.github_repo}/releases/download/v{version}"


_STRING_FIELDS = {
    "github_repo",
    "package_name",
    "display_name",
    "aur_package",
    "key_url",
    "key_id",
    "apt_repo_url",
    "apt_suite",
    "apt_component",
    "appimage_filename",
}
_PATH_FIELDS = {"apt_source_list", "apt_keyring", "install_dir"}


def validate_settings(data: dict) -> InstallerSettings:
    """Validate and convert a raw mapping into InstallerSettings.

    Args:
        data: Raw dict from yaml.safe_load() containing config data

    Returns:
        InstallerSettings with defaults for every key not present

    Raises:
        ConfigError: If validation fails with clear field path errors
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

    known = _STRING_FIELDS | _PATH_FIELDS | {"timeouts"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    kwargs: dict = {}
    for key, value in data.items():
        if key in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ConfigError(
                    format_field_error("Config", key, f"must be a string, got {type(value).__name__}")
                )
            kwargs[key] = value
        elif key in _PATH_FIELDS:
            if not isinstance(value, str) or not value:
                raise ConfigError(format_field_error("Config", key, "must be a non-empty path"))
            kwargs[key] = Path(value).expanduser()
        elif key == "timeouts":
            if not isinstance(value, dict):
                raise ConfigError(format_field_error("Config", "timeouts", "must be a mapping"))
            allowed = {f.name for f in fields(Timeouts)}
            bad = sorted(set(value) - allowed)
            if bad:
                raise ConfigError(f"Unknown timeout keys: {', '.join(bad)}")
            try:
                kwargs["timeouts"] = Timeouts(**value)
            except ValueError as e:
                raise ConfigError(str(e)) from e

    try:
        return InstallerSettings(**kwargs)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _format_syntax_error(error: yaml.YAMLError) -> str:
    mark = getattr(error, "problem_mark", None)
    problem = getattr(error, "problem", None) or str(error)
    if mark is None:
        return f"Config syntax error: {problem}"
    return f"Config syntax error at line {mark.line + 1}, col {mark.column + 1}: {problem}"


def load_settings(path_or_text: Path | str | None = None) -> InstallerSettings:
    """Load installer settings from a YAML file or text.

    Accepts a file path, raw YAML text, or None. With None the
    MCPMUX_INSTALL_CONFIG environment variable is consulted and built-in
    defaults are returned when it is unset.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    if path_or_text is None:
        path_or_text = get_config_path()
        if path_or_text is None:
            return InstallerSettings()

    if isinstance(path_or_text, Path):
        try:
            text = path_or_text.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path_or_text}")
        except PermissionError:
            raise ConfigError(f"Permission denied reading config file: {path_or_text}")
        except UnicodeDecodeError:
            raise ConfigError(f"Config file is not valid UTF-8: {path_or_text}")
    else:
        text = path_or_text

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(_format_syntax_error(e)) from e

    # An empty file means "use defaults"
    if data is None:
        return InstallerSettings()
    return validate_settings(data)


__all__ = [
    "DEFAULT_TIMEOUT",
    "DOWNLOAD_TIMEOUT",
    "INSTALL_TIMEOUT",
    "Timeouts",
    "InstallerSettings",
    "validate_settings",
    "load_settings",
]
