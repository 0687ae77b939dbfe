"""Well-known filesystem locations used by the installer."""

import os
from pathlib import Path

APT_SOURCE_LIST = Path("/etc/apt/sources.list.d/mcpmux.list")
APT_KEYRING = Path("/usr/share/keyrings/mcpmux-archive-keyring.gpg")
APPIMAGE_FILENAME = "McpMux.AppImage"


def get_home_dir() -> Path:
    """Return the user's home directory, honouring $HOME."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def get_install_dir(home: Path | None = None) -> Path:
    """Return the user-local binary directory: ~/.local/bin"""
    return (home or get_home_dir()) / ".local" / "bin"


def get_config_path() -> Path | None:
    """Return path to an optional installer config file.

    Only the MCPMUX_INSTALL_CONFIG environment variable enables a config file;
    without it the built-in defaults are used.

    Returns:
        Path to the config file, or None if not configured
    """
    custom = os.environ.get("MCPMUX_INSTALL_CONFIG")
    if custom:
        return Path(custom)
    return None


def get_search_path() -> list[str]:
    """Return the entries of $PATH in order."""
    return [entry for entry in os.environ.get("PATH", "").split(os.pathsep) if entry]
