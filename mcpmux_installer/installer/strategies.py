"""Install strategy selection.

Strategies are tried in a fixed order and the first whose precondition holds
wins. Once chosen there is no fallback to a later strategy; a pacman host
without an AUR helper fails instead of dropping to the AppImage.
"""

from .models import HostCapabilities, Strategy, StrategyKind

PRECEDENCE = (
    StrategyKind.MANAGED_REPO,
    StrategyKind.APT_GET,
    StrategyKind.DNF,
    StrategyKind.PACMAN_AUR,
    StrategyKind.APPIMAGE,
)

AUR_HELPERS = ("yay", "paru")

_PRECONDITIONS = {
    StrategyKind.MANAGED_REPO: lambda caps: caps.has_apt_repo_configured,
    StrategyKind.APT_GET: lambda caps: caps.has_apt_get,
    StrategyKind.DNF: lambda caps: caps.has_dnf,
    StrategyKind.PACMAN_AUR: lambda caps: caps.has_pacman,
    StrategyKind.APPIMAGE: lambda caps: True,
}

_HELPER_FLAGS = {
    "yay": lambda caps: caps.has_yay,
    "paru": lambda caps: caps.has_paru,
}


def select_aur_helper(caps: HostCapabilities) -> str | None:
    for helper in AUR_HELPERS:
        if _HELPER_FLAGS[helper](caps):
            return helper
    return None


def select_strategy(caps: HostCapabilities) -> Strategy:
    """Pick exactly one strategy from probed capabilities."""
    for kind in PRECEDENCE:
        if not _PRECONDITIONS[kind](caps):
            continue
        if kind == StrategyKind.PACMAN_AUR:
            return Strategy(kind, helper=select_aur_helper(caps))
        return Strategy(kind)
    raise ValueError("PRECEDENCE must end with a strategy that always applies")


def describe_strategy(strategy: Strategy) -> str:
    descriptions = {
        StrategyKind.MANAGED_REPO: "APT repository (managed updates)",
        StrategyKind.APT_GET: ".deb package via apt-get",
        StrategyKind.DNF: ".rpm package via dnf",
        StrategyKind.PACMAN_AUR: "AUR package",
        StrategyKind.APPIMAGE: "AppImage in ~/.local/bin",
    }
    text = descriptions[strategy.kind]
    if strategy.kind == StrategyKind.PACMAN_AUR:
        text += f" via {strategy.helper}" if strategy.helper else " (no helper found)"
    return text


__all__ = [
    "PRECEDENCE",
    "AUR_HELPERS",
    "select_aur_helper",
    "select_strategy",
    "describe_strategy",
]
