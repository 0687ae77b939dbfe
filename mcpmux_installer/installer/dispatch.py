"""Install strategy handlers and the dispatcher that drives them."""

import logging
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Sequence

from mcpmux_installer import output
from mcpmux_installer.errors import InstallFailed, InstallPathError, NoAurHelper
from mcpmux_installer.execution import CommandRunner

from .fetch import artifact_for, fetch
from .models import InstallContext, InstallResult, Strategy, StrategyKind
from .strategies import describe_strategy, select_strategy
from .verify import verify

_logging = logging.getLogger(__name__)

Handler = Callable[[InstallContext, Strategy, CommandRunner, Path], Awaitable[InstallResult]]

_PACKAGE_MANAGERS = {
    StrategyKind.APT_GET: ("apt-get", ".deb"),
    StrategyKind.DNF: ("dnf", ".rpm"),
}


def privileged(args: Sequence[str], is_root: bool) -> list[str]:
    """Prefix a system-level command with sudo unless already root."""
    return list(args) if is_root else ["sudo", *args]


async def run_checked(
    runner: CommandRunner,
    args: Sequence[str],
    timeout: int,
    capture: bool = False,
) -> None:
    result = await runner.run(args, timeout=timeout, capture=capture)
    if not result.ok:
        raise InstallFailed(result.command, result.returncode)


def render_aur_remediation(context: InstallContext) -> str:
    settings = context.settings
    lines = [
        "",
        "Option 1: Install an AUR helper first:",
        "  sudo pacman -S --needed git base-devel",
        "  git clone https://aur.archlinux.org/yay-bin.git && cd yay-bin && makepkg -si",
        f"  yay -S {settings.aur_package}",
        "",
        "Option 2: Download the AppImage:",
        f"  {settings.releases_page_url}",
    ]
    return "\n".join(lines)


def render_path_hint(install_dir: Path) -> str:
    return "\n".join(
        [
            f"  echo 'export PATH=\"{install_dir}:$PATH\"' >> ~/.bashrc",
            "  source ~/.bashrc",
        ]
    )


async def install_managed_repo(
    context: InstallContext, strategy: Strategy, runner: CommandRunner, workdir: Path
) -> InstallResult:
    settings = context.settings
    output.info(f"{settings.display_name} APT repository detected, using apt...")
    await run_checked(
        runner, privileged(["apt-get", "update"], context.is_root), settings.timeouts.install
    )
    await run_checked(
        runner,
        privileged(["apt-get", "install", "-y", settings.package_name], context.is_root),
        settings.timeouts.install,
    )
    return InstallResult(strategy=strategy, version=context.version)


async def install_system_package(
    context: InstallContext, strategy: Strategy, runner: CommandRunner, workdir: Path
) -> InstallResult:
    settings = context.settings
    manager, extension = _PACKAGE_MANAGERS[strategy.kind]
    artifact = artifact_for(
        strategy.kind, context.version, context.architecture, settings, workdir
    )

    output.info(f"Downloading {extension} package...")
    try:
        await fetch(artifact, runner, settings)
        outcome = await verify(
            artifact,
            context.request.skip_verify,
            runner,
            settings,
            context.capabilities.has_gpg,
        )
        output.info("Installing...")
        await run_checked(
            runner,
            privileged([manager, "install", "-y", str(artifact.local_path)], context.is_root),
            settings.timeouts.install,
        )
    finally:
        artifact.local_path.unlink(missing_ok=True)

    if strategy.kind == StrategyKind.APT_GET:
        output.plain()
        output.info(
            f"Tip: For automatic updates via apt, add the {settings.display_name} repository:"
        )
        output.plain("  sudo mcpmux-apt-setup")

    return InstallResult(strategy=strategy, version=context.version, verification=outcome)


async def install_from_aur(
    context: InstallContext, strategy: Strategy, runner: CommandRunner, workdir: Path
) -> InstallResult:
    settings = context.settings
    if strategy.helper is None:
        output.warn("No AUR helper found (yay or paru).")
        output.plain(render_aur_remediation(context))
        raise NoAurHelper()

    output.info(f"Installing from AUR via {strategy.helper}...")
    await run_checked(
        runner, [strategy.helper, "-S", settings.aur_package], settings.timeouts.install
    )
    return InstallResult(strategy=strategy, version=context.version)


async def install_appimage(
    context: InstallContext, strategy: Strategy, runner: CommandRunner, workdir: Path
) -> InstallResult:
    settings = context.settings
    install_dir = context.install_dir
    install_path = install_dir / settings.appimage_filename
    artifact = artifact_for(
        strategy.kind, context.version, context.architecture, settings, workdir
    )

    output.info("No supported package manager found, installing AppImage...")
    try:
        install_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallPathError(install_dir, e) from e

    output.info("Downloading AppImage...")
    try:
        await fetch(artifact, runner, settings)
        outcome = await verify(
            artifact,
            context.request.skip_verify,
            runner,
            settings,
            context.capabilities.has_gpg,
        )
        try:
            shutil.move(str(artifact.local_path), str(install_path))
            mode = install_path.stat().st_mode
            install_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise InstallPathError(install_path, e) from e
    finally:
        artifact.local_path.unlink(missing_ok=True)

    output.success(f"Installed to {install_path}")

    path_warning = str(install_dir) not in context.search_path
    if path_warning:
        output.plain()
        output.warn(f"{install_dir} is not in your PATH. Add it with:")
        output.plain(render_path_hint(install_dir))

    return InstallResult(
        strategy=strategy,
        version=context.version,
        verification=outcome,
        installed_path=install_path,
        path_warning=path_warning,
    )


HANDLERS: dict[StrategyKind, Handler] = {
    StrategyKind.MANAGED_REPO: install_managed_repo,
    StrategyKind.APT_GET: install_system_package,
    StrategyKind.DNF: install_system_package,
    StrategyKind.PACMAN_AUR: install_from_aur,
    StrategyKind.APPIMAGE: install_appimage,
}


async def run_install(
    context: InstallContext,
    runner: CommandRunner,
    strategy: Strategy | None = None,
) -> InstallResult:
    """Select a strategy and run it to completion.

    Downloads land in a private temporary directory that is removed on every
    exit path, including fatal errors.
    """
    strategy = strategy or select_strategy(context.capabilities)
    _logging.debug(f"Selected strategy: {strategy}")
    output.info(f"Installing {context.settings.display_name} v{context.version}")
    output.info(f"Install method: {describe_strategy(strategy)}")

    handler = HANDLERS[strategy.kind]
    with tempfile.TemporaryDirectory(prefix="mcpmux-install-") as tmp:
        result = await handler(context, strategy, runner, Path(tmp))

    output.plain()
    output.success(f"{context.settings.display_name} installed successfully!")
    output.plain(f"Run '{context.settings.package_name}' to start.")
    return result


__all__ = [
    "HANDLERS",
    "privileged",
    "run_checked",
    "render_aur_remediation",
    "render_path_hint",
    "install_managed_repo",
    "install_system_package",
    "install_from_aur",
    "install_appimage",
    "run_install",
]
