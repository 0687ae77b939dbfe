"""Pytest fixtures and utilities for installer tests."""

from pathlib import Path
from typing import Callable, Sequence

import pytest

from mcpmux_installer.config import InstallerSettings
from mcpmux_installer.execution import CommandResult
from mcpmux_installer.installer import (
    Architecture,
    HostCapabilities,
    InstallContext,
    InstallRequest,
)

Matcher = Callable[[tuple[str, ...]], bool]


def _prefix(*prefix: str) -> Matcher:
    return lambda args: args[: len(prefix)] == prefix


def _output_path(args: tuple[str, ...]) -> Path | None:
    if "-o" in args:
        return Path(args[args.index("-o") + 1])
    return None


class FakeRunner:
    """Records commands and answers them from scripted rules.

    Unmatched commands succeed with empty output. A successful ``curl -o``
    writes a small payload derived from the URL; a successful
    ``gpg --dearmor -o`` writes a deterministic transform of its input.
    """

    def __init__(self):
        self.calls: list[tuple[str, ...]] = []
        self.captures: list[bool] = []
        self.timeouts: list[int] = []
        self._rules: list[tuple[Matcher, CommandResult]] = []

    def on(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self._rules.append((_prefix(*prefix), CommandResult(prefix, returncode, stdout, stderr)))
        return self

    def on_url(self, url: str, returncode: int = 0, stdout: str = ""):
        self._rules.append(
            (lambda args: args[0] == "curl" and url in args, CommandResult((), returncode, stdout, ""))
        )
        return self

    async def run(self, args: Sequence[str], timeout: int = 30, capture: bool = True) -> CommandResult:
        args = tuple(args)
        self.calls.append(args)
        self.captures.append(capture)
        self.timeouts.append(timeout)

        result = CommandResult(args, 0)
        for matcher, scripted in reversed(self._rules):
            if matcher(args):
                result = CommandResult(args, scripted.returncode, scripted.stdout, scripted.stderr)
                break

        if result.ok:
            self._write_outputs(args)
        return result

    def _write_outputs(self, args: tuple[str, ...]) -> None:
        dest = _output_path(args)
        if dest is None:
            return
        if args[0] == "curl":
            dest.write_bytes(f"payload from {args[-1]}".encode())
        elif args[0] == "gpg" and "--dearmor" in args:
            source = Path(args[-1])
            dest.write_bytes(b"binary-key:" + source.read_bytes()[::-1])

    def commands(self, program: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c and c[0] == program]

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == prefix for c in self.calls)

    def urls(self) -> list[str]:
        return [c[-1] for c in self.commands("curl")]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> InstallerSettings:
    """Settings with every system path redirected into tmp_path."""
    return InstallerSettings(
        apt_source_list=tmp_path / "etc" / "apt" / "sources.list.d" / "mcpmux.list",
        apt_keyring=tmp_path / "usr" / "share" / "keyrings" / "mcpmux-archive-keyring.gpg",
    )


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_context(settings: InstallerSettings, home: Path):
    """Factory for InstallContext values with sensible defaults."""

    def _create(
        version: str = "0.0.12",
        skip_verify: bool = False,
        arch: Architecture = Architecture.AMD64,
        search_path: tuple[str, ...] = ("/usr/bin", "/bin"),
        is_root: bool = False,
        **caps,
    ) -> InstallContext:
        return InstallContext(
            request=InstallRequest(version=version, architecture=arch, skip_verify=skip_verify),
            capabilities=HostCapabilities(architecture=arch, **caps),
            version=version,
            home=home,
            search_path=search_path,
            settings=settings,
            is_root=is_root,
        )

    return _create


def fake_which(*present: str) -> Callable[[str], str | None]:
    """Build a shutil.which replacement that finds only the given tools."""
    available = set(present)
    return lambda name: f"/usr/bin/{name}" if name in available else None
