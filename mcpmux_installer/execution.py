"""Async command execution utilities.

All external programs (curl, gpg, package managers) run through a
``CommandRunner`` so install flows can be exercised with a fake runner.
"""

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import Protocol, Sequence

from .config import DEFAULT_TIMEOUT

_logging = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return shlex.join(self.args)


class CommandRunner(Protocol):
    async def run(
        self,
        args: Sequence[str],
        timeout: int = DEFAULT_TIMEOUT,
        capture: bool = True,
    ) -> CommandResult: ...


class SubprocessRunner:
    """Run commands as asyncio subprocesses, one at a time.

    With ``capture=False`` the child inherits the terminal so package manager
    progress and prompts reach the user directly.
    """

    async def run(
        self,
        args: Sequence[str],
        timeout: int = DEFAULT_TIMEOUT,
        capture: bool = True,
    ) -> CommandResult:
        args = tuple(args)
        command = shlex.join(args)
        _logging.debug(f"Running command: {command}")
        pipe = asyncio.subprocess.PIPE if capture else None
        process = None
        try:
            process = await asyncio.create_subprocess_exec(*args, stdout=pipe, stderr=pipe)
            try:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
            except asyncio.TimeoutError:
                process.kill()
                _ = await process.wait()
                _logging.error(f"Command timed out after {timeout} seconds: {command}")
                return CommandResult(args, 1, "", f"Command timed out after {timeout} seconds")
            out = stdout.decode(errors="replace").strip() if stdout else ""
            err = stderr.decode(errors="replace").strip() if stderr else ""
            if err:
                _logging.debug(f"stderr: {err}")
            returncode = process.returncode if process.returncode is not None else 1
            return CommandResult(args, returncode, out, err)
        except OSError as e:
            _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
            return CommandResult(args, 1, "", f"Error: {e}")
        finally:
            if process:
                transport = getattr(process, "_transport", None)
                if transport:
                    transport.close()


__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
]
