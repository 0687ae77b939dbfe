"""Best-effort detached signature verification.

Nothing in here is fatal. A missing gpg, a missing ``.sig`` file or a bad
signature only produce warnings; the caller always proceeds with the install.
A missing signature file counts as "unsigned", not as a failed check.
"""

import logging
from pathlib import Path

from mcpmux_installer import output
from mcpmux_installer.config import InstallerSettings
from mcpmux_installer.execution import CommandRunner

from .fetch import SIGNATURE_SUFFIX, download
from .models import ReleaseArtifact, VerificationOutcome

_logging = logging.getLogger(__name__)


async def ensure_signing_key(
    runner: CommandRunner,
    settings: InstallerSettings,
    workdir: Path,
) -> None:
    """Import the publisher's key into the user's keyring unless already present.

    Import failures are logged and ignored; the following ``gpg --verify``
    reports the outcome.
    """
    listed = await runner.run(
        ["gpg", "--list-keys", settings.key_id], timeout=settings.timeouts.default
    )
    if listed.ok:
        return

    key_file = workdir / "signing-key.asc"
    try:
        if not await download(settings.key_url, key_file, runner, settings.timeouts.default):
            _logging.debug(f"Could not download signing key from {settings.key_url}")
            return
        imported = await runner.run(
            ["gpg", "--import", "--quiet", str(key_file)], timeout=settings.timeouts.default
        )
        if not imported.ok:
            _logging.debug(f"gpg --import failed: {imported.stderr}")
    finally:
        key_file.unlink(missing_ok=True)


async def verify(
    artifact: ReleaseArtifact,
    skip_verify: bool,
    runner: CommandRunner,
    settings: InstallerSettings,
    has_gpg: bool,
) -> VerificationOutcome:
    if skip_verify:
        output.warn("Skipping signature verification (--skip-verify)")
        return VerificationOutcome.SKIPPED_BY_FLAG

    if not has_gpg:
        output.warn("gpg not found, skipping signature verification")
        output.warn("Install gnupg and re-run, or use --skip-verify to suppress this warning")
        return VerificationOutcome.SKIPPED_NO_TOOL

    sig_file = artifact.local_path.with_name(artifact.local_path.name + SIGNATURE_SUFFIX)
    try:
        if not await download(artifact.signature_url, sig_file, runner, settings.timeouts.default):
            output.warn("No signature file found, skipping verification")
            return VerificationOutcome.SKIPPED_NO_SIGNATURE

        await ensure_signing_key(runner, settings, artifact.local_path.parent)

        result = await runner.run(
            ["gpg", "--verify", str(sig_file), str(artifact.local_path)],
            timeout=settings.timeouts.default,
        )
        if result.ok:
            output.success("Signature verified")
            return VerificationOutcome.VERIFIED

        _logging.debug(f"gpg --verify failed: {result.stderr}")
        output.warn("Signature verification failed, package may not be signed yet")
        return VerificationOutcome.FAILED_SOFT
    finally:
        sig_file.unlink(missing_ok=True)


__all__ = ["ensure_signing_key", "verify"]
