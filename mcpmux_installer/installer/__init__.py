"""Installer engine: strategy selection, fetch, verification and install."""

from .dispatch import HANDLERS, privileged, run_install
from .fetch import artifact_for, artifact_name, fetch
from .models import (
    Architecture,
    HostCapabilities,
    InstallContext,
    InstallRequest,
    InstallResult,
    ReleaseArtifact,
    Strategy,
    StrategyKind,
    VerificationOutcome,
)
from .repository import configure_repository, render_source_entry
from .strategies import PRECEDENCE, describe_strategy, select_strategy
from .verify import verify

__all__ = [
    "Architecture",
    "HostCapabilities",
    "InstallContext",
    "InstallRequest",
    "InstallResult",
    "ReleaseArtifact",
    "Strategy",
    "StrategyKind",
    "VerificationOutcome",
    "PRECEDENCE",
    "select_strategy",
    "describe_strategy",
    "artifact_name",
    "artifact_for",
    "fetch",
    "verify",
    "HANDLERS",
    "privileged",
    "run_install",
    "configure_repository",
    "render_source_entry",
]
