"""Console output helpers and logging setup."""

import logging
import sys

import click


def setup_logging(debug: bool = False) -> None:
    """Configure root logging; DEBUG with --debug, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def info(message: str) -> None:
    click.secho(message, fg="blue", bold=True)


def success(message: str) -> None:
    click.secho(message, fg="green", bold=True)


def warn(message: str) -> None:
    click.secho(message, fg="yellow", bold=True, err=True)


def fail(message: str) -> None:
    click.secho(message, fg="red", bold=True, err=True)


def plain(message: str = "") -> None:
    click.echo(message)


__all__ = ["setup_logging", "info", "success", "warn", "fail", "plain"]
