"""CLI entrypoint for thaings."""

from pathlib import Path

import rich_click as click

from thaings import __version__
from thaings.controllers import (
    PendingCommand,
    ReceiveCommand,
    RespondCommand,
    ThaingsCliController,
)
from thaings.errors import InvalidInput, InvalidKeyError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = ThaingsCliController()

ROOT_OPTION = click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory. Defaults to THAINGS_ROOT or ~/.thaings.",
)


@click.group()
@click.version_option(version=__version__, prog_name="thaings")
def thaings() -> None:
    """Answer Things 3 to-dos with the Claude CLI."""


@thaings.command("receive")
@ROOT_OPTION
def receive(root: Path | None) -> None:
    """Queue the to-do JSON that Things writes to stdin."""

    raw_input = click.get_text_stream("stdin").read()
    try:
        lines = CONTROLLER.receive(ReceiveCommand(root=root, raw_input=raw_input))
    except (InvalidInput, InvalidKeyError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@thaings.command("respond")
@ROOT_OPTION
def respond(root: Path | None) -> None:
    """Process every pending to-do once (run by the filesystem watcher)."""

    try:
        result = CONTROLLER.respond(RespondCommand(root=root))
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Some to-dos failed; see daemon.log.")


@thaings.command("pending")
@ROOT_OPTION
def pending(root: Path | None) -> None:
    """List to-dos waiting for a response."""

    _emit_lines(CONTROLLER.pending(PendingCommand(root=root)))


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    thaings()
