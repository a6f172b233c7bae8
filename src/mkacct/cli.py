"""Root CLI command for mkacct.

Option handling is done by :func:`mkacct.services.arguments.parse_arguments`
so unknown options warn instead of failing; click only owns ``--version``.
"""

from __future__ import annotations

import click
from pydantic import ValidationError

from mkacct import __version__
from mkacct.config.settings import MkacctSettings
from mkacct.context import AppContext
from mkacct.orchestrator import Orchestrator


@click.command(
    "mkacct",
    add_help_option=False,
    context_settings={"ignore_unknown_options": True},
)
@click.version_option(version=__version__, prog_name="mkacct")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx: click.Context, args: tuple[str, ...]) -> None:
    """mkacct — create a new user account with validation and logging."""
    try:
        settings = MkacctSettings.load()
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    app = AppContext(settings, prog_name=ctx.info_name or "mkacct")
    try:
        status = Orchestrator(app).run(args)
    finally:
        app.close()
    ctx.exit(status)


def main() -> None:
    """Console-script entry point."""
    cli()
