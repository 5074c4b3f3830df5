"""CLI error reporting."""

import logging
from typing import NoReturn

import click

from finledger.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | OSError) -> NoReturn:
    """Print ``Error: <message>`` to stderr and exit with status 1.

    The traceback is only logged at DEBUG, so ``--verbose`` shows where a
    failure came from.
    """
    logger.debug("%s failed", ctx.command_path, exc_info=error)
    click.secho(f"Error: {error}", err=True, fg="red")
    ctx.exit(1)
