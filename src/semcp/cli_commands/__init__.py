"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from semcp.cli_commands.policy import policy
    from semcp.cli_commands.snpx import snpx
    from semcp.cli_commands.suvx import suvx

    cli.add_command(snpx)
    cli.add_command(suvx)
    cli.add_command(policy)
