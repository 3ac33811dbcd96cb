"""semcp CLI entrypoint."""

from __future__ import annotations

import click

from semcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="semcp")
def main() -> None:
    """semcp: run MCP servers inside policy-constrained containers."""


# Register subcommands
from semcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
