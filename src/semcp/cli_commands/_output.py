"""Shared CLI output formatters."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from semcp.policy.models import PolicyDocument  # noqa: TC001

# stdout belongs to the wrapped tool (MCP stdio traffic); diagnostics go to stderr.
console = Console(stderr=True)
stdout_console = Console()


def configure_logging(verbose: bool) -> None:
    """Route ``semcp`` log records to stderr through rich."""
    root = logging.getLogger("semcp")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = RichHandler(console=console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def print_error(exc: BaseException | str) -> None:
    console.print(f"[red]Error:[/red] {exc}")


def print_policy_table(policy: PolicyDocument, *, source: str) -> None:
    """Pretty-print a policy summary as a table."""
    spec = policy.spec
    table = Table(title=f"Security Policy ({source})")
    table.add_column("Section", style="cyan")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("metadata", "name", policy.metadata.name or "-")
    table.add_row("docker", "privileged", _show(spec.docker.privileged))
    table.add_row("", "cap drop", _join(spec.docker.capabilities.drop))
    table.add_row("", "cap add", _join(spec.docker.capabilities.add))
    table.add_row("", "security opts", _join(spec.docker.security_opts))
    table.add_row("network", "mode", spec.network.mode or "-")
    table.add_row("", "allowed domains", _join(spec.network.allowed_domains))
    table.add_row("", "blocked ports", _join(spec.network.blocked_ports))
    table.add_row("filesystem", "allowed paths", _join(spec.filesystem.allowed_paths))
    table.add_row("", "blocked paths", _join(spec.filesystem.blocked_paths))
    for perm in spec.storage.allow:
        table.add_row("storage", perm.uri, _join([a.value for a in perm.access]))
    enabled_sets = [rs.name for rs in spec.monitor.rules if rs.enabled]
    table.add_row("monitor", "enabled", _show(spec.monitor.enabled))
    table.add_row("", "rule sets", _join(enabled_sets))

    stdout_console.print(table)


def _show(value: object) -> str:
    return "-" if value is None else str(value).lower()


def _join(values: list[str]) -> str:
    return ", ".join(values) or "-"
