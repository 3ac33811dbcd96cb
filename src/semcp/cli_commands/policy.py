"""``semcp policy`` — inspect a policy and its generated artifacts."""

from __future__ import annotations

import asyncio
import shlex
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from semcp.cli_commands._output import configure_logging, print_error, print_policy_table, stdout_console
from semcp.errors import SemcpError
from semcp.monitor.falco import write_rule_file
from semcp.policy.engine_args import build_engine_args
from semcp.policy.loader import PolicyLoader
from semcp.policy.models import PolicyDocument
from semcp.policy.opa import DEFAULT_OPA_IMAGE, OpaClient, opa_available, sidecar_args
from semcp.policy.rego import policy_to_rego
from semcp.runtime.executor import DEFAULT_ENGINE
from semcp.runtime.runners import NPX_RUNNER, UVX_RUNNER

F = TypeVar("F", bound=Callable[..., Any])

_TOOLS = [NPX_RUNNER.name, UVX_RUNNER.name]


def _policy_source_options(func: F) -> F:
    func = click.option(
        "--tool",
        type=click.Choice(_TOOLS),
        default=NPX_RUNNER.name,
        show_default=True,
        help="Wrapper whose policy search path to use.",
    )(func)
    return click.option(
        "--policy",
        "policy_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Policy file (default: search the standard locations).",
    )(func)


def _load(tool: str, policy_path: str | None) -> tuple[PolicyDocument, Path | None]:
    """Return the policy and the file it came from; exit 1 on failure."""
    configure_logging(verbose=False)
    loader = PolicyLoader(tool)
    path = Path(policy_path) if policy_path else loader.find()
    try:
        policy = loader.resolve(policy_path)
    except SemcpError as exc:
        print_error(exc)
        sys.exit(1)
    return policy, path


@click.group()
def policy() -> None:
    """Inspect security policies and the artifacts generated from them."""


@policy.command()
@_policy_source_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def show(policy_path: str | None, tool: str, as_json: bool) -> None:
    """Show the effective policy."""
    doc, path = _load(tool, policy_path)
    if as_json:
        stdout_console.print_json(doc.model_dump_json(by_alias=True))
        return
    print_policy_table(doc, source=str(path) if path else "built-in default")


@policy.command("args")
@_policy_source_options
def args_cmd(policy_path: str | None, tool: str) -> None:
    """Print the container engine arguments derived from the policy."""
    doc, _ = _load(tool, policy_path)
    click.echo(shlex.join(build_engine_args(doc)))


@policy.command()
@_policy_source_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write Rego to this file.")
@click.option("--upload", "upload_url", default=None, help="Upload the module to this OPA server URL.")
@click.option("--policy-id", default=None, help="OPA policy id for --upload (default: the tool name).")
def rego(
    policy_path: str | None,
    tool: str,
    output: str | None,
    upload_url: str | None,
    policy_id: str | None,
) -> None:
    """Translate the policy into a Rego module."""
    doc, path = _load(tool, policy_path)
    text = policy_to_rego(doc, package=f"{tool}.policy", source=path.name if path else f"{tool}.yaml")

    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"Wrote {output}", err=True)
    elif not upload_url:
        click.echo(text, nl=False)

    if upload_url:
        try:
            asyncio.run(_upload(upload_url, policy_id or tool, text))
        except SemcpError as exc:
            print_error(exc)
            sys.exit(1)
        click.echo(f"Uploaded policy {policy_id or tool} to {upload_url}", err=True)


async def _upload(url: str, policy_id: str, text: str) -> None:
    async with OpaClient(url) as client:
        await client.upload_policy(policy_id, text)


@policy.command()
@_policy_source_options
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, exists=True),
    default=None,
    help="Directory for the rule file (default: the system temp dir).",
)
def falco(policy_path: str | None, tool: str, directory: str | None) -> None:
    """Write the Falco rule file for the policy and print its path."""
    doc, _ = _load(tool, policy_path)
    try:
        path = write_rule_file(doc, tool=tool, directory=Path(directory) if directory else None)
    except SemcpError as exc:
        print_error(exc)
        sys.exit(1)
    if path is None:
        click.echo("Monitoring is disabled or has no enabled rule sets.", err=True)
        return
    click.echo(str(path))


@policy.command()
@click.argument("container_name")
@click.option("--engine", default=DEFAULT_ENGINE, show_default=True, help="Container engine executable.")
@click.option("--opa-image", default=DEFAULT_OPA_IMAGE, show_default=True, help="OPA server image.")
def sidecar(container_name: str, engine: str, opa_image: str) -> None:
    """Print the command that starts an OPA sidecar for CONTAINER_NAME."""
    if not opa_available():
        click.echo("Note: no local opa binary found; the sidecar is the only evaluator.", err=True)
    click.echo(shlex.join([engine, *sidecar_args(container_name, image=opa_image)]))
