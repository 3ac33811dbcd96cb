"""Options and execution shared by the ``snpx`` and ``suvx`` wrappers."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any, NoReturn, TypeVar

import click

from semcp.cli_commands._output import configure_logging, print_error
from semcp.errors import SemcpError
from semcp.policy.loader import PolicyLoader
from semcp.runtime.executor import DEFAULT_ENGINE
from semcp.runtime.launcher import launch
from semcp.runtime.runners import Runner, Transport, fixed_transport, select_image
from semcp.utils.telemetry import configure_telemetry

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Everything after the first positional argument belongs to the wrapped tool.
PASSTHROUGH_CONTEXT: dict[str, Any] = {
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}

PRESET_KEY = "semcp.preset"


def _preset_option(name: str, image: str) -> Callable[[F], F]:
    def remember(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            ctx.meta[PRESET_KEY] = name

    return click.option(
        f"--{name}",
        f"preset_{name}",
        is_flag=True,
        expose_value=False,
        callback=remember,
        help=f"Use the {image} image.",
    )


def selected_preset() -> str | None:
    """Return the image preset chosen on the current command line, if any."""
    return click.get_current_context().meta.get(PRESET_KEY)


def wrapper_options(runner: Runner) -> Callable[[F], F]:
    """Attach the options every wrapper command accepts.

    Image presets come from ``runner.image_presets``; read the chosen one
    with :func:`selected_preset`.
    """
    prefix = runner.name.upper()

    def decorator(func: F) -> F:
        options = [
            click.option("--verbose", "-v", is_flag=True, help="Use verbose output."),
            click.option(
                "--image",
                envvar=f"{prefix}_IMAGE",
                default=None,
                help=f"Container image to use (default: {runner.default_image}).",
            ),
            *[_preset_option(name, image) for name, image in runner.image_presets.items()],
            click.option(
                "--policy",
                "policy_path",
                envvar=f"{prefix}_POLICY",
                type=click.Path(dir_okay=False),
                default=None,
                help="Path to policy file.",
            ),
            click.option(
                "--engine",
                envvar=f"{prefix}_ENGINE",
                default=DEFAULT_ENGINE,
                show_default=True,
                help="Container engine executable.",
            ),
            click.option(
                "--falco/--no-falco",
                "falco",
                default=None,
                help="Force Falco monitoring on or off (default: policy setting).",
            ),
            click.option(
                "--transport",
                type=click.Choice([t.value for t in Transport]),
                default=None,
                help="Transport the wrapped server speaks (default: stdio).",
            ),
            click.option(
                "--otlp-endpoint",
                envvar="OTEL_EXPORTER_OTLP_ENDPOINT",
                default=None,
                help="Export traces to this OTLP endpoint.",
            ),
        ]
        for option in reversed(options):
            func = option(func)
        return func

    return decorator


def run_wrapped(
    runner: Runner,
    flags: Sequence[str],
    package_args: Sequence[str],
    *,
    verbose: bool,
    image: str | None,
    preset: str | None,
    policy_path: str | None,
    engine: str,
    falco: bool | None,
    transport: str | None,
    otlp_endpoint: str | None,
) -> NoReturn:
    """Launch *runner* and exit with the wrapped tool's exit code."""
    configure_logging(verbose)

    if not package_args:
        print_error("No package specified")
        sys.exit(1)

    if otlp_endpoint:
        try:
            configure_telemetry(service_name=runner.name, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            print_error(exc)
            sys.exit(1)

    if transport is not None:
        runner = dataclasses.replace(runner, classify_transport=fixed_transport(Transport(transport)))

    selected = select_image(runner, image=image, preset=preset)
    logger.info("Using container image: %s", selected)

    try:
        policy = PolicyLoader(runner.name).resolve(policy_path)
        code = asyncio.run(
            launch(
                runner,
                flags,
                package_args,
                image=selected,
                policy=policy,
                verbose=verbose,
                engine=engine,
                monitor=falco,
            )
        )
    except SemcpError as exc:
        print_error(exc)
        sys.exit(1)

    sys.exit(code)
