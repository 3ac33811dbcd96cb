"""``snpx`` — run an npx package inside a policy-constrained container."""

from __future__ import annotations

import click

from semcp.cli_commands._common import PASSTHROUGH_CONTEXT, run_wrapped, selected_preset, wrapper_options
from semcp.runtime.runners import NPX_RUNNER


def build_npx_flags(
    *,
    yes: bool = False,
    package: str | None = None,
    call: str | None = None,
    no_install: bool = False,
    ignore_existing: bool = False,
    quiet: bool = False,
    shell: str | None = None,
) -> list[str]:
    """Translate snpx options into npx flags.

    ``-y`` is always passed unless ``--no-install`` was given without ``-y``.
    """
    flags: list[str] = []
    if yes or not no_install:
        flags.extend(NPX_RUNNER.default_flags)
    if package:
        flags.extend(["-p", package])
    if call:
        flags.extend(["-c", call])
    if no_install:
        flags.append("--no-install")
    if ignore_existing:
        flags.append("--ignore-existing")
    if quiet:
        flags.append("-q")
    if shell:
        flags.extend(["--shell", shell])
    return flags


@click.command("npx", context_settings=PASSTHROUGH_CONTEXT)
@wrapper_options(NPX_RUNNER)
@click.option("-y", "yes", is_flag=True, help="Automatically answer yes when prompted.")
@click.option("--package", "-p", default=None, help="Package to execute from.")
@click.option("--call", "-c", default=None, help="Execute the command in a shell.")
@click.option("--no-install", is_flag=True, help="Skip package installation.")
@click.option("--ignore-existing", is_flag=True, help="Ignore existing commands.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress npm logs.")
@click.option("--shell", default=None, help="Use custom shell.")
@click.argument("package_args", nargs=-1, type=click.UNPROCESSED)
def snpx(
    verbose: bool,
    image: str | None,
    policy_path: str | None,
    engine: str,
    falco: bool | None,
    transport: str | None,
    otlp_endpoint: str | None,
    yes: bool,
    package: str | None,
    call: str | None,
    no_install: bool,
    ignore_existing: bool,
    quiet: bool,
    shell: str | None,
    package_args: tuple[str, ...],
) -> None:
    """Run PACKAGE_ARGS with npx inside a sandboxed container.

    Everything from the first positional argument on is passed to npx
    unchanged.
    """
    flags = build_npx_flags(
        yes=yes,
        package=package,
        call=call,
        no_install=no_install,
        ignore_existing=ignore_existing,
        quiet=quiet,
        shell=shell,
    )
    run_wrapped(
        NPX_RUNNER,
        flags,
        package_args,
        verbose=verbose,
        image=image,
        preset=selected_preset(),
        policy_path=policy_path,
        engine=engine,
        falco=falco,
        transport=transport,
        otlp_endpoint=otlp_endpoint,
    )
