"""``suvx`` — run a uvx tool inside a policy-constrained container."""

from __future__ import annotations

import click

from semcp.cli_commands._common import PASSTHROUGH_CONTEXT, run_wrapped, selected_preset, wrapper_options
from semcp.runtime.runners import UVX_RUNNER


def build_uvx_flags(
    *,
    python: str | None = None,
    from_package: str | None = None,
    with_packages: tuple[str, ...] = (),
    with_editable: tuple[str, ...] = (),
    index: str | None = None,
    index_url: str | None = None,
    extra_index_urls: tuple[str, ...] = (),
    find_links: tuple[str, ...] = (),
    no_index: bool = False,
    prerelease: bool = False,
    upgrade: bool = False,
    force_reinstall: bool = False,
    no_deps: bool = False,
) -> list[str]:
    """Translate suvx options into uvx flags, in uvx's documented order."""
    flags: list[str] = []
    if python:
        flags.extend(["--python", python])
    if from_package:
        flags.extend(["--from", from_package])
    for pkg in with_packages:
        flags.extend(["--with", pkg])
    for pkg in with_editable:
        flags.extend(["--with-editable", pkg])
    if index:
        flags.extend(["--index", index])
    if index_url:
        flags.extend(["--index-url", index_url])
    for url in extra_index_urls:
        flags.extend(["--extra-index-url", url])
    for link in find_links:
        flags.extend(["--find-links", link])
    if no_index:
        flags.append("--no-index")
    if prerelease:
        flags.extend(["--prerelease", "allow"])
    if upgrade:
        flags.append("--upgrade")
    if force_reinstall:
        flags.append("--force-reinstall")
    if no_deps:
        flags.append("--no-deps")
    return flags


@click.command("uvx", context_settings=PASSTHROUGH_CONTEXT)
@wrapper_options(UVX_RUNNER)
@click.option("--python", "-p", default=None, help="Python interpreter to use.")
@click.option("--from", "from_package", default=None, help="Install the command from a different package.")
@click.option("--with", "with_packages", multiple=True, help="Install additional packages alongside the main package.")
@click.option("--with-editable", multiple=True, help="Install additional packages in editable mode.")
@click.option("--index", default=None, help="Base URL of Python package index.")
@click.option("--index-url", default=None, help="Base URL of Python package index.")
@click.option("--extra-index-url", "extra_index_urls", multiple=True, help="Extra URLs of package indexes.")
@click.option("--find-links", multiple=True, help="Additional sources for packages.")
@click.option("--no-index", is_flag=True, help="Ignore package index, only use find-links.")
@click.option("--prerelease", is_flag=True, help="Allow pre-release versions.")
@click.option("--upgrade", is_flag=True, help="Allow package upgrades.")
@click.option("--force-reinstall", is_flag=True, help="Force reinstall packages.")
@click.option("--no-deps", is_flag=True, help="Don't install dependencies.")
@click.argument("package_args", nargs=-1, type=click.UNPROCESSED)
def suvx(
    verbose: bool,
    image: str | None,
    policy_path: str | None,
    engine: str,
    falco: bool | None,
    transport: str | None,
    otlp_endpoint: str | None,
    python: str | None,
    from_package: str | None,
    with_packages: tuple[str, ...],
    with_editable: tuple[str, ...],
    index: str | None,
    index_url: str | None,
    extra_index_urls: tuple[str, ...],
    find_links: tuple[str, ...],
    no_index: bool,
    prerelease: bool,
    upgrade: bool,
    force_reinstall: bool,
    no_deps: bool,
    package_args: tuple[str, ...],
) -> None:
    """Run PACKAGE_ARGS with uvx inside a sandboxed container."""
    flags = build_uvx_flags(
        python=python,
        from_package=from_package,
        with_packages=with_packages,
        with_editable=with_editable,
        index=index,
        index_url=index_url,
        extra_index_urls=extra_index_urls,
        find_links=find_links,
        no_index=no_index,
        prerelease=prerelease,
        upgrade=upgrade,
        force_reinstall=force_reinstall,
        no_deps=no_deps,
    )
    run_wrapped(
        UVX_RUNNER,
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
