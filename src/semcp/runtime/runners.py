"""Runner descriptors, one record per wrapped tool ecosystem.

A runner is plain data: the shipped variants differ only in field values,
and behaviour lives in the free functions below.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Transport(str, Enum):
    """Channel the wrapped tool speaks over."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


NODE_ALPINE = "node:24-alpine"
NODE_SLIM = "node:24-slim"
NODE_STANDARD = "node:24"
NODE_DISTROLESS = "gcr.io/distroless/nodejs24-debian12"

PYTHON_ALPINE = "ghcr.io/astral-sh/uv:python3.12-alpine"
PYTHON_SLIM = "ghcr.io/astral-sh/uv:python3.12-bookworm-slim"
PYTHON_STANDARD = "ghcr.io/astral-sh/uv:python3.12-bookworm"


def stdio_transport(package: str) -> Transport:
    """Classify every package as a stdio server."""
    return Transport.STDIO


def fixed_transport(transport: Transport) -> Callable[[str], Transport]:
    """Return a classifier that always answers *transport*."""

    def classify(package: str) -> Transport:
        return transport

    return classify


def requires_terminal(transport: Transport) -> bool:
    """HTTP and SSE servers get a TTY; stdio servers never do."""
    return transport is not Transport.STDIO


@dataclass(frozen=True)
class Runner:
    """Describes how one wrapped tool is launched inside a container."""

    name: str
    command: str
    default_image: str
    default_flags: tuple[str, ...] = ()
    classify_transport: Callable[[str], Transport] = stdio_transport
    requires_tty: Callable[[Transport], bool] = requires_terminal
    extra_engine_args: tuple[str, ...] = ()
    supports_fallback: bool = False
    image_presets: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


def command_args(runner: Runner, flags: Sequence[str], args: Sequence[str]) -> list[str]:
    """``[command, *flags, *args]``; flags always precede positional arguments."""
    return [runner.command, *flags, *args]


def select_image(runner: Runner, *, image: str | None = None, preset: str | None = None) -> str:
    """Pick the container image: explicit *image*, then *preset*, then the default.

    Raises:
        KeyError: If *preset* is not one of the runner's presets.
    """
    if image:
        return image
    if preset:
        return runner.image_presets[preset]
    return runner.default_image


NPX_RUNNER = Runner(
    name="snpx",
    command="npx",
    default_image=NODE_ALPINE,
    default_flags=("-y",),
    supports_fallback=True,
    image_presets=MappingProxyType({
        "alpine": NODE_ALPINE,
        "slim": NODE_SLIM,
        "standard": NODE_STANDARD,
        "distroless": NODE_DISTROLESS,
    }),
)

UVX_RUNNER = Runner(
    name="suvx",
    command="uvx",
    default_image=PYTHON_ALPINE,
    image_presets=MappingProxyType({
        "alpine": PYTHON_ALPINE,
        "slim": PYTHON_SLIM,
        "standard": PYTHON_STANDARD,
    }),
)
