"""Container session runtime: runners, sessions, executor, launcher."""

from semcp.runtime.executor import (
    DEFAULT_ENGINE,
    INTERRUPT_EXIT_CODE,
    ContainerExecutor,
    engine_available,
)
from semcp.runtime.launcher import launch
from semcp.runtime.runners import NPX_RUNNER, UVX_RUNNER, Runner, Transport
from semcp.runtime.session import ContainerSession, SessionState

__all__ = [
    "DEFAULT_ENGINE",
    "INTERRUPT_EXIT_CODE",
    "NPX_RUNNER",
    "UVX_RUNNER",
    "ContainerExecutor",
    "ContainerSession",
    "Runner",
    "SessionState",
    "Transport",
    "engine_available",
    "launch",
]
