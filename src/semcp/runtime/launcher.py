"""Single-shot launch of a wrapped tool: containerized if possible, else host fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from semcp.errors import EngineUnavailableError
from semcp.policy.models import PolicyDocument
from semcp.runtime.executor import DEFAULT_ENGINE, ContainerExecutor, engine_available, interrupt_listener
from semcp.runtime.runners import Runner
from semcp.runtime.session import ContainerSession
from semcp.utils.telemetry import (
    ATTR_ENGINE,
    ATTR_EXIT_CODE,
    ATTR_IMAGE,
    ATTR_MODE,
    ATTR_MONITOR_ENABLED,
    ATTR_RUNNER,
    ATTR_SESSION_NAME,
    get_tracer,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


async def launch(
    runner: Runner,
    flags: Sequence[str],
    args: Sequence[str],
    *,
    image: str | None = None,
    policy: PolicyDocument | None = None,
    verbose: bool = False,
    engine: str = DEFAULT_ENGINE,
    monitor: bool | None = None,
    token: asyncio.Event | None = None,
    rules_dir: Path | None = None,
) -> int:
    """Run *runner* once and return the exit code for the process.

    Raises:
        EngineUnavailableError: If *engine* is missing and the runner has no fallback.
        SemcpError: Any spawn, wait, or rule-file failure.
    """
    session = ContainerSession.create(
        image or runner.default_image,
        prefix=runner.name,
        verbose=verbose,
        policy=policy,
        monitor=monitor,
    )
    executor = ContainerExecutor(runner, session, engine=engine, rules_dir=rules_dir)

    with _tracer.start_as_current_span("session.run") as span:
        span.set_attribute(ATTR_SESSION_NAME, session.name)
        span.set_attribute(ATTR_RUNNER, runner.name)
        span.set_attribute(ATTR_IMAGE, session.image)
        span.set_attribute(ATTR_ENGINE, engine)
        span.set_attribute(ATTR_MONITOR_ENABLED, session.monitor_enabled)

        token = token or asyncio.Event()
        with interrupt_listener(token):
            available = await engine_available(engine)

        if available:
            logger.debug("%s is available, using containerized execution", engine)
            span.set_attribute(ATTR_MODE, "container")
            code = await executor.run_containerized(flags, args, token=token)
        elif runner.supports_fallback:
            span.set_attribute(ATTR_MODE, "fallback")
            code = await executor.run_fallback(flags, args, token=token)
        else:
            raise EngineUnavailableError(engine, runner.name)

        span.set_attribute(ATTR_EXIT_CODE, code)
        return code
