"""ContainerExecutor: assembles the engine invocation and supervises the child.

Uses the engine CLI via subprocess (no docker-py dependency).  Each run:
1. Builds ``run --rm -i --name <session> ... <image> <command> <flags> <args>``.
2. Spawns the engine with inherited stdio.
3. Races the child's exit against the interrupt token.
4. On interrupt, fires a detached ``<engine> stop <session>`` and reports 130.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import shutil
import signal
import subprocess
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

from semcp.errors import FallbackUnsupportedError, SpawnFailureError, WaitFailureError
from semcp.monitor.falco import monitor_labels, write_rule_file
from semcp.policy.engine_args import build_engine_args
from semcp.runtime.runners import Runner, command_args
from semcp.runtime.session import ContainerSession

logger = logging.getLogger(__name__)

INTERRUPT_EXIT_CODE = 130
DEFAULT_ENGINE = "docker"


@contextlib.contextmanager
def interrupt_listener(token: asyncio.Event) -> Iterator[None]:
    """Set *token* on SIGINT for the duration of the block."""
    loop = asyncio.get_running_loop()
    restore: Callable[[], object]
    try:
        loop.add_signal_handler(signal.SIGINT, token.set)
        restore = lambda: loop.remove_signal_handler(signal.SIGINT)  # noqa: E731
    except NotImplementedError:
        # Event loops without add_signal_handler (Windows)
        previous = signal.signal(signal.SIGINT, lambda *_: loop.call_soon_threadsafe(token.set))
        restore = lambda: signal.signal(signal.SIGINT, previous)  # noqa: E731
    except RuntimeError:
        logger.debug("SIGINT listener unavailable outside the main thread")
        restore = lambda: None  # noqa: E731
    try:
        yield
    finally:
        restore()


async def engine_available(engine: str = DEFAULT_ENGINE) -> bool:
    """Return ``True`` if *engine* is on PATH and ``<engine> --version`` succeeds."""
    if shutil.which(engine) is None:
        return False
    try:
        proc = await asyncio.create_subprocess_exec(
            engine,
            "--version",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        return False
    return await proc.wait() == 0


def _exit_code(returncode: int) -> int:
    # Negative return codes mean the child died from a signal.
    return returncode if returncode >= 0 else 1


def _terminate(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.terminate()


class ContainerExecutor:
    """Runs one wrapped tool for one :class:`ContainerSession`."""

    def __init__(
        self,
        runner: Runner,
        session: ContainerSession,
        *,
        engine: str = DEFAULT_ENGINE,
        rules_dir: Path | None = None,
    ) -> None:
        self.runner = runner
        self.session = session
        self.engine = engine
        self._rules_dir = rules_dir

    def build_invocation(self, flags: Sequence[str], args: Sequence[str]) -> list[str]:
        """Return the engine arguments (without the engine executable itself).

        Raises:
            RuleFileWriteError: If monitoring is on and the rule file cannot be written.
        """
        package = args[0] if args else ""
        transport = self.runner.classify_transport(package)

        invocation = ["run", "--rm", "-i", "--name", self.session.name]
        if self.runner.requires_tty(transport):
            invocation.append("-t")

        policy = self.session.policy
        if self.session.monitor_enabled and policy is not None:
            rule_file = write_rule_file(policy, tool=self.runner.name, directory=self._rules_dir, force=True)
            if rule_file is not None:
                invocation.extend(monitor_labels(rule_file))
                self._log("Falco monitoring enabled with rules: %s", rule_file)

        invocation.extend(build_engine_args(policy))
        invocation.extend(self.runner.extra_engine_args)
        invocation.append(self.session.image)
        invocation.extend(command_args(self.runner, flags, args))
        return invocation

    async def run_containerized(
        self,
        flags: Sequence[str],
        args: Sequence[str],
        *,
        token: asyncio.Event | None = None,
    ) -> int:
        """Run the tool inside the container; return its exit code (130 if interrupted)."""
        command = [self.engine, *self.build_invocation(flags, args)]
        self._log("Running: %s", shlex.join(command))

        token = token or asyncio.Event()
        with interrupt_listener(token):
            proc = await self._spawn(command)
            return await self._supervise(proc, command[0], token, on_interrupt=self._request_stop)

    async def run_fallback(
        self,
        flags: Sequence[str],
        args: Sequence[str],
        *,
        token: asyncio.Event | None = None,
    ) -> int:
        """Run the tool directly on the host, without any isolation.

        Raises:
            FallbackUnsupportedError: If the runner does not allow host execution.
        """
        if not self.runner.supports_fallback:
            raise FallbackUnsupportedError(self.runner.command)

        logger.warning(
            "Falling back to host %s: the package runs WITHOUT container isolation or policy enforcement",
            self.runner.command,
        )
        command = command_args(self.runner, flags, args)
        token = token or asyncio.Event()
        with interrupt_listener(token):
            proc = await self._spawn(command)
            return await self._supervise(proc, command[0], token, on_interrupt=_terminate)

    async def _spawn(self, command: list[str]) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(*command)
        except OSError as exc:
            raise SpawnFailureError(command[0], str(exc)) from exc

    async def _supervise(
        self,
        proc: asyncio.subprocess.Process,
        program: str,
        token: asyncio.Event,
        *,
        on_interrupt: Callable[[asyncio.subprocess.Process], None],
    ) -> int:
        self.session.mark_running()
        returncode = await self._race(proc, program, token)

        if returncode is None:
            on_interrupt(proc)
            self.session.mark_interrupted(INTERRUPT_EXIT_CODE)
            return INTERRUPT_EXIT_CODE

        code = _exit_code(returncode)
        self.session.mark_exited(code)
        return code

    async def _race(
        self, proc: asyncio.subprocess.Process, program: str, token: asyncio.Event
    ) -> int | None:
        """Wait for the child or the token; ``None`` means the token won."""
        waiter = asyncio.ensure_future(proc.wait())
        interrupted = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait({waiter, interrupted}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (waiter, interrupted):
                if not task.done():
                    task.cancel()

        if waiter not in done:
            return None
        try:
            return waiter.result()
        except OSError as exc:
            raise WaitFailureError(program, str(exc)) from exc

    def _request_stop(self, _proc: asyncio.subprocess.Process) -> None:
        """Fire-and-forget ``<engine> stop <session>``; failures are ignored."""
        self._log("Received interrupt, cleaning up container %s", self.session.name)
        with contextlib.suppress(OSError):
            subprocess.Popen(
                [self.engine, "stop", self.session.name],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )

    def _log(self, msg: str, *args: object) -> None:
        level = logging.INFO if self.session.verbose else logging.DEBUG
        logger.log(level, msg, *args)
