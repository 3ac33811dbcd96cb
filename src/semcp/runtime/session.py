"""Per-invocation container session identity and lifecycle."""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from semcp.errors import SessionStateError
from semcp.policy.models import PolicyDocument


class SessionState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    EXITED = "exited"
    INTERRUPTED = "interrupted"


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.CREATED: frozenset({SessionState.RUNNING}),
    SessionState.RUNNING: frozenset({SessionState.EXITED, SessionState.INTERRUPTED}),
    SessionState.EXITED: frozenset(),
    SessionState.INTERRUPTED: frozenset(),
}

_clock_lock = threading.Lock()
_last_tick = 0


def monotonic_ticks() -> int:
    """Nanosecond monotonic reading, strictly increasing within the process."""
    global _last_tick
    with _clock_lock:
        _last_tick = max(time.monotonic_ns(), _last_tick + 1)
        return _last_tick


@dataclass
class ContainerSession:
    """One container run: created at invocation start, never reused.

    Use :meth:`create` rather than the constructor so the name is derived
    from the process id and the clock.
    """

    name: str
    image: str
    verbose: bool = False
    policy: PolicyDocument | None = None
    monitor_enabled: bool = False
    state: SessionState = SessionState.CREATED
    exit_code: int | None = None

    @classmethod
    def create(
        cls,
        image: str,
        *,
        prefix: str = "snpx",
        verbose: bool = False,
        policy: PolicyDocument | None = None,
        monitor: bool | None = None,
        clock: Callable[[], int] = monotonic_ticks,
        pid: Callable[[], int] = os.getpid,
    ) -> ContainerSession:
        """Build a session named ``<prefix>-<pid>-<clock>``.

        *monitor* overrides the policy's ``monitor.enabled`` flag; monitoring
        is never enabled without a policy.
        """
        if policy is None:
            monitor_enabled = False
        elif monitor is None:
            monitor_enabled = policy.monitor_enabled
        else:
            monitor_enabled = monitor
        return cls(
            name=f"{prefix}-{pid()}-{clock()}",
            image=image,
            verbose=verbose,
            policy=policy,
            monitor_enabled=monitor_enabled,
        )

    def _move(self, target: SessionState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise SessionStateError(self.name, self.state.value, target.value)
        self.state = target

    def mark_running(self) -> None:
        self._move(SessionState.RUNNING)

    def mark_exited(self, code: int) -> None:
        self._move(SessionState.EXITED)
        self.exit_code = code

    def mark_interrupted(self, code: int) -> None:
        self._move(SessionState.INTERRUPTED)
        self.exit_code = code
