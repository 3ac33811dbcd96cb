"""Tests for ContainerSession naming and lifecycle."""

from __future__ import annotations

import pytest

from semcp.errors import SessionStateError
from semcp.policy.models import PolicyDocument
from semcp.runtime.session import ContainerSession, SessionState, monotonic_ticks

_MONITORED = PolicyDocument.model_validate({"spec": {"monitor": {"enabled": True}}})


class TestNaming:
    def test_injected_clock_and_pid(self) -> None:
        session = ContainerSession.create("node:24-alpine", prefix="suvx", clock=lambda: 99, pid=lambda: 1234)
        assert session.name == "suvx-1234-99"
        assert session.image == "node:24-alpine"

    def test_rapid_sessions_are_distinct(self) -> None:
        names = {ContainerSession.create("img").name for _ in range(100)}
        assert len(names) == 100

    def test_ticks_strictly_increase(self) -> None:
        readings = [monotonic_ticks() for _ in range(1000)]
        assert all(b > a for a, b in zip(readings, readings[1:]))


class TestMonitorFlag:
    def test_no_policy_never_monitors(self) -> None:
        assert ContainerSession.create("img", monitor=True).monitor_enabled is False

    def test_follows_policy(self) -> None:
        assert ContainerSession.create("img", policy=_MONITORED).monitor_enabled is True
        assert ContainerSession.create("img", policy=PolicyDocument()).monitor_enabled is False

    def test_override(self) -> None:
        assert ContainerSession.create("img", policy=_MONITORED, monitor=False).monitor_enabled is False
        assert ContainerSession.create("img", policy=PolicyDocument(), monitor=True).monitor_enabled is True


class TestLifecycle:
    def test_normal_exit(self) -> None:
        session = ContainerSession.create("img")
        assert session.state is SessionState.CREATED
        session.mark_running()
        session.mark_exited(3)
        assert session.state is SessionState.EXITED
        assert session.exit_code == 3

    def test_interrupt(self) -> None:
        session = ContainerSession.create("img")
        session.mark_running()
        session.mark_interrupted(130)
        assert session.state is SessionState.INTERRUPTED
        assert session.exit_code == 130

    def test_exit_before_running(self) -> None:
        session = ContainerSession.create("img")
        with pytest.raises(SessionStateError, match="created to exited"):
            session.mark_exited(0)

    def test_never_reused(self) -> None:
        session = ContainerSession.create("img")
        session.mark_running()
        session.mark_exited(0)
        with pytest.raises(SessionStateError):
            session.mark_running()
