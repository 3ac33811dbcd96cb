"""Tests for the policy to engine-argument translation."""

from __future__ import annotations

import logging

import pytest

from semcp.policy.engine_args import build_engine_args, mount_args, resource_args, security_args
from semcp.policy.loader import parse_policy
from semcp.policy.models import PolicyDocument


def _policy(data: dict) -> PolicyDocument:
    return PolicyDocument.model_validate({"spec": data})


class TestEmptyPolicy:
    def test_none(self) -> None:
        assert build_engine_args(None) == []

    def test_default_document(self) -> None:
        assert build_engine_args(PolicyDocument()) == []


class TestMountArgs:
    def test_read_only_mount(self) -> None:
        doc = _policy({"storage": {"allow": [{"uri": "fs:///usr/local/lib", "access": ["read"]}]}})
        assert mount_args(doc) == ["-v", "/usr/local/lib:/usr/local/lib:ro"]

    def test_write_access_is_rw(self) -> None:
        doc = _policy({"storage": {"allow": [{"uri": "fs:///tmp/work", "access": ["read", "write"]}]}})
        assert mount_args(doc) == ["-v", "/tmp/work:/tmp/work:rw"]

    def test_no_access_is_ro(self) -> None:
        doc = _policy({"storage": {"allow": [{"uri": "fs:///data"}]}})
        assert mount_args(doc) == ["-v", "/data:/data:ro"]

    def test_non_fs_uri_skipped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        doc = _policy({"storage": {"allow": [{"uri": "s3://bucket", "access": ["read"]}]}})
        with caplog.at_level(logging.WARNING, logger="semcp.policy.engine_args"):
            assert mount_args(doc) == []
        assert "s3://bucket" in caplog.text

    def test_source_order(self) -> None:
        doc = _policy(
            {
                "storage": {
                    "allow": [
                        {"uri": "fs:///b", "access": ["write"]},
                        {"uri": "fs:///a", "access": ["read"]},
                    ]
                }
            }
        )
        assert mount_args(doc) == ["-v", "/b:/b:rw", "-v", "/a:/a:ro"]


class TestSecurityArgs:
    def test_privileged_false(self) -> None:
        assert security_args(_policy({"docker": {"privileged": False}})) == [
            "--security-opt",
            "no-new-privileges",
        ]

    def test_privileged_true_or_absent_emits_nothing(self) -> None:
        assert security_args(_policy({"docker": {"privileged": True}})) == []
        assert security_args(_policy({"docker": {}})) == []

    def test_cap_drop_all(self) -> None:
        assert security_args(_policy({"docker": {"capabilities": {"drop": ["ALL"]}}})) == ["--cap-drop", "ALL"]

    def test_caps_and_opts_order(self) -> None:
        doc = _policy(
            {
                "docker": {
                    "privileged": False,
                    "capabilities": {"drop": ["ALL"], "add": ["NET_BIND_SERVICE", "CHOWN"]},
                    "security_opts": ["no-new-privileges", "seccomp=default.json"],
                }
            }
        )
        assert security_args(doc) == [
            "--security-opt", "no-new-privileges",
            "--cap-drop", "ALL",
            "--cap-add", "NET_BIND_SERVICE",
            "--cap-add", "CHOWN",
            "--security-opt", "seccomp=default.json",
        ]  # fmt: skip


class TestResourceArgs:
    def test_all_resource_fields(self) -> None:
        doc = _policy(
            {
                "docker": {
                    "user": "1000:1000",
                    "read_only_root_filesystem": True,
                    "tmpfs": ["/tmp:rw,size=64m"],
                    "ulimits": {"nproc": 64, "nofile": 1024, "fsize": 0},
                    "memory_limit": "512m",
                    "cpu_limit": "1.5",
                    "pids_limit": 100,
                },
                "network": {"mode": "bridge", "dns_servers": ["1.1.1.1"]},
                "runtime": {"environment_whitelist": ["HOME", "PATH"]},
            }
        )
        assert resource_args(doc) == [
            "--user", "1000:1000",
            "--read-only",
            "--tmpfs", "/tmp:rw,size=64m",
            "--ulimit", "nproc=64",
            "--ulimit", "nofile=1024",
            "--memory", "512m",
            "--cpus", "1.5",
            "--pids-limit", "100",
            "--network", "bridge",
            "--dns", "1.1.1.1",
            "-e", "HOME",
            "-e", "PATH",
        ]  # fmt: skip

    def test_runtime_timeout_emits_nothing(self) -> None:
        assert resource_args(_policy({"runtime": {"timeout": "30s", "max_restart_attempts": 3}})) == []


class TestBuildEngineArgs:
    def test_mounts_precede_security(self) -> None:
        doc = parse_policy(
            """\
spec:
  docker:
    privileged: false
    capabilities:
      drop: [ALL]
  storage:
    allow:
      - uri: fs:///usr/local/lib
        access: [read]
      - uri: fs:///workspace
        access: [read, write]
"""
        )
        assert build_engine_args(doc) == [
            "-v", "/usr/local/lib:/usr/local/lib:ro",
            "-v", "/workspace:/workspace:rw",
            "--security-opt", "no-new-privileges",
            "--cap-drop", "ALL",
        ]  # fmt: skip

    def test_deterministic(self) -> None:
        doc = _policy({"docker": {"capabilities": {"drop": ["ALL"]}, "memory_limit": "1g"}})
        assert build_engine_args(doc) == build_engine_args(doc)
