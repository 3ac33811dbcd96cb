"""Tests for the OPA helpers (no real opa binary or server)."""

from __future__ import annotations

import subprocess
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from semcp.errors import OpaError
from semcp.policy.opa import DEFAULT_OPA_IMAGE, OpaClient, opa_available, sidecar_args


class TestOpaAvailable:
    def test_missing_binary(self) -> None:
        with patch("semcp.policy.opa.shutil.which", return_value=None):
            assert opa_available() is False

    def test_version_succeeds(self) -> None:
        with (
            patch("semcp.policy.opa.shutil.which", return_value="/usr/bin/opa"),
            patch("semcp.policy.opa.subprocess.run", return_value=subprocess.CompletedProcess([], 0)) as run,
        ):
            assert opa_available() is True
        assert run.call_args.args[0] == ["opa", "version"]

    def test_version_fails(self) -> None:
        with (
            patch("semcp.policy.opa.shutil.which", return_value="/usr/bin/opa"),
            patch("semcp.policy.opa.subprocess.run", return_value=subprocess.CompletedProcess([], 1)),
        ):
            assert opa_available() is False

    def test_os_error(self) -> None:
        with (
            patch("semcp.policy.opa.shutil.which", return_value="/usr/bin/opa"),
            patch("semcp.policy.opa.subprocess.run", side_effect=OSError("exec format error")),
        ):
            assert opa_available() is False


class TestSidecarArgs:
    def test_shares_container_network(self) -> None:
        assert sidecar_args("snpx-1-2") == [
            "run",
            "-d",
            "--name",
            "snpx-1-2-opa",
            "--network=container:snpx-1-2",
            DEFAULT_OPA_IMAGE,
            "run",
            "--server",
            "--log-level=debug",
        ]

    def test_custom_image_and_level(self) -> None:
        args = sidecar_args("c", image="opa:1.0", log_level="info")
        assert "opa:1.0" in args
        assert args[-1] == "--log-level=info"


class TestOpaClient:
    async def test_upload_policy(self) -> None:
        response = MagicMock()
        response.raise_for_status = MagicMock()

        async with OpaClient("http://opa:8181/") as client:
            with patch.object(client._http(), "put", new_callable=AsyncMock, return_value=response) as put:
                await client.upload_policy("snpx", "package snpx.policy\n")

        put.assert_awaited_once()
        assert put.call_args.args[0] == "/v1/policies/snpx"
        assert put.call_args.kwargs["content"] == b"package snpx.policy\n"
        assert put.call_args.kwargs["headers"] == {"Content-Type": "text/plain"}

    async def test_http_error_wrapped(self) -> None:
        async with OpaClient() as client:
            with patch.object(
                client._http(),
                "put",
                new_callable=AsyncMock,
                side_effect=httpx.ConnectError("refused"),
            ):
                with pytest.raises(OpaError, match="snpx"):
                    await client.upload_policy("snpx", "package x\n")

    async def test_status_error_wrapped(self) -> None:
        request = httpx.Request("PUT", "http://localhost:8181/v1/policies/snpx")
        response = httpx.Response(400, request=request)

        async with OpaClient() as client:
            with patch.object(client._http(), "put", new_callable=AsyncMock, return_value=response):
                with pytest.raises(OpaError):
                    await client.upload_policy("snpx", "not rego")

    async def test_requires_context_manager(self) -> None:
        with pytest.raises(RuntimeError, match="async context manager"):
            await OpaClient().upload_policy("snpx", "")


class TestCheckPolicy:
    def _response(self, body: object) -> httpx.Response:
        request = httpx.Request("POST", "http://localhost:8181/v1/data/snpx/policy/allow")
        return httpx.Response(200, json=body, request=request)

    async def test_queries_allow_rule(self) -> None:
        async with OpaClient() as client:
            with patch.object(
                client._http(),
                "post",
                new_callable=AsyncMock,
                return_value=self._response({"result": True}),
            ) as post:
                assert await client.check_policy("snpx.policy", {"domain": "example.com"}) is True

        assert post.call_args.args[0] == "/v1/data/snpx/policy/allow"
        assert post.call_args.kwargs["json"] == {"input": {"domain": "example.com"}}

    async def test_denied(self) -> None:
        async with OpaClient() as client:
            with patch.object(
                client._http(), "post", new_callable=AsyncMock, return_value=self._response({"result": False})
            ):
                assert await client.check_policy("snpx.policy", {}) is False

    async def test_undefined_decision_is_denial(self) -> None:
        async with OpaClient() as client:
            with patch.object(client._http(), "post", new_callable=AsyncMock, return_value=self._response({})):
                assert await client.check_policy("snpx.policy", {}) is False

    async def test_http_error_wrapped(self) -> None:
        async with OpaClient() as client:
            with patch.object(
                client._http(),
                "post",
                new_callable=AsyncMock,
                side_effect=httpx.ConnectError("refused"),
            ):
                with pytest.raises(OpaError, match="/v1/data/suvx/policy/allow"):
                    await client.check_policy("suvx.policy", {})

    async def test_status_error_wrapped(self) -> None:
        request = httpx.Request("POST", "http://localhost:8181/v1/data/snpx/policy/allow")
        response = httpx.Response(500, request=request)

        async with OpaClient() as client:
            with patch.object(client._http(), "post", new_callable=AsyncMock, return_value=response):
                with pytest.raises(OpaError):
                    await client.check_policy("snpx.policy", {})
