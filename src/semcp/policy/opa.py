"""Open Policy Agent helpers: binary check, sidecar launch, policy upload and queries."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Any

import httpx

from semcp.errors import OpaError

logger = logging.getLogger(__name__)

DEFAULT_OPA_IMAGE = "openpolicyagent/opa:latest"
DEFAULT_OPA_URL = "http://localhost:8181"


def opa_available(binary: str = "opa") -> bool:
    """Return ``True`` if *binary* is on PATH and ``opa version`` succeeds."""
    if shutil.which(binary) is None:
        return False
    try:
        result = subprocess.run(
            [binary, "version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return result.returncode == 0


def sidecar_args(
    container_name: str,
    *,
    image: str = DEFAULT_OPA_IMAGE,
    log_level: str = "debug",
) -> list[str]:
    """Engine ``run`` arguments for an OPA server sharing *container_name*'s network."""
    return [
        "run",
        "-d",
        "--name",
        f"{container_name}-opa",
        f"--network=container:{container_name}",
        image,
        "run",
        "--server",
        f"--log-level={log_level}",
    ]


class OpaClient:
    """Pushes generated Rego modules to an OPA server and queries their decisions.

    Usage::

        async with OpaClient("http://localhost:8181") as opa:
            await opa.upload_policy("snpx", rego_text)
            allowed = await opa.check_policy("snpx.policy", {"domain": "example.com"})
    """

    def __init__(self, base_url: str = DEFAULT_OPA_URL, *, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> OpaClient:
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "OpaClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def upload_policy(self, policy_id: str, rego: str) -> None:
        """Create or replace the policy module *policy_id*."""
        try:
            response = await self._http().put(
                f"/v1/policies/{policy_id}",
                content=rego.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise OpaError(f"Failed to upload policy {policy_id!r} to {self._base_url}: {exc}") from exc
        logger.debug("Uploaded policy %s to %s", policy_id, self._base_url)

    async def check_policy(self, package: str, input: dict[str, Any]) -> bool:
        """Evaluate ``data.<package>.allow`` for *input*.

        An undefined decision counts as a denial.
        """
        path = f"/v1/data/{package.replace('.', '/')}/allow"
        try:
            response = await self._http().post(path, json={"input": input})
            response.raise_for_status()
            result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as exc:
            raise OpaError(f"Failed to query {path} on {self._base_url}: {exc}") from exc
        logger.debug("OPA decision for %s: %r", package, result)
        return result is True
