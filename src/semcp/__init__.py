"""semcp: secure launchers for MCP servers, wrapping npx and uvx in policy-constrained containers."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from semcp.policy.loader import PolicyLoader as PolicyLoader
    from semcp.policy.models import PolicyDocument as PolicyDocument
    from semcp.runtime.launcher import launch as launch

_LAZY_EXPORTS = {
    "PolicyDocument": "semcp.policy.models",
    "PolicyLoader": "semcp.policy.loader",
    "launch": "semcp.runtime.launcher",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'semcp' has no attribute {name!r}")
