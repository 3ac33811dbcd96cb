"""Policy file discovery and parsing.

Typical usage::

    loader = PolicyLoader("snpx")
    policy = loader.resolve(None)           # search the standard locations
    policy = loader.resolve("policy.yaml")  # explicit path, errors are fatal
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from semcp.errors import PolicyParseError
from semcp.policy.models import PolicyDocument

logger = logging.getLogger(__name__)


def parse_policy(raw: str, *, source: object = "<string>") -> PolicyDocument:
    """Parse YAML text into a :class:`PolicyDocument`.

    ``${VAR}`` / ``$VAR`` references are expanded from the environment before
    parsing.  An empty document yields the default (fully permissive) policy.

    Raises:
        PolicyParseError: On YAML syntax errors or schema violations.
    """
    expanded = os.path.expandvars(raw)

    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise PolicyParseError(source, f"YAML parse error: {exc}") from exc

    if data is None:
        return PolicyDocument()
    if not isinstance(data, dict):
        raise PolicyParseError(source, "policy YAML must be a mapping")

    try:
        return PolicyDocument.model_validate(data)
    except ValidationError as exc:
        raise PolicyParseError(source, str(exc)) from exc


def default_search_paths(
    tool: str,
    *,
    cwd: Path | None = None,
    home: Path | None = None,
    app_dir: Path | None = None,
) -> list[Path]:
    """Return the policy locations for *tool*, in lookup order."""
    cwd = cwd or Path.cwd()
    home = home or Path.home()
    app_dir = app_dir or Path(click.get_app_dir(tool))
    return [
        cwd / f"{tool}.yaml",
        cwd / f"{tool}.yml",
        home / f".{tool}.yaml",
        app_dir / "config.yaml",
    ]


class PolicyLoader:
    """Locate and load the security policy for a wrapped tool."""

    def __init__(self, tool: str = "snpx", *, search_paths: list[Path] | None = None) -> None:
        self.tool = tool
        self._search_paths = search_paths

    @property
    def search_paths(self) -> list[Path]:
        if self._search_paths is None:
            return default_search_paths(self.tool)
        return list(self._search_paths)

    def load(self, path: str | Path) -> PolicyDocument:
        """Read and parse the policy at *path*.

        Raises:
            PolicyParseError: If the file cannot be read or is not a valid policy.
        """
        path = Path(path)
        logger.info("Loading policy from: %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PolicyParseError(path, f"cannot read file: {exc}") from exc

        policy = parse_policy(raw, source=path)
        logger.debug("Loaded policy %r from %s", policy.metadata.name, path)
        return policy

    def find(self) -> Path | None:
        """Return the first existing policy file, or ``None``."""
        for candidate in self.search_paths:
            if candidate.is_file():
                return candidate
        return None

    def locate(self) -> PolicyDocument:
        """Load the first policy found in the search path.

        Falls back to the default document when no policy file exists.
        """
        path = self.find()
        if path is None:
            logger.debug("No %s policy file found; using the permissive default", self.tool)
            return PolicyDocument()
        return self.load(path)

    def resolve(self, path: str | Path | None) -> PolicyDocument:
        """Load *path* if given, otherwise :meth:`locate` one."""
        if path is not None:
            return self.load(path)
        return self.locate()
