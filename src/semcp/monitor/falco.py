"""Falco rule generation for the monitoring sidecar.

The rule file is referenced from a container label and picked up by Falco;
semcp never reads it back.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from semcp.errors import RuleFileWriteError
from semcp.policy.models import MonitorRule, PolicyDocument

logger = logging.getLogger(__name__)

RULE_KIND = "falco-rules"
RULES_FILE_LABEL = "falco.rules.file"
MONITORED_NAMESPACE_LABEL = "io.kubernetes.pod.namespace=falco-monitored"


def _rule_record(rule: MonitorRule) -> dict[str, Any]:
    record: dict[str, Any] = {"rule": rule.name}
    if rule.description:
        record["desc"] = rule.description
    record["condition"] = rule.condition
    for key in ("output", "priority", "action"):
        value = getattr(rule, key)
        if value:
            record[key] = value
    return record


def render_rules(policy: PolicyDocument, *, tool: str = "snpx", force: bool | None = None) -> str | None:
    """Return the Falco rules text for *policy*, or ``None`` if there is nothing to monitor.

    *force* overrides ``monitor.enabled``; rule sets must still be enabled
    individually.
    """
    monitor = policy.spec.monitor
    if not (monitor.enabled if force is None else force):
        return None

    rule_sets = [rs for rs in monitor.rules if rs.enabled and not rs.is_empty]
    if not rule_sets:
        return None

    parts = [f"# Falco rules generated by {tool}\n"]
    for rule_set in rule_sets:
        if rule_set.rule_content:
            parts.append(rule_set.rule_content + "\n")
            continue
        for rule in rule_set.rules:
            parts.append(
                yaml.safe_dump(
                    [_rule_record(rule)],
                    sort_keys=False,
                    allow_unicode=True,
                    width=float("inf"),
                )
            )
        parts.append("\n")
    return "".join(parts)


def rule_file_path(tool: str = "snpx", *, directory: Path | None = None, pid: int | None = None) -> Path:
    """``<tempdir>/<tool>-falco-rules-<pid>.yaml``."""
    directory = directory or Path(tempfile.gettempdir())
    pid = os.getpid() if pid is None else pid
    return directory / f"{tool}-{RULE_KIND}-{pid}.yaml"


def write_rule_file(
    policy: PolicyDocument,
    *,
    tool: str = "snpx",
    directory: Path | None = None,
    pid: int | None = None,
    force: bool | None = None,
) -> Path | None:
    """Render and persist the Falco rules; return the file path or ``None``.

    Raises:
        RuleFileWriteError: If the file cannot be written.
    """
    content = render_rules(policy, tool=tool, force=force)
    if content is None:
        return None

    path = rule_file_path(tool, directory=directory, pid=pid)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise RuleFileWriteError(path, str(exc)) from exc

    logger.debug("Wrote Falco rules to %s", path)
    return path


def monitor_labels(rule_file: Path) -> list[str]:
    """Engine ``--label`` arguments that hand *rule_file* to the Falco sidecar."""
    return [
        "--label",
        f"{RULES_FILE_LABEL}={rule_file}",
        "--label",
        MONITORED_NAMESPACE_LABEL,
    ]
