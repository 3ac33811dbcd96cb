"""Falco monitoring support."""

from semcp.monitor.falco import monitor_labels, render_rules, rule_file_path, write_rule_file

__all__ = [
    "monitor_labels",
    "render_rules",
    "rule_file_path",
    "write_rule_file",
]
