"""Render a :class:`PolicyDocument` as an Open Policy Agent Rego module.

The generated module is handed to an external OPA instance and is never
evaluated here.  Section bodies come first; the shared helpers
(``startswith_any`` and the two ``domain_matches`` bodies) are emitted once,
after them.
"""

from __future__ import annotations

import json

from semcp.policy.models import PolicyDocument


def _string_list(name: str, values: list[str]) -> list[str]:
    lines = [f"\t{name} := ["]
    lines.extend(f"\t\t{json.dumps(value)}," for value in values)
    lines.append("\t]")
    return lines


def _rule(signature: str, comment: str, list_name: str, values: list[str], check: str) -> list[str]:
    return [
        f"{signature} if {{",
        f"\t# {comment}",
        *_string_list(list_name, values),
        f"\t{check}",
        "}",
        "",
    ]


def policy_to_rego(
    policy: PolicyDocument,
    *,
    package: str = "snpx.policy",
    source: str = "snpx.yaml",
) -> str:
    """Return the Rego source for *policy*.

    Args:
        policy: The policy to translate.
        package: Rego package name for the header.
        source: Name of the originating file, quoted in a comment.
    """
    fs = policy.spec.filesystem
    net = policy.spec.network

    lines: list[str] = [
        f"package {package}",
        "",
        "import rego.v1",
        "",
        f"# Auto-generated from {source}",
        "",
        "# Filesystem policies",
    ]
    lines += _rule(
        "allow_filesystem_access(path)",
        "Path is in allowed paths",
        "allowed_paths",
        fs.allowed_paths,
        "startswith_any(path, allowed_paths)",
    )
    lines += _rule(
        "deny_filesystem_access(path)",
        "Path is in blocked paths",
        "blocked_paths",
        fs.blocked_paths,
        "startswith_any(path, blocked_paths)",
    )

    lines.append("# Network policies")
    lines += _rule(
        "allow_network_access(domain)",
        "Domain is in allowed domains",
        "allowed_domains",
        net.allowed_domains,
        "domain_matches(domain, allowed_domains)",
    )
    lines += _rule(
        "deny_network_port(port)",
        "Port is in blocked ports",
        "blocked_ports",
        net.blocked_ports,
        "port == blocked_ports[_]",
    )

    lines += [
        "# Helper functions",
        "startswith_any(str, prefixes) if {",
        "\tstartswith(str, prefixes[_])",
        "}",
        "",
        "domain_matches(domain, allowed) if {",
        "\tallowed[_] == domain",
        "}",
        "",
        "domain_matches(domain, allowed) if {",
        '\tendswith(domain, concat("", [".", allowed[_]]))',
        "}",
    ]
    return "\n".join(lines) + "\n"
