"""Security policy model, discovery, and translators."""

from semcp.policy.engine_args import build_engine_args, mount_args, resource_args, security_args
from semcp.policy.loader import PolicyLoader, default_search_paths, parse_policy
from semcp.policy.models import (
    AccessType,
    MonitorRule,
    MonitorRuleSet,
    PolicyDocument,
    StoragePermission,
)
from semcp.policy.rego import policy_to_rego

__all__ = [
    "AccessType",
    "MonitorRule",
    "MonitorRuleSet",
    "PolicyDocument",
    "PolicyLoader",
    "StoragePermission",
    "build_engine_args",
    "default_search_paths",
    "mount_args",
    "parse_policy",
    "policy_to_rego",
    "resource_args",
    "security_args",
]
