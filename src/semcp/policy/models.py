"""Pydantic models for the security policy YAML schema.

Every field has an inert default, so a document parsed from an empty file
(or built with ``PolicyDocument()``) places no restriction on the container
and renders no engine arguments.  Nested sections are always concrete
objects: translators never need to unwrap optionals.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _PolicyModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AccessType(str, Enum):
    """Access capabilities a storage permission can grant."""

    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"


class Metadata(_PolicyModel):
    """Free-text policy metadata (no effect on translation)."""

    name: str = ""
    description: str = ""


class Capabilities(_PolicyModel):
    """Linux capabilities to drop from / add to the container."""

    drop: list[str] = Field(default_factory=list)
    add: list[str] = Field(default_factory=list)


class Ulimits(_PolicyModel):
    """Process resource limits; ``0`` means unset."""

    nproc: int = 0
    nofile: int = 0
    fsize: int = 0


class DockerSpec(_PolicyModel):
    """Container engine settings."""

    privileged: bool | None = Field(
        default=None,
        description="Only an explicit ``false`` has an effect (no-new-privileges).",
    )
    capabilities: Capabilities = Field(default_factory=Capabilities)
    security_opts: list[str] = Field(default_factory=list)
    user: str = ""
    read_only_root_filesystem: bool = False
    tmpfs: list[str] = Field(default_factory=list)
    ulimits: Ulimits = Field(default_factory=Ulimits)
    memory_limit: str = ""
    cpu_limit: str = ""
    pids_limit: int = 0


class NetworkSpec(_PolicyModel):
    """Network mode and the allow/deny lists used by the Rego translation."""

    mode: str = Field(default="", validation_alias=AliasChoices("mode", "policy"))
    dns_servers: list[str] = Field(default_factory=list)
    allowed_domains: list[str] = Field(default_factory=list)
    blocked_ports: list[str] = Field(default_factory=list)

    @field_validator("blocked_ports", mode="before")
    @classmethod
    def _ports_as_strings(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(port) for port in value]
        return value


class FilesystemSpec(_PolicyModel):
    """Path prefixes for the Rego filesystem predicates."""

    mount_options: list[str] = Field(default_factory=list)
    allowed_paths: list[str] = Field(default_factory=list)
    blocked_paths: list[str] = Field(default_factory=list)


class StoragePermission(_PolicyModel):
    """A storage URI and the access granted to it (drives bind mounts)."""

    uri: str
    access: list[AccessType] = Field(default_factory=list)

    @field_validator("access", mode="before")
    @classmethod
    def _lowercase_access(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v.lower() if isinstance(v, str) else v for v in value]
        return value

    @property
    def writable(self) -> bool:
        return AccessType.WRITE in self.access


class StorageSpec(_PolicyModel):
    allow: list[StoragePermission] = Field(default_factory=list)


class SignalHandling(_PolicyModel):
    graceful_shutdown_timeout: str = ""
    force_kill_timeout: str = ""


class RuntimeSpec(_PolicyModel):
    """Runtime settings.

    ``timeout`` and ``max_restart_attempts`` are carried as metadata only;
    nothing in semcp enforces them.
    """

    timeout: str = ""
    max_restart_attempts: int = 0
    environment_whitelist: list[str] = Field(default_factory=list)
    signal_handling: SignalHandling = Field(default_factory=SignalHandling)


class AuditSpec(_PolicyModel):
    log_level: str = ""
    log_commands: bool = False
    log_network_access: bool = False
    log_file_access: bool = False


class MonitorRule(_PolicyModel):
    """A single structured Falco rule."""

    name: str
    description: str = ""
    condition: str
    output: str = ""
    priority: str = ""
    action: str = ""


class MonitorRuleSet(_PolicyModel):
    """A named group of Falco rules, either inline text or structured rules."""

    name: str
    description: str = ""
    enabled: bool = False
    rules: list[MonitorRule] = Field(default_factory=list)
    rule_content: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.rule_content and not self.rules


class MonitorSpec(_PolicyModel):
    enabled: bool = False
    rules: list[MonitorRuleSet] = Field(default_factory=list)


class PolicySpec(_PolicyModel):
    docker: DockerSpec = Field(default_factory=DockerSpec)
    network: NetworkSpec = Field(default_factory=NetworkSpec)
    filesystem: FilesystemSpec = Field(default_factory=FilesystemSpec)
    storage: StorageSpec = Field(default_factory=StorageSpec)
    runtime: RuntimeSpec = Field(default_factory=RuntimeSpec)
    audit: AuditSpec = Field(default_factory=AuditSpec)
    monitor: MonitorSpec = Field(
        default_factory=MonitorSpec,
        validation_alias=AliasChoices("monitor", "falco"),
    )


class PolicyDocument(_PolicyModel):
    """Top-level security policy parsed from YAML."""

    api_version: str = Field(default="v1", validation_alias=AliasChoices("apiVersion", "api_version"))
    kind: str = "SecurityPolicy"
    metadata: Metadata = Field(default_factory=Metadata)
    spec: PolicySpec = Field(default_factory=PolicySpec)

    @property
    def monitor_enabled(self) -> bool:
        return self.spec.monitor.enabled
