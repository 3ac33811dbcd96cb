"""Translate a :class:`PolicyDocument` into container-engine ``run`` arguments.

Pure functions, no I/O.  The combined output always lists the bind mounts
first, then the security options, then resource and runtime limits, each
group in the order the policy declares its entries.
"""

from __future__ import annotations

import logging

from semcp.policy.models import PolicyDocument

logger = logging.getLogger(__name__)

FS_SCHEME = "fs://"
NO_NEW_PRIVILEGES = "no-new-privileges"


def mount_args(policy: PolicyDocument | None) -> list[str]:
    """Bind-mount ``fs://`` storage permissions at the same path.

    Mounts are read-only unless the permission grants ``write``.
    """
    args: list[str] = []
    if policy is None:
        return args

    for permission in policy.spec.storage.allow:
        if not permission.uri.startswith(FS_SCHEME):
            logger.warning("Skipping storage permission without %s scheme: %s", FS_SCHEME, permission.uri)
            continue
        path = permission.uri[len(FS_SCHEME):]
        mode = "rw" if permission.writable else "ro"
        args.extend(["-v", f"{path}:{path}:{mode}"])
    return args


def security_args(policy: PolicyDocument | None) -> list[str]:
    """Privilege, capability and ``--security-opt`` arguments."""
    args: list[str] = []
    if policy is None:
        return args

    docker = policy.spec.docker
    emitted_opts: set[str] = set()

    if docker.privileged is False:
        args.extend(["--security-opt", NO_NEW_PRIVILEGES])
        emitted_opts.add(NO_NEW_PRIVILEGES)

    for cap in docker.capabilities.drop:
        args.extend(["--cap-drop", cap])
    for cap in docker.capabilities.add:
        args.extend(["--cap-add", cap])

    for opt in docker.security_opts:
        if opt in emitted_opts:
            continue
        args.extend(["--security-opt", opt])
        emitted_opts.add(opt)
    return args


def resource_args(policy: PolicyDocument | None) -> list[str]:
    """User, filesystem, ulimit, cgroup, network and environment arguments."""
    args: list[str] = []
    if policy is None:
        return args

    docker = policy.spec.docker
    if docker.user:
        args.extend(["--user", docker.user])
    if docker.read_only_root_filesystem:
        args.append("--read-only")
    for mount in docker.tmpfs:
        args.extend(["--tmpfs", mount])

    for limit in ("nproc", "nofile", "fsize"):
        value = getattr(docker.ulimits, limit)
        if value:
            args.extend(["--ulimit", f"{limit}={value}"])

    if docker.memory_limit:
        args.extend(["--memory", docker.memory_limit])
    if docker.cpu_limit:
        args.extend(["--cpus", docker.cpu_limit])
    if docker.pids_limit:
        args.extend(["--pids-limit", str(docker.pids_limit)])

    network = policy.spec.network
    if network.mode:
        args.extend(["--network", network.mode])
    for server in network.dns_servers:
        args.extend(["--dns", server])

    for name in policy.spec.runtime.environment_whitelist:
        args.extend(["-e", name])
    return args


def build_engine_args(policy: PolicyDocument | None) -> list[str]:
    """Return every policy-derived engine argument, mounts first."""
    args: list[str] = []
    args.extend(mount_args(policy))
    args.extend(security_args(policy))
    args.extend(resource_args(policy))
    return args
