"""Shared error types for policy loading and container sessions."""


class SemcpError(Exception):
    """Base error for all semcp failures."""


class PolicyParseError(SemcpError):
    """A policy file could not be read, parsed, or validated."""

    def __init__(self, path: object, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to parse policy file {path}" + (f": {detail}" if detail else ""))


class EngineUnavailableError(SemcpError):
    """The container engine is missing or not running."""

    def __init__(self, engine: str, tool: str = "") -> None:
        self.engine = engine
        self.tool = tool
        msg = f"{engine} is not available or not running"
        if tool:
            msg += f"; {tool} requires {engine} to be installed and running"
        super().__init__(msg)


class SpawnFailureError(SemcpError):
    """The child process could not be started."""

    def __init__(self, command: str, detail: str = "") -> None:
        self.command = command
        self.detail = detail
        super().__init__(f"Failed to spawn {command} command" + (f": {detail}" if detail else ""))


class WaitFailureError(SemcpError):
    """Waiting on the child process failed."""

    def __init__(self, command: str, detail: str = "") -> None:
        self.command = command
        self.detail = detail
        super().__init__(f"Failed to wait for {command} command" + (f": {detail}" if detail else ""))


class FallbackUnsupportedError(SemcpError):
    """Host fallback was requested for a runner that does not allow it."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Fallback not supported for this runner: {command}")


class RuleFileWriteError(SemcpError):
    """The generated Falco rule file could not be written."""

    def __init__(self, path: object, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to write Falco rule file {path}" + (f": {detail}" if detail else ""))


class SessionStateError(SemcpError):
    """A container session was driven through an invalid lifecycle transition."""

    def __init__(self, name: str, current: str, target: str) -> None:
        self.name = name
        self.current = current
        self.target = target
        super().__init__(f"Session {name} cannot move from {current} to {target}")


class OpaError(SemcpError):
    """Talking to an Open Policy Agent server failed."""
