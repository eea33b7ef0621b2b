"""Shared error types for the agent execution core."""

from __future__ import annotations


class MimirError(Exception):
    """Base error for all Mimir failures."""


class ConfigError(MimirError):
    """Configuration could not be read or failed validation."""


class PermissionDeniedError(MimirError):
    """A permission decision blocked a command, write, or delete."""

    def __init__(self, message: str, reason: str = "") -> None:
        self.reason = reason
        msg = message
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class SecurityError(MimirError):
    """A sandbox invariant was violated.

    Raised when no devcontainer descriptor exists, an executor is used before
    ``initialize()``, a working directory leaves the project boundary, or an
    operation is unsupported by the backend.
    """


class ExecutionError(MimirError):
    """A command or tool ran but failed."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)


class DockerError(ExecutionError):
    """A ``docker`` CLI invocation failed."""

    def __init__(self, detail: str = "", *, exit_code: int | None = None, stderr: str = "") -> None:
        self.detail = detail
        super().__init__(
            "Docker error" + (f": {detail}" if detail else ""),
            exit_code=exit_code,
            stderr=stderr,
        )


class ToolRegistrationError(MimirError):
    """A tool could not be added to the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class AgentPausedError(MimirError):
    """The agent observed a pause request at the top of its loop."""

    def __init__(self) -> None:
        super().__init__("Agent paused")
