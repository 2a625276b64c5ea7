"""
Domain Errors

Architectural Intent:
- Single taxonomy for every failure the release lifecycle can raise
- Fatal errors abort the whole composite sequence; nothing is retried
- Messages name the violated invariant so the CLI can surface them as-is
"""

from __future__ import annotations
from typing import Mapping, Optional, Sequence


class SlipwayError(Exception):
    """Base class for all release lifecycle failures."""


class ConfigurationError(SlipwayError):
    pass


class FleetDivergence(SlipwayError):
    """Hosts returned different values for a consistency-checked command."""

    def __init__(self, command: str, values: Mapping[str, str]) -> None:
        self.command = command
        self.values = dict(values)
        listing = ", ".join(f"{host}={value!r}" for host, value in self.values.items())
        super().__init__(f"Remote servers are not synced ({listing})")


class UnsafeRemoteState(SlipwayError):
    """The deployment root on one or more hosts violates the layout invariants."""

    def __init__(self, findings: Mapping[str, Sequence[str]]) -> None:
        self.findings = {host: list(items) for host, items in findings.items()}
        details = "; ".join(
            f"{host}: {', '.join(items)}" for host, items in self.findings.items()
        )
        super().__init__(f"Remote directory structure is not sane ({details})")


class NoCurrentRelease(SlipwayError):
    def __init__(self) -> None:
        super().__init__("Can't find current release")


class NoRollbackTarget(SlipwayError):
    def __init__(self, reason: str = "") -> None:
        message = "Can't find release for rollback"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DirtyWorkspace(SlipwayError):
    def __init__(self, revision: str) -> None:
        self.revision = revision
        super().__init__(f"Workspace isn't clean (revision {revision})")


class WorkspaceError(SlipwayError):
    pass


class InvalidStateTransition(SlipwayError):
    pass


class RetentionViolation(SlipwayError):
    def __init__(self, current: str) -> None:
        self.current = current
        super().__init__(
            f"Refusing to prune releases: current release {current} is in the prune set"
        )


class CommandFailure(SlipwayError):
    """A local or remote command exited non-zero."""

    def __init__(
        self,
        command: str,
        exit_code: int,
        host: Optional[str] = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.host = host
        self.stderr = stderr
        where = host or "local"
        message = f"Command failed on {where} (exit {exit_code}): {command.strip()}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
