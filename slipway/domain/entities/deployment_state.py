"""
Deployment State Module

Architectural Intent:
- Makes the implicit NoRelease -> Staged -> Published machine explicit
- State is inferred once (by ReleaseStore.inspect_state) instead of ad hoc
  symlink checks scattered across components
- Transitions produce new instances; illegal transitions raise
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from slipway.domain.errors import InvalidStateTransition


class ReleaseStatus(Enum):
    NO_RELEASE = auto()
    STAGED = auto()
    PUBLISHED = auto()


@dataclass(frozen=True)
class DeploymentState:
    current: Optional[str] = None
    upcoming: Optional[str] = None

    @property
    def status(self) -> ReleaseStatus:
        if self.upcoming is not None:
            return ReleaseStatus.STAGED
        if self.current is not None:
            return ReleaseStatus.PUBLISHED
        return ReleaseStatus.NO_RELEASE

    def stage(self, release: str) -> "DeploymentState":
        if self.upcoming is not None:
            raise InvalidStateTransition(
                f"Release {self.upcoming} is already staged as upcoming"
            )
        if not release:
            raise InvalidStateTransition("Cannot stage an empty release name")
        return DeploymentState(current=self.current, upcoming=release)

    def publish(self) -> "DeploymentState":
        if self.upcoming is None:
            raise InvalidStateTransition("No upcoming release to publish")
        return DeploymentState(current=self.upcoming, upcoming=None)

    def __str__(self) -> str:
        return (
            f"{self.status.name} (current={self.current or '-'}, "
            f"upcoming={self.upcoming or '-'})"
        )
