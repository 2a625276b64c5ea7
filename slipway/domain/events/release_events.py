"""
Release Lifecycle Events

One event per successfully completed step. `aggregate_id` is the deployment
root (`deploy_to`) the step acted on.
"""

from dataclasses import dataclass
from typing import Any

from slipway.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class WorkspacePreparedEvent(DomainEvent):
    workspace: str = ""
    created: bool = False


@dataclass(frozen=True)
class SourceFetchedEvent(DomainEvent):
    revision: str = ""


@dataclass(frozen=True)
class BuildCompletedEvent(DomainEvent):
    revision: str = ""


@dataclass(frozen=True)
class ReleaseStagedEvent(DomainEvent):
    release: str = ""
    seeded_from: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(release=self.release, seeded_from=self.seeded_from)
        return data


@dataclass(frozen=True)
class SetupCompletedEvent(DomainEvent):
    commands: int = 0


@dataclass(frozen=True)
class ReleasePublishedEvent(DomainEvent):
    release: str = ""
    previous: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(release=self.release, previous=self.previous)
        return data


@dataclass(frozen=True)
class ServicesRestartedEvent(DomainEvent):
    commands: int = 0


@dataclass(frozen=True)
class ReleasesPrunedEvent(DomainEvent):
    pruned: tuple[str, ...] = ()


@dataclass(frozen=True)
class RollbackPreparedEvent(DomainEvent):
    release: str = ""
    rolled_back_from: str = ""


RELEASE_EVENTS: tuple[type, ...] = (
    WorkspacePreparedEvent,
    SourceFetchedEvent,
    BuildCompletedEvent,
    ReleaseStagedEvent,
    SetupCompletedEvent,
    ReleasePublishedEvent,
    ServicesRestartedEvent,
    ReleasesPrunedEvent,
    RollbackPreparedEvent,
)
