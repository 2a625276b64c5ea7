"""
Domain Events Package

Architectural Intent:
- Contains domain events published after each lifecycle step
- Events are the primary mechanism for observing a deploy from outside
"""

from slipway.domain.events.event_base import DomainEvent
from slipway.domain.events.release_events import (
    RELEASE_EVENTS,
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

__all__ = [
    "DomainEvent",
    "RELEASE_EVENTS",
    "WorkspacePreparedEvent",
    "SourceFetchedEvent",
    "BuildCompletedEvent",
    "ReleaseStagedEvent",
    "SetupCompletedEvent",
    "ReleasePublishedEvent",
    "ServicesRestartedEvent",
    "ReleasesPrunedEvent",
    "RollbackPreparedEvent",
]
