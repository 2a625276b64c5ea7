"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.ports.source_control_port import SourceControlPort
from slipway.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "RemoteExecutorPort",
    "SourceControlPort",
    "EventBusPort",
]
