"""
Fleet Consistency Checker

Architectural Intent:
- Gates every fleet-wide read: run an inspection command on all hosts,
  trim the outputs and require them to be byte-equal
- Detects drift, never reconciles it: no majority vote, no retry
- Divergence aborts the calling operation before any mutation
"""

from __future__ import annotations
import logging
from typing import List, Mapping

from slipway.domain.errors import FleetDivergence
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


def ensure_agreement(command: str, values: Mapping[str, str]) -> str:
    """Returns the single value every host reported, or raises FleetDivergence."""
    if not values:
        raise ValueError("Cannot check agreement of an empty fleet")
    distinct = set(values.values())
    if len(distinct) > 1:
        raise FleetDivergence(command, values)
    return next(iter(distinct))


class FleetConsistencyChecker:
    def __init__(self, executor: RemoteExecutorPort) -> None:
        self._executor = executor

    async def agreed_value(self, nodes: List[Node], command: str) -> str:
        """
        Runs `command` on every node and returns the agreed trimmed output.
        An empty string means "not present" on every host.
        """
        if not nodes:
            raise ValueError("Fleet must contain at least one node")

        results = await self._executor.run_remote(nodes, command)
        values = {str(result.node): result.stdout.strip() for result in results}
        try:
            return ensure_agreement(command, values)
        except FleetDivergence:
            logger.error("Fleet divergence on %r: %s", command, values)
            raise
