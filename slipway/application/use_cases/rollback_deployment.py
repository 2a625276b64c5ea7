"""
Rollback Deployment Use Cases

Architectural Intent:
- rollback:prepare points `upcoming` at the release preceding `current`
- The rollback composite then reuses deploy:publish and deploy:restart,
  so a rollback is published exactly like a fresh deploy
"""

import logging
from typing import Any, List, Mapping, Optional

from slipway.application.orchestration.dag_orchestrator import DAGOrchestrator
from slipway.domain.events.release_events import RollbackPreparedEvent
from slipway.domain.ports.event_bus_port import EventBusPort
from slipway.domain.services.release_state_machine import ReleaseStateMachine
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)

ROLLBACK_SEQUENCE = (
    "deploy:check-config",
    "deploy:check-remote",
    "rollback:prepare",
    "deploy:publish",
    "deploy:restart",
)


class PrepareRollback:
    def __init__(
        self,
        state_machine: ReleaseStateMachine,
        nodes: List[Node],
        deploy_to: str,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.state_machine = state_machine
        self.nodes = nodes
        self.deploy_to = deploy_to
        self.event_bus = event_bus

    async def execute(self) -> str:
        logger.info("Searching release for rollback")
        current, target = await self.state_machine.prepare_rollback(self.nodes)

        if self.event_bus:
            await self.event_bus.publish([
                RollbackPreparedEvent(
                    aggregate_id=self.deploy_to,
                    release=target,
                    rolled_back_from=current,
                )
            ])
        logger.info("Done")
        return target


class RollbackDeployment:
    def __init__(self, tasks: Mapping[str, Any]):
        self.tasks = tasks

    async def execute(self) -> dict[str, Any]:
        orchestrator = DAGOrchestrator.sequence(
            [(name, self.tasks[name].execute) for name in ROLLBACK_SEQUENCE]
        )
        results = await orchestrator.execute({})
        logger.info("Rolled back to %s", results["rollback:prepare"])
        return results
