"""
Deploy Fleet Use Case

Architectural Intent:
- Runs the full deploy as a linear chain of named steps
- The first failing step aborts the run; nothing is retried and nothing
  already applied on the fleet is reverted
"""

import logging
from typing import Any, Mapping

from slipway.application.orchestration.dag_orchestrator import DAGOrchestrator

logger = logging.getLogger(__name__)

DEPLOY_SEQUENCE = (
    "deploy:check-config",
    "deploy:check-remote",
    "deploy:create-workspace",
    "deploy:fetch",
    "deploy:build",
    "deploy:update",
    "deploy:setup",
    "deploy:publish",
    "deploy:restart",
    "deploy:cleanup",
)


class DeployFleet:
    def __init__(self, tasks: Mapping[str, Any]):
        self.tasks = tasks

    async def execute(self) -> dict[str, Any]:
        orchestrator = DAGOrchestrator.sequence(
            [(name, self.tasks[name].execute) for name in DEPLOY_SEQUENCE]
        )
        results = await orchestrator.execute({})
        staged = results["deploy:update"]
        logger.info("Deployment of %s successful.", staged.name)
        return results
