"""
Environment Check Use Cases

Architectural Intent:
- deploy:check-config validates the configuration record before anything runs
- deploy:check-remote inspects the deployment root on every host before any mutation
"""

import logging
from typing import List

from slipway.domain.errors import ConfigurationError
from slipway.domain.services.remote_sanity import RemoteSanityCheck
from slipway.domain.value_objects.node import Node
from slipway.infrastructure.config import SlipwayConfig

logger = logging.getLogger(__name__)


class CheckConfig:
    def __init__(self, config: SlipwayConfig):
        self.config = config

    async def execute(self) -> None:
        deploy = self.config.deploy
        if not deploy.repository:
            raise ConfigurationError("no repository defined!")
        if not deploy.workspace:
            raise ConfigurationError("no workspace defined!")
        if not deploy.deploy_to:
            raise ConfigurationError("no deployment path defined!")
        if not self.config.fleet.targets:
            raise ConfigurationError("no fleet targets defined!")
        if deploy.keep_releases < 0:
            raise ConfigurationError(
                f"keep_releases must be >= 0, got {deploy.keep_releases}"
            )
        for target in self.config.fleet.targets:
            try:
                Node.parse(target)
            except ValueError as e:
                raise ConfigurationError(f"invalid fleet target {target!r}: {e}") from e


class CheckRemote:
    def __init__(self, sanity: RemoteSanityCheck, nodes: List[Node]):
        self.sanity = sanity
        self.nodes = nodes

    async def execute(self) -> None:
        logger.info("Check remote directories")
        await self.sanity.verify(self.nodes)
        logger.info("Done")
