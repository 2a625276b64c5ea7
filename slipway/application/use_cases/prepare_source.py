"""
Source Preparation Use Cases

Architectural Intent:
- deploy:create-workspace, deploy:fetch and deploy:build act on the local
  workspace only; the fleet is untouched until a release is staged
- A dirty workspace is refused before pulling, since its revision id would
  not identify the uploaded tree
"""

import logging
from pathlib import Path
from typing import Optional

from slipway.domain.errors import DirtyWorkspace, WorkspaceError
from slipway.domain.events.release_events import (
    BuildCompletedEvent,
    SourceFetchedEvent,
    WorkspacePreparedEvent,
)
from slipway.domain.ports.event_bus_port import EventBusPort
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.ports.source_control_port import SourceControlPort
from slipway.domain.value_objects.release_name import is_dirty_revision
from slipway.infrastructure.config import DeployConfig

logger = logging.getLogger(__name__)


class PrepareWorkspace:
    def __init__(
        self,
        vcs: SourceControlPort,
        config: DeployConfig,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.vcs = vcs
        self.config = config
        self.event_bus = event_bus

    async def execute(self) -> bool:
        """Returns True when a new workspace was created."""
        logger.info("Creating and checking workspace")
        workspace = Path(self.config.workspace)

        created = False
        if not workspace.exists():
            workspace.mkdir(parents=True)
            await self.vcs.init(str(workspace), self.config.repository)
            created = True
        elif not workspace.is_dir():
            raise WorkspaceError(f"workspace {workspace} exists and is not a directory")
        else:
            default_path = await self.vcs.default_path(str(workspace))
            if default_path != self.config.repository:
                raise WorkspaceError(
                    "workspace default path doesn't match config.repository "
                    f"({default_path!r} != {self.config.repository!r})"
                )

        if self.event_bus:
            await self.event_bus.publish([
                WorkspacePreparedEvent(
                    aggregate_id=self.config.deploy_to,
                    workspace=str(workspace),
                    created=created,
                )
            ])
        logger.info("Done")
        return created


class FetchSource:
    def __init__(
        self,
        vcs: SourceControlPort,
        config: DeployConfig,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.vcs = vcs
        self.config = config
        self.event_bus = event_bus

    async def execute(self) -> str:
        logger.info("Fetching source")
        workspace = self.config.workspace

        revision = await self.vcs.revision(workspace)
        if is_dirty_revision(revision):
            raise DirtyWorkspace(revision)

        await self.vcs.pull(workspace)
        await self.vcs.update(workspace, self.config.bookmark)
        revision = await self.vcs.revision(workspace)

        if self.event_bus:
            await self.event_bus.publish([
                SourceFetchedEvent(aggregate_id=self.config.deploy_to, revision=revision)
            ])
        logger.info("Done")
        return revision


class BuildWorkspace:
    def __init__(
        self,
        executor: RemoteExecutorPort,
        vcs: SourceControlPort,
        config: DeployConfig,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.executor = executor
        self.vcs = vcs
        self.config = config
        self.event_bus = event_bus

    async def execute(self) -> str:
        logger.info("Building")
        if not self.config.build:
            logger.warning("No build commands supplied")

        for command in self.config.build:
            await self.executor.run_local(command, cwd=self.config.workspace)

        revision = await self.vcs.revision(self.config.workspace)
        if is_dirty_revision(revision):
            logger.warning(
                "Workspace gets dirty after building, "
                "it could lead to an error during next deploy"
            )

        if self.event_bus:
            await self.event_bus.publish([
                BuildCompletedEvent(aggregate_id=self.config.deploy_to, revision=revision)
            ])
        logger.info("Done")
        return revision
