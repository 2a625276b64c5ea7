"""
Release Staging Engine

Architectural Intent:
- Materializes a new release directory derived from the current one
- Seeds it with a full copy of the current release so uploads only move deltas
- Overlays freshly uploaded source directories (concurrently, disjoint paths)
- Finishes by pointing `upcoming` at the new release

Failure Policy:
- Any failure aborts before `upcoming` is created; the partial directory is
  left in place for manual or retention cleanup
"""

from __future__ import annotations
import asyncio
import logging
import os
import posixpath
import shlex
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from slipway.domain.errors import ConfigurationError
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.value_objects.command_result import CopyOptions
from slipway.domain.value_objects.node import Node
from slipway.domain.value_objects.release_name import ReleaseName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadPlan:
    source: str
    target: str


@dataclass(frozen=True)
class StagedRelease:
    name: ReleaseName
    path: str
    seeded_from: Optional[str] = None


def plan_uploads(
    workspace: str, dirs_to_copy: Sequence[str], release_path: str
) -> List[UploadPlan]:
    """Maps each configured source directory to its place inside the release."""
    plans = []
    for entry in dirs_to_copy or (".",):
        source = os.path.normpath(os.path.join(workspace, entry))
        relative = os.path.relpath(source, workspace)
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            raise ConfigurationError(f"{entry} is outside of the workspace")
        relative = relative.replace(os.sep, "/")
        target = posixpath.normpath(posixpath.join(release_path, relative))
        plans.append(UploadPlan(source=source, target=target))
    return plans


class ReleaseStagingEngine:
    def __init__(
        self,
        executor: RemoteExecutorPort,
        store: ReleaseStore,
        workspace: str,
        dirs_to_copy: Sequence[str] = (),
        copy_options: CopyOptions = CopyOptions(),
    ) -> None:
        self._executor = executor
        self._store = store
        self._workspace = workspace
        self._dirs_to_copy = tuple(dirs_to_copy)
        self._copy_options = copy_options

    async def stage(
        self, nodes: List[Node], revision: str, now: Optional[datetime] = None
    ) -> StagedRelease:
        name = ReleaseName.for_revision(revision, now)
        release_path = self._store.layout.release_path(str(name))
        plans = plan_uploads(self._workspace, self._dirs_to_copy, release_path)

        # fleet-checked read first: a divergent fleet leaves no trace
        previous = await self._store.resolve_current(nodes)

        logger.info("Create next release dir: %s", release_path)
        await self._store.create_release_dir(nodes, str(name))

        if previous:
            logger.info("Copy previous release from %s", previous)
            await self._store.seed_release(nodes, previous, str(name))
        else:
            logger.info("No previous release found")

        logger.info("Upload source")
        await self._upload(nodes, plans)

        logger.info("Create symlink")
        await self._store.link_upcoming(nodes, str(name))

        return StagedRelease(name=name, path=release_path, seeded_from=previous)

    async def _upload(self, nodes: List[Node], plans: List[UploadPlan]) -> None:
        targets = " ".join(shlex.quote(plan.target) for plan in plans)
        await self._executor.run_remote(nodes, f"mkdir -p {targets}")

        async def upload(plan: UploadPlan) -> None:
            await self._executor.copy_tree(
                nodes, plan.source, plan.target, self._copy_options
            )
            logger.info("%s uploaded", plan.source)

        await asyncio.gather(*(upload(plan) for plan in plans))
