"""
Release Directory Store

Architectural Intent:
- Catalog of releases under `<deploy_to>/releases`, read consistently across the fleet
- Owns the `current` / `upcoming` symlinks: reading them, creating upcoming,
  and swapping upcoming onto current with a single atomic rename
- Central place where the NoRelease/Staged/Published state is inferred
"""

from __future__ import annotations
import logging
import shlex
from typing import Iterable, List, Optional

from slipway.domain.entities.deployment_state import DeploymentState
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.services.fleet_consistency import FleetConsistencyChecker
from slipway.domain.value_objects.deploy_layout import (
    CURRENT_LINK,
    UPCOMING_LINK,
    DeployLayout,
)
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


def parse_listing(output: str) -> List[str]:
    """Splits `ls -1` output into sorted release names, dropping blank lines."""
    names = [line.strip() for line in output.splitlines()]
    return sorted(name for name in names if name)


class ReleaseStore:
    def __init__(
        self,
        executor: RemoteExecutorPort,
        checker: FleetConsistencyChecker,
        layout: DeployLayout,
    ) -> None:
        self._executor = executor
        self._checker = checker
        self.layout = layout

    def _in_root(self, command: str) -> str:
        return f"cd {shlex.quote(self.layout.deploy_to)} && {command}"

    async def list_releases(self, nodes: List[Node]) -> List[str]:
        releases = shlex.quote(self.layout.releases_path)
        output = await self._checker.agreed_value(
            nodes, f"if [ -d {releases} ]; then ls -1 {releases}; fi"
        )
        return parse_listing(output)

    async def _resolve_link(self, nodes: List[Node], link_path: str) -> Optional[str]:
        link = shlex.quote(link_path)
        target = await self._checker.agreed_value(
            nodes, f"if [ -h {link} ]; then readlink {link}; fi"
        )
        if not target:
            return None
        return DeployLayout.release_from_target(target)

    async def resolve_current(self, nodes: List[Node]) -> Optional[str]:
        return await self._resolve_link(nodes, self.layout.current_path)

    async def resolve_upcoming(self, nodes: List[Node]) -> Optional[str]:
        return await self._resolve_link(nodes, self.layout.upcoming_path)

    async def inspect_state(self, nodes: List[Node]) -> DeploymentState:
        current = await self.resolve_current(nodes)
        upcoming = await self.resolve_upcoming(nodes)
        return DeploymentState(current=current, upcoming=upcoming)

    async def create_release_dir(self, nodes: List[Node], name: str) -> str:
        path = self.layout.release_path(name)
        await self._executor.run_remote(nodes, f"mkdir -p {shlex.quote(path)}")
        return path

    async def seed_release(self, nodes: List[Node], source: str, target: str) -> None:
        """Copies the full contents of release `source`, hidden entries included, into `target`."""
        src = shlex.quote(self.layout.release_path(source) + "/.")
        dst = shlex.quote(self.layout.release_path(target))
        await self._executor.run_remote(nodes, f"cp -a {src} {dst}")

    async def link_upcoming(self, nodes: List[Node], name: str) -> None:
        target = shlex.quote(DeployLayout.link_target(name))
        await self._executor.run_remote(
            nodes, self._in_root(f"ln -s {target} {UPCOMING_LINK}")
        )

    async def unlink_upcoming(self, nodes: List[Node]) -> None:
        await self._executor.run_remote(nodes, self._in_root(f"rm -f {UPCOMING_LINK}"))

    async def promote_upcoming(self, nodes: List[Node]) -> None:
        # rename(2) over the existing link: current is never observably absent
        await self._executor.run_remote(
            nodes, self._in_root(f"mv -fT {UPCOMING_LINK} {CURRENT_LINK}")
        )

    async def remove_releases(self, nodes: List[Node], names: Iterable[str]) -> None:
        paths = [self.layout.release_path(name) for name in names]
        if not paths:
            return
        await self._executor.run_remote(
            nodes, "rm -rf " + " ".join(shlex.quote(p) for p in paths)
        )
