"""
Fabric Adapter

Architectural Intent:
- Infrastructure adapter implementing RemoteExecutorPort via Fabric/SSH
- Uses ThreadingGroup for parallel execution on every node of the fleet
- Uploads mirror a local tree with rsync over ssh, one process per node
- Blocking Fabric/subprocess calls run in the default executor

Security:
- SSH connections use connect_timeout, allow_agent, look_for_keys
- rsync is invoked with an argument list, never through a shell
"""

import asyncio
import logging
import subprocess
from typing import List, Optional
from fabric import Connection, ThreadingGroup
from fabric.exceptions import GroupException
from slipway.domain.errors import CommandFailure
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.value_objects.command_result import (
    CommandResult,
    CopyOptions,
    HostResult,
)
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


def rsync_command(
    node: Node, local_dir: str, remote_dir: str, options: CopyOptions
) -> List[str]:
    cmd = ["rsync", "-az"]
    if options.delete_extraneous:
        cmd.append("--delete")
    for pattern in options.excludes:
        cmd += ["--exclude", pattern]
    cmd += ["-e", f"ssh -p {node.port}"]
    cmd += [
        local_dir.rstrip("/") + "/",
        f"{node.ssh_target}:{remote_dir.rstrip('/')}/",
    ]
    return cmd


class FabricExecutor(RemoteExecutorPort):
    """Adapter implementing RemoteExecutorPort via Fabric/SSH."""

    def __init__(self, connect_timeout: int = 30) -> None:
        self.connect_timeout = connect_timeout

    def _get_connection(self, node: Node) -> Connection:
        return Connection(
            host=node.host,
            user=node.user,
            port=node.port,
            connect_timeout=self.connect_timeout,
            connect_kwargs={
                "allow_agent": True,
                "look_for_keys": True,
            },
        )

    async def run_local(
        self, command: str, cwd: Optional[str] = None, warn: bool = False
    ) -> CommandResult:
        def _run():
            return subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                capture_output=True,
                text=True,
            )

        completed = await asyncio.get_event_loop().run_in_executor(None, _run)
        result = CommandResult(
            stdout=completed.stdout,
            exit_code=completed.returncode,
            stderr=completed.stderr,
        )
        if not result.ok and not warn:
            logger.error("Local command failed: %s: %s", command, result.stderr)
            raise CommandFailure(command, result.exit_code, stderr=result.stderr)
        return result

    async def run_remote(
        self, nodes: List[Node], command: str, warn: bool = False
    ) -> List[HostResult]:
        if not nodes:
            return []

        connections = [self._get_connection(node) for node in nodes]

        def _run():
            group = ThreadingGroup.from_connections(connections)
            try:
                return group.run(command, hide=True, warn=True)
            except GroupException as e:
                return e.result

        group_result = await asyncio.get_event_loop().run_in_executor(None, _run)

        results = []
        for node, connection in zip(nodes, connections):
            outcome = group_result[connection]
            if isinstance(outcome, Exception):
                logger.error(
                    "Execution failed on %s: %s", node, outcome, extra={"host": str(node)}
                )
                raise CommandFailure(command, -1, host=str(node), stderr=str(outcome))
            results.append(
                HostResult(
                    node=node,
                    stdout=outcome.stdout,
                    exit_code=outcome.exited,
                    stderr=outcome.stderr,
                )
            )

        failed = [r for r in results if not r.ok]
        if failed and not warn:
            for r in failed:
                logger.error(
                    "Command failed on %s: %s", r.node, r.stderr, extra={"host": str(r.node)}
                )
            first = failed[0]
            raise CommandFailure(
                command, first.exit_code, host=str(first.node), stderr=first.stderr
            )
        return results

    async def copy_tree(
        self,
        nodes: List[Node],
        local_dir: str,
        remote_dir: str,
        options: CopyOptions = CopyOptions(),
    ) -> None:
        loop = asyncio.get_event_loop()

        async def copy_to(node: Node) -> None:
            cmd = rsync_command(node, local_dir, remote_dir, options)

            def _sync():
                return subprocess.run(cmd, capture_output=True, text=True)

            try:
                result = await loop.run_in_executor(None, _sync)
            except FileNotFoundError as e:
                raise CommandFailure(
                    " ".join(cmd), 127, host=str(node), stderr="rsync not found"
                ) from e
            if result.returncode != 0:
                logger.error("Sync failed to %s: %s", node, result.stderr)
                raise CommandFailure(
                    " ".join(cmd), result.returncode, host=str(node), stderr=result.stderr
                )

        await asyncio.gather(*(copy_to(node) for node in nodes))
