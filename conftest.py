"""Global test configuration.

Provides two RemoteExecutorPort doubles:

- ScriptedExecutor answers remote commands from canned per-host outputs and
  records everything it was asked to run.
- LocalShellExecutor runs commands for real with bash on this machine, so a
  single "localhost" node can exercise the full release layout in tmp_path.
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

import pytest

from slipway.domain.errors import CommandFailure
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.value_objects.command_result import (
    CommandResult,
    CopyOptions,
    HostResult,
)
from slipway.domain.value_objects.node import Node


class ScriptedExecutor(RemoteExecutorPort):
    def __init__(self) -> None:
        self.remote_commands: list[str] = []
        self.local_commands: list[tuple[str, Optional[str]]] = []
        self.copies: list[tuple[str, str, CopyOptions]] = []
        self._remote: list[tuple[str, tuple[str, ...], int]] = []
        self._local: list[tuple[str, str, int]] = []

    def on_remote(self, needle: str, *outputs: str, exit_code: int = 0) -> None:
        """Answer commands containing `needle`; one output per host, or one for all.

        The most recently registered matching needle wins.
        """
        self._remote.insert(0, (needle, outputs, exit_code))

    def on_local(self, needle: str, output: str = "", exit_code: int = 0) -> None:
        self._local.insert(0, (needle, output, exit_code))

    def ran(self, needle: str) -> bool:
        return any(needle in command for command in self.remote_commands)

    def matching(self, needle: str) -> list[str]:
        return [command for command in self.remote_commands if needle in command]

    async def run_local(
        self, command: str, cwd: Optional[str] = None, warn: bool = False
    ) -> CommandResult:
        self.local_commands.append((command, cwd))
        output, exit_code = "", 0
        for needle, out, code in self._local:
            if needle in command:
                output, exit_code = out, code
                break
        if exit_code and not warn:
            raise CommandFailure(command, exit_code)
        return CommandResult(stdout=output, exit_code=exit_code)

    async def run_remote(
        self, nodes: List[Node], command: str, warn: bool = False
    ) -> List[HostResult]:
        self.remote_commands.append(command)
        outputs: tuple[str, ...] = ("",)
        exit_code = 0
        for needle, outs, code in self._remote:
            if needle in command:
                outputs, exit_code = outs or ("",), code
                break
        if len(outputs) == 1:
            outputs = outputs * len(nodes)
        results = [
            HostResult(node=node, stdout=out, exit_code=exit_code)
            for node, out in zip(nodes, outputs)
        ]
        if exit_code and not warn:
            raise CommandFailure(command, exit_code, host=str(nodes[0]))
        return results

    async def copy_tree(
        self,
        nodes: List[Node],
        local_dir: str,
        remote_dir: str,
        options: CopyOptions = CopyOptions(),
    ) -> None:
        self.copies.append((local_dir, remote_dir, options))


class LocalShellExecutor(RemoteExecutorPort):
    async def run_local(
        self, command: str, cwd: Optional[str] = None, warn: bool = False
    ) -> CommandResult:
        completed = subprocess.run(
            ["bash", "-c", command], cwd=cwd, capture_output=True, text=True
        )
        if completed.returncode and not warn:
            raise CommandFailure(command, completed.returncode, stderr=completed.stderr)
        return CommandResult(
            stdout=completed.stdout,
            exit_code=completed.returncode,
            stderr=completed.stderr,
        )

    async def run_remote(
        self, nodes: List[Node], command: str, warn: bool = False
    ) -> List[HostResult]:
        results = []
        for node in nodes:
            local = await self.run_local(command, warn=True)
            if not local.ok and not warn:
                raise CommandFailure(
                    command, local.exit_code, host=str(node), stderr=local.stderr
                )
            results.append(
                HostResult(
                    node=node,
                    stdout=local.stdout,
                    exit_code=local.exit_code,
                    stderr=local.stderr,
                )
            )
        return results

    async def copy_tree(
        self,
        nodes: List[Node],
        local_dir: str,
        remote_dir: str,
        options: CopyOptions = CopyOptions(),
    ) -> None:
        target = Path(remote_dir)
        if options.delete_extraneous and target.exists():
            shutil.rmtree(target)
        shutil.copytree(
            local_dir,
            target,
            dirs_exist_ok=True,
            ignore=shutil.ignore_patterns(*options.excludes),
        )


@pytest.fixture
def scripted_executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture
def local_executor() -> LocalShellExecutor:
    return LocalShellExecutor()


@pytest.fixture
def fleet() -> list[Node]:
    return [Node(host="web1.example.com"), Node(host="web2.example.com")]
