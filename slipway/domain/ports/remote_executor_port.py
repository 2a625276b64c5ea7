"""
Remote Executor Port

Architectural Intent:
- Port interface for running commands locally and on the fleet
- Implemented by adapters (Fabric/SSH, test doubles)
- A non-zero exit raises CommandFailure unless the caller passes warn=True
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from slipway.domain.value_objects.node import Node
from slipway.domain.value_objects.command_result import (
    CommandResult,
    CopyOptions,
    HostResult,
)


class RemoteExecutorPort(ABC):
    """
    Port interface for executing commands on local and remote hosts.
    """

    @abstractmethod
    async def run_local(
        self, command: str, cwd: Optional[str] = None, warn: bool = False
    ) -> CommandResult:
        """
        Runs a shell command on the local machine.
        """
        pass

    @abstractmethod
    async def run_remote(
        self, nodes: List[Node], command: str, warn: bool = False
    ) -> List[HostResult]:
        """
        Runs a shell command on every node concurrently.
        Returns one result per node, in the order of `nodes`.
        """
        pass

    @abstractmethod
    async def copy_tree(
        self,
        nodes: List[Node],
        local_dir: str,
        remote_dir: str,
        options: CopyOptions = CopyOptions(),
    ) -> None:
        """
        Mirrors a local directory tree onto `remote_dir` on every node.
        """
        pass
