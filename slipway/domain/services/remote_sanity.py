"""
Remote Sanity Check

Inspects the deployment root on every host before any mutation. Each
finding is reported per host; any finding aborts with UnsafeRemoteState.
"""

from __future__ import annotations
import logging
import shlex
from typing import Dict, List

from slipway.domain.errors import UnsafeRemoteState
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.value_objects.deploy_layout import DeployLayout
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)

FINDING_PREFIX = "ERR:"


def sanity_script(deploy_to: str) -> str:
    root = shlex.quote(deploy_to)
    return f"""
if [ -e {root} ]; then
  if [ ! -d {root} ]; then
    echo '{FINDING_PREFIX} deploy dir exists and is not a directory'
  else
    cd {root}
    {{ [ -e upcoming ] || [ -h upcoming ]; }} && echo '{FINDING_PREFIX} upcoming link already exists'
    [ -e current ] && [ ! -h current ] && echo '{FINDING_PREFIX} current exists and is not a symlink'
    [ -e releases ] && [ ! -d releases ] && echo '{FINDING_PREFIX} releases exists and is not a directory'
  fi
fi
exit 0
"""


def parse_findings(output: str) -> List[str]:
    return [
        line.strip()[len(FINDING_PREFIX):].strip()
        for line in output.splitlines()
        if line.strip().startswith(FINDING_PREFIX)
    ]


class RemoteSanityCheck:
    def __init__(self, executor: RemoteExecutorPort, layout: DeployLayout) -> None:
        self._executor = executor
        self._layout = layout

    async def findings(self, nodes: List[Node]) -> Dict[str, List[str]]:
        results = await self._executor.run_remote(
            nodes, sanity_script(self._layout.deploy_to)
        )
        report: Dict[str, List[str]] = {}
        for result in results:
            found = parse_findings(result.stdout)
            if found:
                report[str(result.node)] = found
        return report

    async def verify(self, nodes: List[Node]) -> None:
        report = await self.findings(nodes)
        if report:
            for host, items in report.items():
                logger.error("Unsafe remote state on %s: %s", host, "; ".join(items))
            raise UnsafeRemoteState(report)
