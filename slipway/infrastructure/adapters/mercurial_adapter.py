"""
Mercurial Adapter

Architectural Intent:
- Infrastructure adapter implementing SourceControlPort via the `hg` CLI
- Commands run through the local side of the RemoteExecutorPort
"""

import shlex
from pathlib import Path
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.ports.source_control_port import SourceControlPort


class MercurialAdapter(SourceControlPort):
    def __init__(self, executor: RemoteExecutorPort):
        self.executor = executor

    async def revision(self, workspace: str) -> str:
        result = await self.executor.run_local("hg id -i", cwd=workspace)
        return result.stdout.strip()

    async def init(self, workspace: str, repository: str) -> None:
        await self.executor.run_local("hg init", cwd=workspace)
        hgrc = Path(workspace) / ".hg" / "hgrc"
        hgrc.write_text(f"[paths]\ndefault = {repository}\n")

    async def default_path(self, workspace: str) -> str:
        result = await self.executor.run_local(
            "hg paths default", cwd=workspace, warn=True
        )
        if not result.ok:
            return ""
        return result.stdout.strip()

    async def pull(self, workspace: str) -> None:
        await self.executor.run_local("hg pull", cwd=workspace)

    async def update(self, workspace: str, bookmark: str = "") -> None:
        command = "hg update"
        if bookmark:
            command = f"{command} {shlex.quote(bookmark)}"
        await self.executor.run_local(command, cwd=workspace)
