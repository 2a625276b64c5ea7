"""
Source Control Port

Architectural Intent:
- Port interface for the local workspace checkout
- Abstracts revision lookup, workspace creation, pull and update
"""

from abc import ABC, abstractmethod


class SourceControlPort(ABC):

    @abstractmethod
    async def revision(self, workspace: str) -> str:
        """
        Returns the workspace revision id; a trailing '+' marks local changes.
        """
        pass

    @abstractmethod
    async def init(self, workspace: str, repository: str) -> None:
        pass

    @abstractmethod
    async def default_path(self, workspace: str) -> str:
        """
        Returns the repository the workspace pulls from.
        """
        pass

    @abstractmethod
    async def pull(self, workspace: str) -> None:
        pass

    @abstractmethod
    async def update(self, workspace: str, bookmark: str = "") -> None:
        pass
