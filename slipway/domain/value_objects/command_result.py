from dataclasses import dataclass
from slipway.domain.value_objects.node import Node


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a command run on the local machine."""
    stdout: str
    exit_code: int = 0
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class HostResult:
    """Outcome of a command run on one fleet host."""
    node: Node
    stdout: str
    exit_code: int = 0
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class CopyOptions:
    """Options understood by RemoteExecutorPort.copy_tree."""
    delete_extraneous: bool = True
    excludes: tuple[str, ...] = ()
