"""
Deploy Layout Value Object

Persisted layout on every host:

    <deploy_to>/
      releases/<YYYYMMDDHHmmss>-<revision>/...
      current -> releases/<name>
      upcoming -> releases/<name>
"""

import posixpath
from dataclasses import dataclass

RELEASES_DIR = "releases"
CURRENT_LINK = "current"
UPCOMING_LINK = "upcoming"


@dataclass(frozen=True)
class DeployLayout:
    deploy_to: str

    def __post_init__(self) -> None:
        if not self.deploy_to:
            raise ValueError("Deployment path cannot be empty")
        object.__setattr__(self, "deploy_to", posixpath.normpath(self.deploy_to))

    @property
    def releases_path(self) -> str:
        return posixpath.join(self.deploy_to, RELEASES_DIR)

    @property
    def current_path(self) -> str:
        return posixpath.join(self.deploy_to, CURRENT_LINK)

    @property
    def upcoming_path(self) -> str:
        return posixpath.join(self.deploy_to, UPCOMING_LINK)

    def release_path(self, name: str) -> str:
        return posixpath.join(self.releases_path, name)

    @staticmethod
    def link_target(name: str) -> str:
        """Relative symlink target stored in `current` / `upcoming`."""
        return posixpath.join(RELEASES_DIR, name)

    @staticmethod
    def release_from_target(target: str) -> str:
        """Maps a readlink result (relative or absolute) back to a release name."""
        return posixpath.basename(posixpath.normpath(target.strip()))
