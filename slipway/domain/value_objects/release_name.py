"""
Release Name Value Object

Architectural Intent:
- A release is identified by `<UTC YYYYMMDDHHmmss>-<revision>`
- Fixed-width UTC prefix makes lexicographic order equal creation order
- Revision ids carry a trailing "+" when the workspace was dirty; it is stripped
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional

DIRTY_MARKER = "+"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_RELEASE_NAME_RE = re.compile(r"^\d{14}-[^/\s]+$")


def strip_dirty_marker(revision: str) -> str:
    revision = revision.strip()
    if revision.endswith(DIRTY_MARKER):
        return revision[: -len(DIRTY_MARKER)]
    return revision


def is_dirty_revision(revision: str) -> bool:
    return revision.strip().endswith(DIRTY_MARKER)


@dataclass(frozen=True, order=True)
class ReleaseName:
    """
    Value Object naming one release directory under `releases/`.
    """
    value: str

    def __post_init__(self) -> None:
        if not _RELEASE_NAME_RE.match(self.value):
            raise ValueError(f"Invalid release name: {self.value!r}")

    @staticmethod
    def for_revision(revision: str, now: Optional[datetime] = None) -> "ReleaseName":
        clean = strip_dirty_marker(revision)
        if not clean:
            raise ValueError("Revision cannot be empty")
        moment = (now or datetime.now(UTC)).astimezone(UTC)
        return ReleaseName(f"{moment.strftime(TIMESTAMP_FORMAT)}-{clean}")

    @property
    def timestamp(self) -> datetime:
        return datetime.strptime(self.value[:14], TIMESTAMP_FORMAT).replace(tzinfo=UTC)

    @property
    def revision(self) -> str:
        return self.value[15:]

    def __str__(self) -> str:
        return self.value
