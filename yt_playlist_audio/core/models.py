"""
Data models shared by the playlist lister, the audio fetcher and the batch runners.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WorkItem:
    """One playlist video to turn into an audio file."""

    name: str
    attribution: str
    fetch_id: str

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.fetch_id}"


@dataclass(frozen=True)
class Playlist:
    playlist_id: str
    title: str
    items: tuple[WorkItem, ...] = ()


@dataclass(frozen=True)
class ItemFailure:
    item: WorkItem
    cause: BaseException

    def __str__(self) -> str:
        return f"Failed to download {self.item.name} by {self.item.attribution}: {self.cause}"


@dataclass
class BatchResult:
    """Summary of one batch run, built by the driver from the runner's failure list."""

    total: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def succeeded(self) -> int:
        return self.total - len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_items(self) -> list[WorkItem]:
        return [f.item for f in self.failures]
