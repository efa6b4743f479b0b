"""
Download a YouTube playlist as audio files.

- List the playlist (flat extraction) into WorkItems
- Fetch + transcode every item with a bounded worker pool and per-item retry
- Rich: overall progress bar; final failure report
- Optional speed test: concurrent vs sequential run of the same playlist
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeRemainingColumn

from .. import config
from ..core.batch import run_batch, run_sequential
from ..core.diagnostics import failure_hint
from ..core.models import BatchResult, Playlist, WorkItem
from ..core.retry import RetryPolicy
from ..core.utils import _format_duration, _speedup_percent, sanitize_filename
from ..media.fetcher import AudioFetcher
from ..media.playlist import list_playlist_items

logger = logging.getLogger(__name__)

console = Console()


def default_folder_name(playlist: Playlist) -> str:
    return f"playlist_{playlist.playlist_id}"


def resolve_output_dir(base_dir: Path, playlist: Playlist, folder_name: Optional[str] = None) -> Path:
    name = (folder_name or "").strip()
    if not name:
        name = default_folder_name(playlist)
    return Path(base_dir).expanduser().resolve() / sanitize_filename(name)


def download_items(
    items: Sequence[WorkItem],
    output_dir: Path,
    *,
    workers: int = config.DOWNLOAD_CONCURRENCY,
    sequential: bool = False,
    policy: Optional[RetryPolicy] = None,
    debug: bool = False,
    sleep_requests: Optional[float] = None,
    show_progress: bool = True,
) -> BatchResult:
    """Run one batch over ``items`` into ``output_dir`` and time it."""
    fetcher = AudioFetcher(output_dir, debug=debug, sleep_requests=sleep_requests)
    policy = policy or RetryPolicy()

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(bar_width=None),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
        disable=not show_progress,
    )
    overall_task = progress.add_task("Sequential" if sequential else "Overall", total=len(items))
    ui_lock = threading.Lock()

    def on_item_done(item: WorkItem, error: Optional[BaseException]) -> None:
        with ui_lock:
            if error is not None:
                progress.console.print(f"[red]Failed: {escape(item.name)}[/red]")
            progress.advance(overall_task, 1)

    start = time.perf_counter()
    with progress:
        if sequential:
            failures = run_sequential(items, fetcher, policy, on_item_done=on_item_done)
        else:
            failures = run_batch(items, fetcher, workers, policy, on_item_done=on_item_done)
    elapsed = time.perf_counter() - start

    return BatchResult(total=len(items), failures=failures, elapsed=elapsed)


def print_report(result: BatchResult, label: str = "Download") -> None:
    if result.ok:
        console.print(f"\n[green]All downloads completed successfully![/green] ({result.total} items)")
        return

    console.print(f"\n[red]{label} errors ({len(result.failures)}/{result.total}):[/red]")
    for failure in result.failures:
        hint = failure_hint(str(failure.cause))
        suffix = f" [{hint}]" if hint else ""
        console.print(f"{failure}{suffix}", markup=False, highlight=False)


def process_playlist(
    url: str,
    base_dir: Path,
    *,
    folder_name: Optional[str] = None,
    workers: int = config.DOWNLOAD_CONCURRENCY,
    sequential: bool = False,
    policy: Optional[RetryPolicy] = None,
    debug: bool = False,
    sleep_requests: Optional[float] = None,
) -> BatchResult:
    """
    List the playlist at ``url`` and download it as audio into ``base_dir/<folder>``.

    Raises ExtractionError if the playlist cannot be listed; item failures are reported
    in the returned BatchResult instead.
    """
    playlist = list_playlist_items(url, sleep_requests=sleep_requests, debug=debug)
    output_dir = resolve_output_dir(base_dir, playlist, folder_name)

    console.print(
        f"Playlist: {playlist.title} items={len(playlist.items)} "
        f"workers={1 if sequential else workers} output={output_dir}",
        markup=False,
        highlight=False,
    )
    if not playlist.items:
        console.print("Playlist is empty.")
        return BatchResult()

    result = download_items(
        playlist.items,
        output_dir,
        workers=workers,
        sequential=sequential,
        policy=policy,
        debug=debug,
        sleep_requests=sleep_requests,
    )
    console.print(f"Done. ok={result.succeeded} failed={len(result.failures)} time={_format_duration(result.elapsed)}")
    print_report(result, "Sequential download" if sequential else "Concurrent download")
    return result


def speed_test(
    url: str,
    base_dir: Path,
    *,
    folder_name: Optional[str] = None,
    workers: int = config.DOWNLOAD_CONCURRENCY,
    policy: Optional[RetryPolicy] = None,
    debug: bool = False,
    sleep_requests: Optional[float] = None,
) -> tuple[BatchResult, BatchResult]:
    """
    Download the same playlist twice (concurrent, then sequential) into sibling
    ``<folder>_concurrent`` / ``<folder>_sequential`` directories and compare timings.
    """
    playlist = list_playlist_items(url, sleep_requests=sleep_requests, debug=debug)
    output_dir = resolve_output_dir(base_dir, playlist, folder_name)
    concurrent_dir = output_dir.with_name(f"{output_dir.name}_concurrent")
    sequential_dir = output_dir.with_name(f"{output_dir.name}_sequential")

    kwargs = {"policy": policy, "debug": debug, "sleep_requests": sleep_requests}
    concurrent = download_items(playlist.items, concurrent_dir, workers=workers, **kwargs)
    sequential = download_items(playlist.items, sequential_dir, sequential=True, **kwargs)

    console.print(f"Concurrent download time: {_format_duration(concurrent.elapsed)}")
    console.print(f"Sequential download time: {_format_duration(sequential.elapsed)}")
    console.print(f"Speed improvement: {_speedup_percent(sequential.elapsed, concurrent.elapsed):.2f}%")

    if not concurrent.ok:
        print_report(concurrent, "Concurrent download")
    if not sequential.ok:
        print_report(sequential, "Sequential download")
    if concurrent.ok and sequential.ok:
        console.print("\n[green]All downloads completed successfully![/green]")
    return concurrent, sequential
