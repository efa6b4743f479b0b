"""
List the videos of a public YouTube playlist via the yt-dlp Python API.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from ..core.context import YtdlpLogBuffer, YtdlpLogger, build_ydl_opts, with_log_tail
from ..core.errors import ExtractionError
from ..core.models import Playlist, WorkItem
from ..core.utils import parse_playlist_id, playlist_url

logger = logging.getLogger(__name__)


def _entry_to_item(entry: dict) -> Optional[WorkItem]:
    vid = str(entry.get("id") or "").strip()
    if not vid:
        return None
    name = str(entry.get("title") or "").strip() or vid
    attribution = (
        str(entry.get("uploader") or entry.get("channel") or entry.get("artist") or "").strip() or "Unknown"
    )
    return WorkItem(name=name, attribution=attribution, fetch_id=vid)


def list_playlist_items(url: str, *, sleep_requests: Optional[float] = None, debug: bool = False) -> Playlist:
    """
    Resolve a playlist URL into a Playlist of WorkItems (flat extraction, no downloads).

    Raises ExtractionError if the URL is not a playlist URL or the listing fails.
    """
    playlist_id = parse_playlist_id(url)
    if not playlist_id:
        raise ExtractionError(f"Not a YouTube playlist URL: {url!r}")

    logbuf = YtdlpLogBuffer()
    opts = build_ydl_opts(debug=debug, sleep_requests=sleep_requests, logger_obj=YtdlpLogger(logbuf, logger))
    opts["noplaylist"] = False
    opts["extract_flat"] = "in_playlist"
    opts["skip_download"] = True

    start_time = time.time()
    logger.info(f"Fetching playlist {playlist_id}")
    try:
        with yt_dlp.YoutubeDL(opts) as ydl:
            info = ydl.extract_info(playlist_url(playlist_id), download=False)
    except DownloadError as e:
        raise ExtractionError(with_log_tail(f"Failed to list playlist {playlist_id}: {e}", logbuf)) from e
    except Exception as e:
        raise ExtractionError(f"Failed to list playlist {playlist_id}: {e}") from e

    if not isinstance(info, dict):
        raise ExtractionError(f"No playlist info returned for {playlist_id}")

    items: list[WorkItem] = []
    for entry in info.get("entries") or []:
        if not isinstance(entry, dict):
            continue
        item = _entry_to_item(entry)
        if item is not None:
            items.append(item)

    title = str(info.get("title") or "").strip() or playlist_id
    logger.info(f"Found {len(items)} videos in '{title}' in {time.time() - start_time:.1f}s")
    return Playlist(playlist_id=str(info.get("id") or playlist_id), title=title, items=tuple(items))
