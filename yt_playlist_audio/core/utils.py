"""
Shared lightweight utilities for yt-playlist-audio.

This module intentionally avoids importing yt_dlp / rich so it can be reused by the
batch runners, the fetcher and the CLI without pulling in heavy dependencies.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

YOUTUBE_PLAYLIST_ID_RE = re.compile(r"^(?:PL|OL|UU|FL|RD|LL)[0-9A-Za-z_-]*$")

_YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtu.be",
    "www.youtu.be",
}

_INVALID_FILENAME_CHARS = set('/\\:*?"<>|')
MAX_FILENAME_LENGTH = 200


def parse_playlist_id(value: str) -> Optional[str]:
    """
    Extract a playlist ID from a YouTube URL (or accept a bare playlist ID).

    The ``list`` query parameter wins; otherwise a ``/playlist/<id>`` path segment is used.
    """
    s = (value or "").strip()
    if not s:
        return None
    if "/" not in s and YOUTUBE_PLAYLIST_ID_RE.match(s):
        return s
    try:
        u = urlparse(s)
    except Exception:
        return None

    host = (u.netloc or "").lower()
    if host not in _YOUTUBE_HOSTS:
        return None

    qs = parse_qs(u.query or "")
    list_id = (qs.get("list") or [None])[0]
    if list_id:
        return list_id.strip() or None

    parts = (u.path or "").split("/")
    for i, part in enumerate(parts):
        if part == "playlist" and i + 1 < len(parts) and parts[i + 1]:
            return parts[i + 1]

    return None


def playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a video title for use as a filename.

    Control characters and path/reserved characters become underscores; the result is
    truncated to 200 characters.
    """
    sanitized = "".join(
        "_" if (ord(ch) < 32 or ch in _INVALID_FILENAME_CHARS) else ch for ch in (filename or "")
    )
    if len(sanitized) > MAX_FILENAME_LENGTH:
        sanitized = sanitized[:MAX_FILENAME_LENGTH]
    return sanitized


def _backoff_sleep(attempt: int, base: float, cap: float) -> float:
    """Exponential backoff seconds for the given 1-based attempt."""
    try:
        a = int(attempt)
    except Exception:
        a = 1
    if a < 1:
        a = 1

    try:
        base_f = float(base)
        cap_f = float(cap)
    except Exception:
        return 0.0

    if base_f <= 0 or cap_f <= 0:
        return 0.0

    return float(min(cap_f, base_f * (2 ** (a - 1))))


def _format_duration(seconds: Optional[float]) -> str:
    """Format an elapsed duration with decimals, e.g. ``01:05.25`` or ``1:01:01.50``."""
    if seconds is None:
        return ""
    try:
        seconds_f = float(seconds)
    except Exception:
        return ""
    if seconds_f < 0:
        return ""
    m, s = divmod(seconds_f, 60.0)
    h, m = divmod(m, 60.0)
    if h:
        return f"{int(h):d}:{int(m):02d}:{s:05.2f}"
    return f"{int(m):02d}:{s:05.2f}"


def _speedup_percent(sequential_s: float, concurrent_s: float) -> float:
    """Relative time saved by the concurrent run, in percent of the sequential run."""
    try:
        seq = float(sequential_s)
        con = float(concurrent_s)
    except Exception:
        return 0.0
    if seq <= 0:
        return 0.0
    return (seq - con) / seq * 100.0
