"""
Shared yt-dlp configuration builder.

This module centralizes common extractor-args/player-client/cookie settings so the playlist
lister and the audio fetcher stay small and consistent.
"""

from __future__ import annotations

import os
from collections import deque
from pathlib import Path
from typing import Optional

from .. import config


def _coerce_str_list(raw: object | None) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        s = raw.strip()
        return [s] if s else []
    if isinstance(raw, (list, tuple)):
        out: list[str] = []
        for x in raw:
            sx = str(x).strip()
            if sx:
                out.append(sx)
        return out
    return []


def _get_player_clients_from_env_or_config() -> list[str]:
    raw = os.environ.get("YT_PLAYLIST_AUDIO_PLAYER_CLIENT")
    if raw is None or not str(raw).strip():
        raw = getattr(config, "YOUTUBE_PLAYER_CLIENT", None)

    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        return [str(x).strip() for x in raw if str(x).strip()]

    # Support comma-separated values like: "tv,-web_safari"
    return [s.strip() for s in str(raw).split(",") if s.strip()]


def merge_extractor_args_dict(
    extractor_args: dict[str, dict[str, list[str]]],
    raw_args: object | None,
) -> None:
    """
    Merge raw yt-dlp --extractor-args style strings into the Python API dict form.

    Supported input:
    - "youtube:po_token=aaa;player_client=web"
    - ["youtube:po_token=bbb", "youtubetab:approximate_date=true"]
    """
    for raw in _coerce_str_list(raw_args):
        if ":" not in raw:
            continue
        extractor, rest = raw.split(":", 1)
        extractor = extractor.strip()
        if not extractor or not rest:
            continue
        for part in rest.split(";"):
            part = part.strip()
            if not part or "=" not in part:
                continue
            key, val = part.split("=", 1)
            key = key.strip()
            val = val.strip()
            if not key:
                continue
            extractor_args.setdefault(extractor, {}).setdefault(key, []).append(val)


def build_extractor_args_dict() -> dict[str, dict[str, list[str]]]:
    extractor_args: dict[str, dict[str, list[str]]] = {}

    player_clients = _get_player_clients_from_env_or_config()
    if player_clients:
        extractor_args["youtube"] = {"player_client": player_clients}

    merge_extractor_args_dict(extractor_args, getattr(config, "YOUTUBE_EXTRACTOR_ARGS", None))
    return extractor_args


def build_ydl_opts(
    *,
    debug: bool = False,
    sleep_requests: Optional[float] = None,
    logger_obj: Optional[object] = None,
) -> dict:
    """
    Common yt_dlp.YoutubeDL options shared by the playlist lister and the audio fetcher.
    Callers add their own format/outtmpl/extract_flat keys.
    """
    opts: dict = {
        "quiet": not debug,
        "no_warnings": not debug,
        "noprogress": True,
        "noplaylist": True,
        "ignoreerrors": False,
    }

    extractor_args = build_extractor_args_dict()
    if extractor_args:
        opts["extractor_args"] = extractor_args

    if sleep_requests is None:
        sleep_requests = getattr(config, "YOUTUBE_SLEEP_REQUESTS", 0.0)
    try:
        sleep_f = float(sleep_requests or 0.0)
    except Exception:
        sleep_f = 0.0
    if sleep_f > 0:
        opts["sleep_interval_requests"] = sleep_f

    cookies_file = getattr(config, "YOUTUBE_COOKIES_FILE", None)
    if cookies_file:
        cookies_path = Path(cookies_file).expanduser()
        if cookies_path.exists():
            opts["cookiefile"] = str(cookies_path)

    if logger_obj is not None:
        opts["logger"] = logger_obj
    return opts


class YtdlpLogBuffer:
    """A small ring buffer to keep recent yt-dlp log lines (per download)."""

    def __init__(self, max_lines: int = 200) -> None:
        try:
            n = int(max_lines)
        except Exception:
            n = 200
        if n < 20:
            n = 20
        if n > 2000:
            n = 2000
        self._lines: deque[str] = deque(maxlen=n)

    def append(self, msg: object) -> None:
        s = str(msg or "").strip()
        if not s:
            return
        self._lines.append(s)

    def tail(self, max_chars: int = 2000) -> str:
        s = "\n".join(self._lines)
        if not s:
            return ""
        try:
            cap = int(max_chars)
        except Exception:
            cap = 2000
        if cap > 0 and len(s) > cap:
            return s[-cap:]
        return s


class YtdlpLogger:
    """yt-dlp Python API logger hook: forwards to logging and keeps a tail for error context."""

    def __init__(self, buf: YtdlpLogBuffer, log=None) -> None:  # noqa: ANN001
        self.buf = buf
        self.log = log

    def debug(self, msg) -> None:  # noqa: ANN001
        if self.log is not None:
            self.log.debug(msg)

    def warning(self, msg) -> None:  # noqa: ANN001
        self.buf.append(msg)
        if self.log is not None:
            self.log.debug(msg)

    def error(self, msg) -> None:  # noqa: ANN001
        self.buf.append(msg)
        if self.log is not None:
            self.log.debug(msg)


def with_log_tail(message: str, buf: YtdlpLogBuffer) -> str:
    ctx = buf.tail()
    if ctx and ctx not in message:
        return f"{message}\n\n--- ytdlp_log_tail ---\n{ctx}"
    return message
