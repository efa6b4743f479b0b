"""
Single-item audio fetcher: resolve a video, download its best audio stream, transcode it.

AudioFetcher.fetch_and_encode is the item processor handed to the batch runners. It does
no retrying of its own; every failure is raised as a typed error.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from .. import config
from ..core.context import YtdlpLogBuffer, YtdlpLogger, build_ydl_opts, with_log_tail
from ..core.errors import FetchError, StreamError
from ..core.models import WorkItem
from ..core.utils import sanitize_filename
from .transcode import transcode_audio

logger = logging.getLogger(__name__)


def _has_audio(fmt: dict) -> bool:
    acodec = fmt.get("acodec")
    if acodec is None:
        # Unknown codec info: only trust formats that report an audio bitrate/channels.
        return bool(fmt.get("abr") or fmt.get("audio_channels"))
    return str(acodec) != "none"


def _audio_bitrate(fmt: dict) -> float:
    for key in ("abr", "tbr") if fmt.get("vcodec") == "none" else ("abr",):
        try:
            v = float(fmt.get(key) or 0.0)
        except Exception:
            v = 0.0
        if v > 0:
            return v
    return 0.0


def select_best_audio_format(formats: Optional[list]) -> Optional[dict]:
    """
    Pick the highest-bitrate format that carries audio.

    Audio-only formats win ties against muxed ones. Returns None if nothing carries audio.
    """
    candidates = [f for f in (formats or []) if isinstance(f, dict) and f.get("format_id") and _has_audio(f)]
    if not candidates:
        return None
    return max(candidates, key=lambda f: (_audio_bitrate(f), f.get("vcodec") == "none"))


class AudioFetcher:
    """Fetch one playlist video as an audio file in ``output_dir``."""

    def __init__(
        self,
        output_dir: Path,
        *,
        debug: bool = False,
        sleep_requests: Optional[float] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.debug = debug
        self.sleep_requests = sleep_requests

    def __call__(self, item: WorkItem) -> Path:
        return self.fetch_and_encode(item)

    def _ydl_opts(self, logbuf: YtdlpLogBuffer) -> dict:
        return build_ydl_opts(
            debug=self.debug,
            sleep_requests=self.sleep_requests,
            logger_obj=YtdlpLogger(logbuf, logger),
        )

    def output_path(self, title: str) -> Path:
        return self.output_dir / f"{sanitize_filename(title)}.{config.AUDIO_EXT}"

    def fetch_and_encode(self, item: WorkItem) -> Path:
        logbuf = YtdlpLogBuffer()

        try:
            with yt_dlp.YoutubeDL(self._ydl_opts(logbuf)) as ydl:
                info = ydl.extract_info(item.url, download=False, process=False)
        except DownloadError as e:
            raise FetchError(with_log_tail(f"failed to get video info: {e}", logbuf)) from e
        if not isinstance(info, dict):
            raise FetchError(f"failed to get video info for {item.fetch_id}")

        fmt = select_best_audio_format(info.get("formats"))
        if fmt is None:
            raise FetchError("no audio formats available")
        format_id = str(fmt["format_id"])
        title = str(info.get("title") or item.name)
        logger.debug(f"{item.fetch_id}: selected format {format_id} ({_audio_bitrate(fmt):g} kbps)")

        with tempfile.TemporaryDirectory(prefix="yt-playlist-audio-") as td:
            tmp_dir = Path(td)
            opts = self._ydl_opts(logbuf)
            opts["format"] = format_id
            opts["outtmpl"] = str(tmp_dir / "source.%(ext)s")
            opts["overwrites"] = True
            try:
                with yt_dlp.YoutubeDL(opts) as ydl:
                    ydl.process_ie_result(info, download=True)
            except DownloadError as e:
                raise StreamError(with_log_tail(f"failed to get audio stream: {e}", logbuf)) from e

            downloaded = [p for p in tmp_dir.iterdir() if p.is_file() and not p.name.endswith(".part")]
            if not downloaded:
                raise StreamError(with_log_tail("failed to save audio: no file was written", logbuf))

            out_path = self.output_path(title)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            transcode_audio(downloaded[0], out_path)

        logger.info(f"Downloaded: {title}")
        return out_path
