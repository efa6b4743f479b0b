"""
ffmpeg transcoding of downloaded audio streams.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from .. import config
from ..core.errors import EncodeError

logger = logging.getLogger(__name__)


def ffmpeg_binary() -> str:
    return os.environ.get("YT_PLAYLIST_AUDIO_FFMPEG") or getattr(config, "FFMPEG_BIN", "ffmpeg") or "ffmpeg"


def build_ffmpeg_cmd(
    src: Path,
    dst: Path,
    *,
    codec: Optional[str] = None,
    bitrate: Optional[str] = None,
) -> list[str]:
    return [
        ffmpeg_binary(),
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-i",
        str(src),
        "-vn",
        "-acodec",
        codec or config.AUDIO_CODEC,
        "-b:a",
        bitrate or config.AUDIO_BITRATE,
        str(dst),
    ]


def transcode_audio(src: Path, dst: Path, *, timeout: float = 1800) -> Path:
    """Transcode ``src`` into ``dst``; a partial ``dst`` is removed on failure."""
    cmd = build_ffmpeg_cmd(src, dst)
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise EncodeError(f"ffmpeg not found ({cmd[0]}). Install ffmpeg or set YT_PLAYLIST_AUDIO_FFMPEG") from e
    except subprocess.TimeoutExpired as e:
        with contextlib.suppress(FileNotFoundError):
            dst.unlink()
        raise EncodeError(f"ffmpeg timed out after {timeout:g}s converting {src.name}") from e

    if result.returncode != 0:
        with contextlib.suppress(FileNotFoundError):
            dst.unlink()
        output = (result.stderr or result.stdout or "").strip()[-1000:]
        raise EncodeError(f"failed to convert audio (ffmpeg exited with code {result.returncode})\nFFmpeg output: {output}")
    return dst
