"""Exceptions raised while listing playlists and downloading audio."""

from __future__ import annotations


class PlaylistAudioError(Exception):
    """Base exception for yt-playlist-audio."""


class ExtractionError(PlaylistAudioError):
    """Playlist URL is invalid, or the playlist could not be listed."""


class FetchError(PlaylistAudioError):
    """Video metadata or a usable audio format could not be resolved."""


class StreamError(PlaylistAudioError):
    """The selected audio stream could not be downloaded."""


class EncodeError(PlaylistAudioError):
    """ffmpeg failed to transcode the downloaded audio."""


class RetryExhaustedError(PlaylistAudioError):
    """An item kept failing until the retry budget ran out."""

    def __init__(self, attempts: int, cause: BaseException) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"failed after {attempts} attempts: {cause}")
