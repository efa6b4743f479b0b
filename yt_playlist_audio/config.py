"""
Configuration for yt-playlist-audio.

Copy and edit as needed to match your environment.
"""

from pathlib import Path

# Audio output
DOWNLOAD_DIR = Path.home() / "yt-playlist-audio" / "downloads"

# Batch concurrency: max number of items fetched/transcoded at once
DOWNLOAD_CONCURRENCY = 5

# Per-item retry policy (fixed delay between attempts unless backoff is enabled)
RETRY_ATTEMPTS = 3
RETRY_DELAY = 2.0
RETRY_BACKOFF = False
RETRY_BACKOFF_MAX = 60.0

# Transcoding (ffmpeg)
# YT_PLAYLIST_AUDIO_FFMPEG env var overrides FFMPEG_BIN
FFMPEG_BIN = "ffmpeg"
AUDIO_CODEC = "libmp3lame"
AUDIO_BITRATE = "192k"
AUDIO_EXT = "mp3"

# yt-dlp player client setting (optional)
# Options: "web", "android", "ios", "mweb", "tv_embedded"
YOUTUBE_PLAYER_CLIENT = None

# yt-dlp rate limiting settings (optional)
# --sleep-requests: seconds to sleep between requests during data extraction
YOUTUBE_SLEEP_REQUESTS = 0.0

# Extra extractor args passed as raw strings, e.g. ["youtube:po_token=xxx"]
YOUTUBE_EXTRACTOR_ARGS = []

# Optional Netscape-format cookies file (e.g. for age-restricted playlists)
YOUTUBE_COOKIES_FILE = None
