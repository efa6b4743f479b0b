"""
Error diagnosis for yt-dlp/ffmpeg failures.

Used for reporting only: the retry policy treats every failure the same way, but the
final failure report tells the user whether a failure looks transient or permanent.
"""

from __future__ import annotations

import contextlib
import re
from typing import Optional

# Rate limiting / anti-bot patterns
RATE_LIMIT_PATTERNS = [
    r"HTTP Error 429",
    r"Too Many Requests",
    r"Sign in to confirm you'?re not a bot",
    r"confirm you'?re not a bot",
    r"rate.?limit",
]

# Private / removed / restricted videos (retrying will not help)
UNAVAILABLE_PATTERNS = [
    r"This video is private",
    r"Private video",
    r"Video unavailable",
    r"This video has been removed",
    r"This video is no longer available",
    r"The uploader has not made this video available",
    r"blocked it in your country",
    r"video is not available in your country",
    r"age-restricted",
    r"Sign in to confirm your age",
    r"Join this channel to get access",
    r"members.?only",
    r"Premiere will begin",
    r"This live event will begin",
    r"account associated with this video has been terminated",
    r"no audio formats? available",
]

# Transient patterns
RETRY_PATTERNS = [
    r"HTTP Error 5\d{2}",
    r"Internal Server Error",
    r"IncompleteRead",
    r"Connection reset",
    r"connection timed out",
    r"Read timed out",
    r"urlopen error",
    r"did not get any data blocks",
    r"ssl",
    r"temporary",
]


def _normalize_error_text(text: str) -> str:
    """Unify fancy apostrophes for matching consistency."""
    return (text or "").replace("’", "'")


def extract_http_status_from_text(text: str) -> Optional[int]:
    """
    Best-effort extraction of HTTP status codes from yt-dlp/ffmpeg output.
    Keep this intentionally conservative to avoid false positives.
    """
    s = _normalize_error_text(text or "")
    if not s:
        return None

    patterns = [
        r"http\s*error\s*(\d{3})",
        r"server\s+returned\s*(\d{3})",
        r"\b(\d{3})\s+too\s+many\s+requests\b",
        r"\b(\d{3})\s+forbidden\b",
        r"\b(\d{3})\s+not\s+found\b",
    ]
    for pat in patterns:
        m = re.search(pat, s, flags=re.IGNORECASE)
        if not m:
            continue
        with contextlib.suppress(Exception):
            code = int(m.group(1))
            if 100 <= code <= 599:
                return code
    return None


def classify_error(error_msg: str) -> str:
    """
    Returns:
      - "rate_limit"
      - "unavailable"
      - "retry"
      - "failed"
    """
    text = _normalize_error_text(error_msg)

    for pattern in RATE_LIMIT_PATTERNS:
        if re.search(pattern, text, re.IGNORECASE):
            return "rate_limit"

    for pattern in UNAVAILABLE_PATTERNS:
        if re.search(pattern, text, re.IGNORECASE):
            return "unavailable"

    for pattern in RETRY_PATTERNS:
        if re.search(pattern, text, re.IGNORECASE):
            return "retry"

    http_status = extract_http_status_from_text(text)
    if http_status == 429:
        return "rate_limit"
    if http_status in {401, 403, 404, 410}:
        return "unavailable"
    if http_status is not None and 500 <= http_status <= 599:
        return "retry"

    return "failed"


def failure_hint(error_msg: str) -> Optional[str]:
    """Short human-readable hint for the failure report, or None when nothing is known."""
    kind = classify_error(error_msg)
    http_status = extract_http_status_from_text(error_msg)

    hint: Optional[str] = None
    if kind == "rate_limit":
        hint = "Suspected rate limit"
    elif kind == "unavailable":
        hint = "Video unavailable or restricted"
    elif kind == "retry":
        hint = "Suspected transient error"

    if hint and http_status:
        hint = f"{hint} (HTTP {http_status})"
    elif http_status:
        hint = f"HTTP {http_status}"
    return hint
