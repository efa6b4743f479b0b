"""Tests for yt_playlist_audio/media/playlist.py (yt-dlp is faked)"""

import unittest
from types import SimpleNamespace
from unittest.mock import patch

from yt_dlp.utils import DownloadError

from yt_playlist_audio.core.errors import ExtractionError
from yt_playlist_audio.core.models import WorkItem
from yt_playlist_audio.media.playlist import list_playlist_items

URL = "https://www.youtube.com/playlist?list=PLtest123"


def _fake_ydl(info=None, error=None):
    calls = []

    class _FakeYDL:
        def __init__(self, opts):
            self.opts = opts

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def extract_info(self, url, download=False):
            calls.append((url, download, self.opts))
            if error is not None:
                raise error
            return info

    return SimpleNamespace(YoutubeDL=_FakeYDL), calls


class TestListPlaylistItems(unittest.TestCase):
    def test_builds_work_items(self) -> None:
        info = {
            "id": "PLtest123",
            "title": "Road Trip",
            "entries": [
                {"id": "aaaaaaaaaaa", "title": "First Song", "uploader": "Band A"},
                {"id": "bbbbbbbbbbb", "title": "Second Song", "channel": "Band B"},
                {"id": "ccccccccccc"},
                {"title": "no id, skipped"},
                None,
            ],
        }
        fake, calls = _fake_ydl(info)
        with patch("yt_playlist_audio.media.playlist.yt_dlp", fake):
            playlist = list_playlist_items(URL)

        self.assertEqual(playlist.playlist_id, "PLtest123")
        self.assertEqual(playlist.title, "Road Trip")
        self.assertEqual(
            playlist.items,
            (
                WorkItem(name="First Song", attribution="Band A", fetch_id="aaaaaaaaaaa"),
                WorkItem(name="Second Song", attribution="Band B", fetch_id="bbbbbbbbbbb"),
                WorkItem(name="ccccccccccc", attribution="Unknown", fetch_id="ccccccccccc"),
            ),
        )

        url, download, opts = calls[0]
        self.assertEqual(url, "https://www.youtube.com/playlist?list=PLtest123")
        self.assertFalse(download)
        self.assertEqual(opts["extract_flat"], "in_playlist")
        self.assertFalse(opts["noplaylist"])

    def test_empty_playlist(self) -> None:
        fake, _ = _fake_ydl({"id": "PLtest123", "title": "Empty", "entries": []})
        with patch("yt_playlist_audio.media.playlist.yt_dlp", fake):
            playlist = list_playlist_items(URL)
        self.assertEqual(playlist.items, ())

    def test_invalid_url_does_not_hit_network(self) -> None:
        fake, calls = _fake_ydl({})
        with patch("yt_playlist_audio.media.playlist.yt_dlp", fake):
            with self.assertRaises(ExtractionError):
                list_playlist_items("https://example.com/watch?v=abc")
        self.assertEqual(calls, [])

    def test_download_error_becomes_extraction_error(self) -> None:
        fake, _ = _fake_ydl(error=DownloadError("ERROR: The playlist does not exist."))
        with patch("yt_playlist_audio.media.playlist.yt_dlp", fake):
            with self.assertRaises(ExtractionError) as cm:
                list_playlist_items(URL)
        self.assertIn("does not exist", str(cm.exception))
        self.assertIsInstance(cm.exception.__cause__, DownloadError)

    def test_no_info(self) -> None:
        fake, _ = _fake_ydl(None)
        with patch("yt_playlist_audio.media.playlist.yt_dlp", fake):
            with self.assertRaises(ExtractionError):
                list_playlist_items(URL)


if __name__ == "__main__":
    unittest.main()
