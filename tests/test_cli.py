"""Tests for yt_playlist_audio/cli.py"""

import unittest
from pathlib import Path
from unittest.mock import patch

from yt_playlist_audio import cli
from yt_playlist_audio.core.errors import ExtractionError
from yt_playlist_audio.core.models import BatchResult, ItemFailure, WorkItem

URL = "https://www.youtube.com/playlist?list=PLtest123"


def _failed_result() -> BatchResult:
    item = WorkItem(name="Song", attribution="Artist", fetch_id="aaaaaaaaaaa")
    return BatchResult(total=1, failures=[ItemFailure(item=item, cause=RuntimeError("boom"))])


class TestBuildParser(unittest.TestCase):
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args(["download", URL])
        self.assertEqual(args.url, URL)
        self.assertEqual(args.workers, 5)
        self.assertEqual(args.retries, 3)
        self.assertEqual(args.retry_delay, 2.0)
        self.assertFalse(args.sequential)
        self.assertFalse(args.benchmark)
        self.assertFalse(args.backoff)
        self.assertIsNone(args.sleep)
        self.assertIsNone(args.folder_name)

    def test_options(self) -> None:
        args = cli.build_parser().parse_args(
            ["download", URL, "-o", "/tmp/music", "-f", "mix", "-w", "8", "--retries", "5", "--retry-delay", "0.5", "--backoff"]
        )
        self.assertEqual(args.output_dir, "/tmp/music")
        self.assertEqual(args.folder_name, "mix")
        self.assertEqual(args.workers, 8)
        policy = cli._build_policy(args)
        self.assertEqual(policy.max_attempts, 5)
        self.assertEqual(policy.delay, 0.5)
        self.assertTrue(policy.backoff)

    def test_invalid_values(self) -> None:
        parser = cli.build_parser()
        for argv in (
            ["download", URL, "--workers", "0"],
            ["download", URL, "--retries", "0"],
            ["download", URL, "--retry-delay", "-1"],
            ["download", URL, "--sequential", "--benchmark"],
        ):
            with self.subTest(argv=argv):
                with patch("sys.stderr"), self.assertRaises(SystemExit):
                    parser.parse_args(argv)


@patch("yt_playlist_audio.cli._setup_logging")
class TestMain(unittest.TestCase):
    @patch("yt_playlist_audio.cli.playlist_downloader.process_playlist", return_value=BatchResult(total=2))
    def test_success_exit_code(self, mock_process, _mock_logging) -> None:
        self.assertEqual(cli.main(["download", URL, "-o", "/tmp/music", "--sequential"]), 0)
        args, kwargs = mock_process.call_args
        self.assertEqual(args, (URL, Path("/tmp/music").resolve()))
        self.assertTrue(kwargs["sequential"])
        self.assertEqual(kwargs["workers"], 5)
        self.assertEqual(kwargs["policy"].max_attempts, 3)

    @patch("yt_playlist_audio.cli.playlist_downloader.process_playlist")
    def test_failures_exit_code(self, mock_process, _mock_logging) -> None:
        mock_process.return_value = _failed_result()
        self.assertEqual(cli.main(["download", URL]), 1)

    @patch("yt_playlist_audio.cli.playlist_downloader.process_playlist", side_effect=ExtractionError("no such list"))
    def test_extraction_error(self, _mock_process, _mock_logging) -> None:
        with patch("builtins.print") as mock_print:
            self.assertEqual(cli.main(["download", URL]), 1)
        self.assertIn("no such list", mock_print.call_args[0][0])

    @patch("yt_playlist_audio.cli.playlist_downloader.process_playlist", side_effect=KeyboardInterrupt)
    def test_interrupt(self, _mock_process, _mock_logging) -> None:
        with patch("builtins.print"):
            self.assertEqual(cli.main(["download", URL]), 130)

    @patch("yt_playlist_audio.cli.playlist_downloader.speed_test")
    def test_benchmark(self, mock_speed_test, _mock_logging) -> None:
        mock_speed_test.return_value = (BatchResult(total=1), _failed_result())
        self.assertEqual(cli.main(["download", URL, "--benchmark", "-w", "3"]), 1)
        self.assertEqual(mock_speed_test.call_args[1]["workers"], 3)

    @patch("yt_playlist_audio.cli.playlist_downloader.process_playlist", return_value=BatchResult(total=1))
    def test_prompts_for_url(self, mock_process, _mock_logging) -> None:
        with patch("builtins.input", return_value=f"  {URL}  "):
            self.assertEqual(cli.main(["download"]), 0)
        self.assertEqual(mock_process.call_args[0][0], URL)

    def test_empty_prompt(self, _mock_logging) -> None:
        with patch("builtins.input", return_value=""), patch("builtins.print"):
            self.assertEqual(cli.main(["download"]), 1)


if __name__ == "__main__":
    unittest.main()
