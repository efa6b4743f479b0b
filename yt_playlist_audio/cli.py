#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

from . import config
from .core.errors import ExtractionError
from .core.retry import RetryPolicy
from .downloaders import playlist as playlist_downloader


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=playlist_downloader.console, rich_tracebacks=True, show_path=False)],
    )


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except Exception as e:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from e
    if n < 1:
        raise argparse.ArgumentTypeError("Must be >= 1")
    return n


def _non_negative_float(value: str) -> float:
    try:
        n = float(value)
    except Exception as e:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}") from e
    if n < 0:
        raise argparse.ArgumentTypeError("Must be >= 0")
    return n


def _build_policy(args: argparse.Namespace) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=args.retries,
        delay=args.retry_delay,
        backoff=bool(args.backoff),
        backoff_max=config.RETRY_BACKOFF_MAX,
    )


def _handle_download(args: argparse.Namespace) -> int:
    url = (args.url or "").strip()
    if not url:
        url = input("Enter the playlist URL (make sure it's public): ").strip()
    if not url:
        print("No playlist URL given.")
        return 1

    output_dir = Path(args.output_dir).expanduser().resolve() if args.output_dir else config.DOWNLOAD_DIR
    common = {
        "folder_name": args.folder_name,
        "workers": args.workers,
        "policy": _build_policy(args),
        "debug": bool(args.debug),
        "sleep_requests": args.sleep,
    }

    try:
        if args.benchmark:
            concurrent, sequential = playlist_downloader.speed_test(url, output_dir, **common)
            return 0 if (concurrent.ok and sequential.ok) else 1
        result = playlist_downloader.process_playlist(url, output_dir, sequential=bool(args.sequential), **common)
    except ExtractionError as e:
        print(f"Error processing playlist: failed to extract playlist info: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130

    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yt-playlist-audio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Download every video of a public YouTube playlist as MP3 audio.",
        epilog="""\
Examples:
  # Download a playlist with 5 concurrent workers (default)
  yt-playlist-audio download "https://www.youtube.com/playlist?list=PL..." -o ~/music

  # Pick the folder name and worker count
  yt-playlist-audio download "https://www.youtube.com/playlist?list=PL..." --folder-name mix --workers 8

  # Compare concurrent vs sequential download time
  yt-playlist-audio download "https://www.youtube.com/playlist?list=PL..." --benchmark
""",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, title="commands", metavar="COMMAND")

    download = subparsers.add_parser(
        "download",
        help="Download a playlist as audio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Fetch all videos of a playlist, extract audio and transcode to MP3.",
    )
    download.add_argument("url", nargs="?", help="Playlist URL (prompted for if omitted)")
    download.add_argument("--output-dir", "-o", metavar="DIR", help="Output directory (default: DOWNLOAD_DIR from config)")
    download.add_argument(
        "--folder-name",
        "-f",
        metavar="NAME",
        help="Folder created inside the output directory (default: playlist_<id>)",
    )
    download.add_argument(
        "--workers",
        "-w",
        type=_positive_int,
        default=config.DOWNLOAD_CONCURRENCY,
        metavar="N",
        help=f"Number of concurrent downloads (default: {config.DOWNLOAD_CONCURRENCY})",
    )
    mode = download.add_mutually_exclusive_group()
    mode.add_argument("--sequential", action="store_true", help="Download one item at a time in playlist order")
    mode.add_argument(
        "--benchmark",
        action="store_true",
        help="Download twice (concurrent, then sequential) into <folder>_concurrent/_sequential and compare timings",
    )
    download.add_argument(
        "--retries",
        type=_positive_int,
        default=config.RETRY_ATTEMPTS,
        metavar="N",
        help=f"Attempts per item before giving up (default: {config.RETRY_ATTEMPTS})",
    )
    download.add_argument(
        "--retry-delay",
        type=_non_negative_float,
        default=config.RETRY_DELAY,
        metavar="SEC",
        help=f"Seconds to wait between attempts (default: {config.RETRY_DELAY:g})",
    )
    download.add_argument("--backoff", action="store_true", default=config.RETRY_BACKOFF, help="Double the retry delay after each failed attempt")
    download.add_argument(
        "--sleep",
        type=_non_negative_float,
        metavar="SEC",
        help="Seconds yt-dlp sleeps between requests (overrides config.YOUTUBE_SLEEP_REQUESTS)",
    )
    download.add_argument("--debug", "-d", action="store_true", help="Enable debug output")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "download":
        _setup_logging(bool(args.debug))
        return _handle_download(args)

    print("Unknown command.")
    return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
