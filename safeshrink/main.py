import argparse
import sys
import time
from pathlib import Path

from safeshrink.admission.exceptions import (
    AdmissionDeclinedError,
    RejectedInputError,
    ThreatDetectedError,
)
from safeshrink.admission.models import ScanVerdict
from safeshrink.config.settings import Settings
from safeshrink.logging.logger import Log
from safeshrink.processor.file_loader import FileLoader
from safeshrink.processor.models import format_file_size
from safeshrink.processor.pipeline import PhaseEvent, accept_warnings
from safeshrink.processor.processor import build_pipeline
from safeshrink.transcode.exceptions import TranscodeError
from safeshrink.transcode.models import MAX_QUALITY, MIN_QUALITY

EXIT_OK = 0
EXIT_REJECTED = 2
EXIT_THREAT = 3
EXIT_TRANSCODE_FAILED = 4


def _quality(value: str) -> int:
    quality = int(value)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise argparse.ArgumentTypeError(
            f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}"
        )
    return quality


def _print_progress(event: PhaseEvent) -> None:
    marker = "aborted" if event.aborted else f"{event.progress:3.0f}%"
    print(f"[{event.phase.value}] {marker} {event.message}")


def _ask_to_continue(verdict: ScanVerdict) -> bool:
    print("The file passed the scan with warnings:")
    for warning in verdict.warnings:
        print(f"  - {warning}")
    answer = input("Continue anyway? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def build_parser(default_quality: int) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="safeshrink",
        description="Validate, scan and compress an image or PDF",
    )
    parser.add_argument("path", type=Path, help="File to compress")
    parser.add_argument(
        "-q", "--quality", type=_quality, default=default_quality,
        help=f"Output quality {MIN_QUALITY}-{MAX_QUALITY} (default {default_quality})",
    )
    parser.add_argument(
        "-o", "--output-dir", type=Path, default=Path("."),
        help="Directory for the compressed file",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Continue past scan warnings")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build pipeline -> process one file."""
    settings = Settings()
    Log.configure(settings.log_level)
    args = build_parser(settings.default_quality).parse_args(argv)

    try:
        source = FileLoader().load(args.path)
    except (FileNotFoundError, IsADirectoryError) as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return EXIT_REJECTED

    pipeline = build_pipeline(settings)
    pipeline.subscribe(_print_progress)
    confirm = accept_warnings if args.yes else _ask_to_continue

    try:
        result = pipeline.process(source, args.quality, confirm)
    except ThreatDetectedError as exc:
        print(exc.reason, file=sys.stderr)
        return EXIT_THREAT
    except (RejectedInputError, AdmissionDeclinedError) as exc:
        print(exc.reason, file=sys.stderr)
        return EXIT_REJECTED
    except TranscodeError as exc:
        print(f"Compression failed: {exc}", file=sys.stderr)
        return EXIT_TRANSCODE_FAILED

    args.output_dir.mkdir(parents=True, exist_ok=True)
    output_path = args.output_dir / result.suggested_filename(int(time.time() * 1000))
    output_path.write_bytes(result.transcode.output_bytes)

    print(
        f"Saved {output_path}: {format_file_size(result.original_size_bytes)} -> "
        f"{format_file_size(result.transcode.size_bytes)} "
        f"({result.compression_ratio}% smaller)"
    )
    if result.suitable_services:
        print("Suitable for: " + ", ".join(s.name for s in result.suitable_services))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
