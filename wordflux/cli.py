"""
Command-line interface for counting words in large text files.
"""

import os
import sys
import json
import time
import logging
import argparse
from typing import List, Optional, Sequence

from wordflux.aggregator import Aggregator, top_words
from wordflux.config import LOG_FORMAT, Settings
from wordflux.errors import WordCountError
from wordflux.formatting import format_file_report, format_summary
from wordflux.models import AggregateResult
from wordflux.scheduler import BatchScheduler
from wordflux.word_counter import count_words

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordflux",
        description="Count word frequencies in large text files using streaming "
                    "reads and parallel worker processes.",
        epilog="Examples:\n"
               "  wordflux data/book.txt\n"
               "  wordflux data/*.txt --parallel --workers 4\n"
               "  wordflux data/ --parallel --json --top 20",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="+", help="Text files or directories of .txt files")
    parser.add_argument("--parallel", "-p", action="store_true",
                        help="Process files in parallel worker processes")
    parser.add_argument("--workers", type=positive_int, default=settings.max_workers,
                        help="Maximum concurrent workers (default: CPU count)")
    parser.add_argument("--top", type=non_negative_int, default=settings.top_n,
                        help="Number of most frequent words to show (default: %(default)s)")
    parser.add_argument("--timeout", type=positive_float, default=settings.timeout,
                        help="Seconds a worker may spend on one file (default: no limit)")
    parser.add_argument("--progress-interval", type=positive_int,
                        default=settings.progress_interval,
                        help="Lines between progress reports (default: %(default)s)")
    parser.add_argument("--json", action="store_true",
                        help="Print the aggregate result as JSON")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Less output")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: %(default)s)")
    return parser


def expand_files(patterns: Sequence[str]) -> List[str]:
    """
    Resolve command-line entries to a list of existing files.

    Directories contribute their .txt files. Missing entries are skipped
    with a warning. Duplicates are dropped, first occurrence wins.
    """
    files = []
    for pattern in patterns:
        if os.path.isfile(pattern):
            files.append(os.path.abspath(pattern))
        elif os.path.isdir(pattern):
            for name in sorted(os.listdir(pattern)):
                candidate = os.path.join(pattern, name)
                if name.endswith('.txt') and os.path.isfile(candidate):
                    files.append(os.path.abspath(candidate))
        else:
            logger.warning(f"'{pattern}' not found, skipping")

    return list(dict.fromkeys(files))


def count_files_sequentially(files: Sequence[str], progress_interval: int,
                             on_file_done=None) -> AggregateResult:
    """Scan files one after another in this process, same aggregation as the scheduler"""
    start_time = time.time()
    aggregator = Aggregator()
    for path in files:
        logger.info(f"Processing {path}")
        try:
            result = count_words(
                path,
                progress_interval=progress_interval,
                on_progress=lambda lines, unique, total: logger.info(
                    f"{lines:,} lines processed ({unique:,} unique words)"),
            )
        except WordCountError as e:
            aggregator.add_failure(path, e)
            continue
        aggregator.add_success(result)
        if on_file_done:
            on_file_done(result)
    return aggregator.result(time.time() - start_time, effective_workers=1)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        # Exits with the usual argparse usage status
        build_parser(Settings()).error(str(e))
    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else getattr(logging, args.log_level),
        format=LOG_FORMAT,
    )

    files = expand_files(args.files)
    if not files:
        print("Error: no files found to process.", file=sys.stderr)
        return 1

    def print_report(result):
        if not args.json:
            print(format_file_report(result, args.top))

    if args.parallel and len(files) > 1:
        scheduler = BatchScheduler(
            max_workers=args.workers,
            progress_interval=settings.worker_progress_interval,
            timeout=args.timeout,
            verbose=not args.quiet,
        )
        aggregate = scheduler.run(files)
    else:
        aggregate = count_files_sequentially(files, args.progress_interval, on_file_done=print_report)

    if args.json:
        payload = aggregate.to_dict()
        payload['top_words'] = [{'word': w, 'count': c}
                                for w, c in top_words(aggregate.combined_frequency_map, args.top)]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    elif len(files) > 1 or aggregate.failed:
        print(format_summary(aggregate, args.top))

    return 1 if not aggregate.successful else 0


if __name__ == '__main__':
    sys.exit(main())
