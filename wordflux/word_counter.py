"""
Word Counter
Scans a text file line by line, normalises each line and accumulates
word frequencies without ever holding more than one line in memory
"""

import os
import time
import logging
from collections import defaultdict
from typing import Callable, Iterator, Optional

from wordflux.config import DEFAULT_PROGRESS_INTERVAL
from wordflux.errors import IsDirectoryError, NotFoundError, ScanIOError
from wordflux.models import FileCountResult
from wordflux.normalizer import normalize_line

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, int], None]


def check_path(path: str):
    """
    Validate that path names an existing regular file

    Raises:
        NotFoundError: If nothing exists at path
        IsDirectoryError: If path is a directory
    """
    if not os.path.exists(path):
        raise NotFoundError(path)
    if os.path.isdir(path):
        raise IsDirectoryError(path)


def iter_lines(path: str) -> Iterator[str]:
    """
    Lazily yield the lines of a file, newline stripped

    Undecodable bytes are replaced rather than aborting the scan.
    """
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            yield line.rstrip('\r\n')


class WordCounter:
    """Counts words in a single file"""

    def __init__(self, path: str, progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
                 on_progress: Optional[ProgressCallback] = None):
        """
        Initialize the counter

        Args:
            path: Path to the text file
            progress_interval: Report progress every this many lines
            on_progress: Called as on_progress(lines_processed, unique_words, total_words)
        """
        if not isinstance(progress_interval, int) or progress_interval <= 0:
            raise ValueError(f"progress_interval must be a positive integer, got {progress_interval!r}")
        self.path = path
        self.progress_interval = progress_interval
        self.on_progress = on_progress

    def count(self) -> FileCountResult:
        """
        Scan the file and build its frequency map

        Returns:
            FileCountResult for the whole file

        Raises:
            NotFoundError, IsDirectoryError: Before anything is opened
            ScanIOError: If reading fails mid-scan; partial counts are dropped
        """
        check_path(self.path)
        start_time = time.time()

        frequency_map = defaultdict(int)
        total_words = 0
        lines_processed = 0

        try:
            for line in iter_lines(self.path):
                lines_processed += 1
                for token in normalize_line(line):
                    frequency_map[token] += 1
                    total_words += 1

                if self.on_progress and lines_processed % self.progress_interval == 0:
                    self.on_progress(lines_processed, len(frequency_map), total_words)
        except OSError as e:
            logger.error(f"Scan of {self.path} aborted after {lines_processed} lines: {e}")
            raise ScanIOError(self.path, e) from e

        duration = time.time() - start_time
        logger.debug(f"Counted {total_words} words ({len(frequency_map)} unique) "
                     f"in {self.path} in {duration:.2f}s")

        return FileCountResult(
            path=self.path,
            total_words=total_words,
            unique_words=len(frequency_map),
            lines_processed=lines_processed,
            frequency_map=dict(frequency_map),
            duration_seconds=duration,
        )


def count_words(path: str, progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
                on_progress: Optional[ProgressCallback] = None) -> FileCountResult:
    """Count the words in one file. See WordCounter.count."""
    return WordCounter(path, progress_interval, on_progress).count()
