"""
Worker process entry point.

Each worker owns one file: it scans it in its own process and talks to the
orchestrator only by putting messages on a queue. Zero or more
ProgressMessage are followed by exactly one CompleteMessage.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

import psutil

from wordflux.config import DEFAULT_WORKER_PROGRESS_INTERVAL
from wordflux.errors import WordCountError
from wordflux.models import FileCountResult
from wordflux.word_counter import count_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressMessage:
    worker_id: int
    path: str
    lines_processed: int
    unique_words: int
    total_words: int


@dataclass(frozen=True)
class CompleteMessage:
    worker_id: int
    path: str
    result: Optional[FileCountResult] = None
    error: Optional[WordCountError] = None
    rss_bytes: int = 0

    @property
    def success(self) -> bool:
        return self.result is not None


def run_worker(worker_id: int, path: str, queue, progress_interval: int = DEFAULT_WORKER_PROGRESS_INTERVAL):
    """
    Scan one file and report through queue.

    Handled scan failures are sent as a failed CompleteMessage. Anything
    else propagates and kills the process, which the orchestrator reports
    as a crashed worker.
    """
    def report_progress(lines_processed, unique_words, total_words):
        queue.put(ProgressMessage(worker_id, path, lines_processed, unique_words, total_words))

    logger.debug(f"Worker {worker_id}: starting {path} (pid {os.getpid()})")
    result, error = None, None
    try:
        result = count_words(path, progress_interval=progress_interval, on_progress=report_progress)
    except WordCountError as e:
        error = e

    rss = psutil.Process(os.getpid()).memory_info().rss
    queue.put(CompleteMessage(worker_id, path, result=result, error=error, rss_bytes=rss))
