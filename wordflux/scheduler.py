"""
Batch Scheduler
Runs one worker process per file, at most E at a time, in sequential
batches, and feeds every terminal result to the aggregator in the order
files were submitted
"""

import time
import queue
import logging
import multiprocessing
from typing import Callable, Dict, List, Optional, Sequence, Union

import psutil

from wordflux.aggregator import Aggregator, top_words
from wordflux.config import DEFAULT_WORKER_PROGRESS_INTERVAL
from wordflux.errors import WordCountError, worker_crashed, worker_timeout
from wordflux.models import AggregateResult
from wordflux.worker import CompleteMessage, ProgressMessage, run_worker

logger = logging.getLogger(__name__)

Outcome = Union[CompleteMessage, WordCountError]


def available_units() -> int:
    """Number of logical CPUs on this host"""
    return psutil.cpu_count(logical=True) or 1


def effective_concurrency(max_workers: Optional[int], file_count: int,
                          available: Optional[int] = None) -> int:
    """
    Number of workers allowed to run at once.

    max(1, min(max_workers, file_count, available)). An unset max_workers
    means every available CPU. Zero or negative values are clamped to 1.
    """
    if available is None:
        available = available_units()
    if max_workers is None:
        max_workers = available
    elif max_workers < 1:
        logger.warning(f"max_workers={max_workers} is not positive; using 1 worker")
    return max(1, min(max_workers, file_count, available))


def plan_batches(paths: Sequence[str], batch_size: int) -> List[List[str]]:
    """Split paths into consecutive batches of at most batch_size, keeping order"""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [list(paths[i:i + batch_size]) for i in range(0, len(paths), batch_size)]


class BatchScheduler:
    """Fans files out to worker processes batch by batch"""

    def __init__(self, max_workers: Optional[int] = None,
                 progress_interval: int = DEFAULT_WORKER_PROGRESS_INTERVAL,
                 timeout: Optional[float] = None,
                 on_progress: Optional[Callable[[ProgressMessage], None]] = None,
                 verbose: bool = True,
                 worker_target: Callable = run_worker,
                 poll_interval: float = 0.1,
                 mp_context=None):
        """
        Initialize the scheduler

        Args:
            max_workers: Upper bound on concurrent workers (None = CPU count)
            progress_interval: Lines between worker progress messages
            timeout: Seconds a worker may run before it is terminated (None = no limit)
            on_progress: Called in the orchestrator for every ProgressMessage
            verbose: Log progress and summaries at INFO instead of DEBUG
            worker_target: Function run in each worker process
            poll_interval: Seconds to block on the message queue per poll
            mp_context: multiprocessing context used to create processes and queues
        """
        if not isinstance(progress_interval, int) or progress_interval <= 0:
            raise ValueError(f"progress_interval must be a positive integer, got {progress_interval!r}")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.max_workers = max_workers
        self.progress_interval = progress_interval
        self.timeout = timeout
        self.on_progress = on_progress
        self.verbose = verbose
        self.worker_target = worker_target
        self.poll_interval = poll_interval
        self.mp_context = mp_context or multiprocessing.get_context()

    def _log(self, msg: str):
        logger.log(logging.INFO if self.verbose else logging.DEBUG, msg)

    def run(self, paths: Sequence[str]) -> AggregateResult:
        """
        Count words in every file and merge the results

        Args:
            paths: Files to process, already validated by the caller

        Returns:
            AggregateResult with one entry (successful or failed) per path
        """
        paths = list(paths)
        if not paths:
            self._log("No files to process")
            return AggregateResult()

        start_time = time.time()
        cpus = available_units()
        workers = effective_concurrency(self.max_workers, len(paths), cpus)
        batches = plan_batches(paths, workers)

        self._log(f"Processing {len(paths)} files with {workers} workers "
                  f"({cpus} CPUs available, {len(batches)} batches)")

        aggregator = Aggregator()
        for index, batch in enumerate(batches):
            if len(batches) > 1:
                self._log(f"Batch {index + 1}/{len(batches)}: {len(batch)} files")
            self._run_batch(batch, index * workers + 1, aggregator)

        result = aggregator.result(time.time() - start_time, workers)
        self._log_summary(result)
        return result

    def _run_batch(self, batch: List[str], first_worker_id: int, aggregator: Aggregator):
        """Launch one worker per file and wait until every one has reported"""
        messages = self.mp_context.Queue()
        workers = []
        try:
            for offset, path in enumerate(batch):
                worker_id = first_worker_id + offset
                process = self.mp_context.Process(
                    target=self.worker_target,
                    args=(worker_id, path, messages, self.progress_interval),
                    name=f"wordflux-worker-{worker_id}",
                    daemon=True,
                )
                process.start()
                self._log(f"Worker {worker_id}: started {path}")
                workers.append((worker_id, path, process))

            outcomes = self._collect(workers, messages)
        finally:
            for _, _, process in workers:
                process.join(timeout=5)
                if process.is_alive():
                    process.terminate()
                    process.join()
            messages.close()

        # Record in submission order regardless of completion order
        for worker_id, path, _ in workers:
            outcome = outcomes[worker_id]
            if isinstance(outcome, WordCountError):
                aggregator.add_failure(path, outcome)
            elif outcome.success:
                aggregator.add_success(outcome.result)
            else:
                aggregator.add_failure(path, outcome.error)

    def _collect(self, workers, messages) -> Dict[int, Outcome]:
        """Drain the message queue until every worker has a terminal outcome"""
        outcomes: Dict[int, Outcome] = {}
        # Workers seen dead with no terminal message yet. Their last message
        # may still be in flight, so they get one more empty poll.
        exited = set()
        deadline = time.monotonic() + self.timeout if self.timeout else None

        while len(outcomes) < len(workers):
            try:
                message = messages.get(timeout=self.poll_interval)
            except queue.Empty:
                message = None

            if message is not None:
                self._handle_message(message, outcomes)
            else:
                for worker_id, path, process in workers:
                    if worker_id in outcomes or process.is_alive():
                        continue
                    if worker_id in exited:
                        logger.error(f"Worker {worker_id}: exited with code {process.exitcode} "
                                     f"without reporting a result for {path}")
                        outcomes[worker_id] = worker_crashed(path, f"exit code {process.exitcode}")
                    else:
                        exited.add(worker_id)

            if deadline is not None and time.monotonic() >= deadline:
                for worker_id, path, process in workers:
                    if worker_id not in outcomes and process.is_alive():
                        logger.error(f"Worker {worker_id}: timed out on {path}, terminating")
                        process.terminate()
                        outcomes[worker_id] = worker_timeout(path, self.timeout)

        return outcomes

    def _handle_message(self, message, outcomes: Dict[int, Outcome]):
        if isinstance(message, ProgressMessage):
            self._log(f"Worker {message.worker_id}: {message.lines_processed:,} lines processed "
                      f"({message.unique_words:,} unique words)")
            if self.on_progress:
                self.on_progress(message)
        elif isinstance(message, CompleteMessage):
            if message.worker_id in outcomes:
                logger.debug(f"Worker {message.worker_id}: late result for {message.path} ignored")
                return
            outcomes[message.worker_id] = message
            if message.success:
                self._log(f"Worker {message.worker_id}: completed {message.path} in "
                          f"{message.result.duration_seconds:.2f}s "
                          f"({message.result.unique_words:,} unique words, "
                          f"{message.rss_bytes / (1024 * 1024):.1f} MB RSS)")
            else:
                logger.error(f"Worker {message.worker_id}: {message.error.message}")
        else:
            logger.warning(f"Ignoring unexpected worker message: {message!r}")

    def _log_summary(self, result: AggregateResult):
        self._log(f"Finished in {result.duration_seconds:.2f}s: "
                  f"{len(result.successful)} succeeded, {len(result.failed)} failed, "
                  f"{result.total_lines_processed:,} lines, {result.total_words:,} words, "
                  f"{result.total_unique_words:,} unique")
        for failure in result.failed:
            self._log(f"  failed {failure.path}: {failure.error.message}")
        if result.combined_frequency_map:
            top = ", ".join(f"{word}={count}" for word, count in top_words(result.combined_frequency_map, 10))
            self._log(f"Top words: {top}")


def process_files_in_parallel(paths: Sequence[str], max_workers: Optional[int] = None,
                              verbose: bool = True, **kwargs) -> AggregateResult:
    """Convenience wrapper: BatchScheduler(...).run(paths)"""
    return BatchScheduler(max_workers=max_workers, verbose=verbose, **kwargs).run(paths)
