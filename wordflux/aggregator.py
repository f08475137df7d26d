"""
Merging of per-file results into one aggregate, and top-N selection.
"""

import heapq
import logging
from collections import defaultdict
from typing import List, Tuple

from wordflux.config import DEFAULT_TOP_N
from wordflux.errors import WordCountError
from wordflux.models import AggregateResult, FileCountResult, FileFailure, FrequencyMap

logger = logging.getLogger(__name__)


def merge_maps(*maps: FrequencyMap) -> FrequencyMap:
    """
    Sum word counts across frequency maps.

    A word missing from a map counts as 0 there, so the merge is
    associative and commutative and the empty map is its identity.
    """
    merged = defaultdict(int)
    for frequency_map in maps:
        for word, count in frequency_map.items():
            merged[word] += count
    return dict(merged)


def _rank_key(item: Tuple[str, int]):
    word, count = item
    return (-count, word)


def top_words(frequency_map: FrequencyMap, n: int = DEFAULT_TOP_N) -> List[Tuple[str, int]]:
    """
    Most frequent words, count descending.

    Equal counts are ordered alphabetically by word so the output never
    depends on map iteration order.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    if n == 0:
        return []
    if n >= len(frequency_map):
        return sorted(frequency_map.items(), key=_rank_key)
    return heapq.nsmallest(n, frequency_map.items(), key=_rank_key)


class Aggregator:
    """Single owner of the combined state of a run"""

    def __init__(self):
        self.successful: List[FileCountResult] = []
        self.failed: List[FileFailure] = []
        self.combined: FrequencyMap = {}
        self.total_words = 0
        self.total_lines_processed = 0

    def add_success(self, result: FileCountResult):
        """Merge one file's counts into the aggregate"""
        self.successful.append(result)
        for word, count in result.frequency_map.items():
            self.combined[word] = self.combined.get(word, 0) + count
        self.total_words += result.total_words
        self.total_lines_processed += result.lines_processed

    def add_failure(self, path: str, error: WordCountError):
        """Record a failed file; it contributes nothing to the totals"""
        logger.warning(f"{error.kind.value}: {error.message}")
        self.failed.append(FileFailure(path=path, error=error))

    def result(self, duration_seconds: float = 0.0, effective_workers: int = 0) -> AggregateResult:
        """Snapshot the aggregate once every file has been recorded"""
        return AggregateResult(
            successful=list(self.successful),
            failed=list(self.failed),
            combined_frequency_map=self.combined,
            total_words=self.total_words,
            total_unique_words=len(self.combined),
            total_lines_processed=self.total_lines_processed,
            duration_seconds=duration_seconds,
            effective_workers=effective_workers,
        )
