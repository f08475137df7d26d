"""
WordFlux: word frequency counting over large text files with streaming
reads and parallel worker processes.
"""

from wordflux.aggregator import Aggregator, merge_maps, top_words
from wordflux.errors import ErrorKind, WordCountError
from wordflux.models import AggregateResult, FileCountResult, FileFailure
from wordflux.normalizer import normalize_line
from wordflux.scheduler import BatchScheduler, effective_concurrency, plan_batches, process_files_in_parallel
from wordflux.word_counter import count_words

__version__ = "1.0.0"

__all__ = [
    'Aggregator',
    'AggregateResult',
    'BatchScheduler',
    'ErrorKind',
    'FileCountResult',
    'FileFailure',
    'WordCountError',
    'count_words',
    'effective_concurrency',
    'merge_maps',
    'normalize_line',
    'plan_batches',
    'process_files_in_parallel',
    'top_words',
]
