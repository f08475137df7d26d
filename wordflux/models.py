"""
Result types passed between workers, the scheduler and the aggregator.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wordflux.errors import WordCountError


FrequencyMap = Dict[str, int]


@dataclass(frozen=True)
class FileCountResult:
    """Word counts for one fully scanned file"""
    path: str
    total_words: int
    unique_words: int
    lines_processed: int
    frequency_map: FrequencyMap
    duration_seconds: float
    success: bool = True
    error: Optional[WordCountError] = None

    def to_dict(self, include_frequencies: bool = False) -> dict:
        """Convert result to a JSON-ready dictionary."""
        data = {
            'path': self.path,
            'success': self.success,
            'total_words': self.total_words,
            'unique_words': self.unique_words,
            'lines_processed': self.lines_processed,
            'duration_seconds': round(self.duration_seconds, 3),
        }
        if include_frequencies:
            data['frequency_map'] = dict(self.frequency_map)
        return data


@dataclass(frozen=True)
class FileFailure:
    """A file that produced no counts"""
    path: str
    error: WordCountError

    @property
    def kind(self):
        return self.error.kind

    def to_dict(self) -> dict:
        return {'path': self.path, 'error': self.error.to_dict()}


@dataclass
class AggregateResult:
    """Combined outcome of a run over many files"""
    successful: List[FileCountResult] = field(default_factory=list)
    failed: List[FileFailure] = field(default_factory=list)
    combined_frequency_map: FrequencyMap = field(default_factory=dict)
    total_words: int = 0
    total_unique_words: int = 0
    total_lines_processed: int = 0
    duration_seconds: float = 0.0
    effective_workers: int = 0

    @property
    def total_files(self) -> int:
        return len(self.successful) + len(self.failed)

    def to_dict(self, include_frequencies: bool = False) -> dict:
        """Convert the aggregate to a JSON-ready dictionary."""
        data = {
            'successful': [r.to_dict() for r in self.successful],
            'failed': [f.to_dict() for f in self.failed],
            'total_words': self.total_words,
            'total_unique_words': self.total_unique_words,
            'total_lines_processed': self.total_lines_processed,
            'duration_seconds': round(self.duration_seconds, 3),
            'effective_workers': self.effective_workers,
        }
        if include_frequencies:
            data['combined_frequency_map'] = dict(self.combined_frequency_map)
        return data
