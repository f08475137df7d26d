"""Console formatting of per-file and combined word count reports."""

import os
from typing import List, Tuple

from wordflux.aggregator import top_words
from wordflux.models import AggregateResult, FileCountResult

WIDTH = 60


def format_duration(seconds: float) -> str:
    """Scan time as "1.23s", "4m 05s" or "1h 02m 05s"."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def format_bar(count: int, top_count: int, width: int = 20) -> str:
    """Bar proportional to count, full width for the top count."""
    if top_count <= 0:
        return ""
    return "█" * min(int(count / top_count * width), width)


def _format_ranking(ranking: List[Tuple[str, int]], count_width: int) -> List[str]:
    lines = []
    if not ranking:
        return lines
    top_count = ranking[0][1]
    for rank, (word, count) in enumerate(ranking, start=1):
        lines.append(f"   {rank:>2}. {word:<20} {count:>{count_width},}  {format_bar(count, top_count)}")
    return lines


def format_file_report(result: FileCountResult, top_n: int = 10) -> str:
    """Report for one scanned file."""
    lines = [
        "",
        "═" * WIDTH,
        f"File: {os.path.basename(result.path)}",
        "─" * WIDTH,
        f"   Lines processed: {result.lines_processed:,}",
        f"   Total words:     {result.total_words:,}",
        f"   Unique words:    {result.unique_words:,}",
        f"   Time:            {format_duration(result.duration_seconds)}",
        "─" * WIDTH,
        f"TOP {top_n} MOST FREQUENT WORDS:",
        "─" * WIDTH,
    ]
    lines.extend(_format_ranking(top_words(result.frequency_map, top_n), 10))
    lines.append("═" * WIDTH)
    return "\n".join(lines)


def format_summary(result: AggregateResult, top_n: int = 10) -> str:
    """Combined report for a run over several files."""
    lines = [
        "",
        "═" * WIDTH,
        "SUMMARY",
        "─" * WIDTH,
        f"   Total time:            {format_duration(result.duration_seconds)}",
        f"   Workers:               {result.effective_workers}",
        f"   Files succeeded:       {len(result.successful)}",
        f"   Files failed:          {len(result.failed)}",
        f"   Lines processed:       {result.total_lines_processed:,}",
        f"   Total words:           {result.total_words:,}",
        f"   Unique words (merged): {result.total_unique_words:,}",
    ]
    if result.failed:
        lines.append("")
        lines.append("FILES WITH ERRORS:")
        for failure in result.failed:
            lines.append(f"   - {failure.path}: {failure.error.message}")

    if result.combined_frequency_map and top_n > 0:
        lines.append("")
        lines.append(f"TOP {top_n} MOST FREQUENT WORDS (COMBINED):")
        lines.append("─" * WIDTH)
        lines.extend(_format_ranking(top_words(result.combined_frequency_map, top_n), 12))

    lines.append("═" * WIDTH)
    return "\n".join(lines)
