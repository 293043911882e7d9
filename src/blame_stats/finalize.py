from __future__ import annotations

import datetime as dt

from .models import AggregateState, AnalysisOptions, AnalysisResult, AuthorStats, FileContribution


def percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return count / total * 100


def author_sort_key(sort_by: str):
    if sort_by == "name":
        return lambda a: (a.name, -a.line_count, -a.file_count)
    if sort_by == "files":
        return lambda a: (-a.file_count, a.name, -a.line_count)
    return lambda a: (-a.line_count, a.name, -a.file_count)


def sort_authors(authors: list[AuthorStats], sort_by: str) -> list[AuthorStats]:
    return sorted(authors, key=author_sort_key(sort_by))


def truncate(items: list, max_results: int) -> list:
    if max_results > 0:
        return items[:max_results]
    return items


def finalize(
    state: AggregateState,
    options: AnalysisOptions,
    *,
    total_files: int,
    complete: bool = True,
    repository: str = "",
    processing_time: float = 0.0,
    generated_at: dt.datetime | None = None,
) -> AnalysisResult:
    """
    Turn the aggregator's mutable state into a sorted, filtered snapshot.

    Authors below `min_lines` are dropped before sorting and truncation;
    percentages are always relative to the unfiltered `total_lines`.
    """
    authors = [
        AuthorStats(
            name=name,
            line_count=count,
            file_count=len(state.author_files.get(name, ())),
            percentage=percentage(count, state.total_lines),
        )
        for name, count in state.author_lines.items()
        if count >= options.min_lines
    ]
    authors = truncate(sort_authors(authors, options.sort_by), options.max_results)

    contributions = [
        FileContribution(path=path, line_count=count)
        for path, count in state.focus_file_lines.items()
        if count >= options.min_lines
    ]
    contributions.sort(key=lambda c: (-c.line_count, c.path))
    contributions = truncate(contributions, options.max_results)

    return AnalysisResult(
        authors=tuple(authors),
        contributions=tuple(contributions),
        total_lines=state.total_lines,
        files_processed=state.files_processed,
        total_files=total_files,
        files_failed=state.files_failed,
        files_cancelled=state.files_cancelled,
        complete=complete,
        repository=repository,
        focus_author=options.focus_author,
        processing_time=processing_time,
        generated_at=generated_at if generated_at is not None else dt.datetime.now(dt.timezone.utc),
    )
