from __future__ import annotations

import csv
import io
import json

from .models import AnalysisResult

OUTPUT_FORMATS = ("table", "json", "csv", "plain")
MEDALS = ("🥇", "🥈", "🥉")


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def fmt_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{int(round(seconds * 1000))}ms"
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m{secs:.3f}s"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def render_table(headers: list[str], rows: list[list[str]], *, align_right: set[int] | None = None) -> str:
    align_right = align_right or set()
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def fmt_row(cells: list[str]) -> str:
        parts = []
        for i, cell in enumerate(cells):
            parts.append(cell.rjust(widths[i]) if i in align_right else cell.ljust(widths[i]))
        return "| " + " | ".join(parts) + " |"

    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    lines = [sep, fmt_row(headers), sep]
    lines.extend(fmt_row(r) for r in rows)
    lines.append(sep)
    return "\n".join(lines)


def _header(text: str, emoji: bool) -> str:
    return f"📊 {text}" if emoji else text


def render_summary(result: AnalysisResult, *, emoji: bool = False) -> str:
    rows: list[list[str]] = []
    if result.focus_author:
        rows.append(["Total lines", fmt_int(result.focus_lines)])
        rows.append(["Files contributed", fmt_int(len(result.contributions))])
    else:
        rows.append(["Total lines analyzed", fmt_int(result.total_lines)])
        rows.append(["Unique authors", fmt_int(len(result.authors))])
        rows.append(["Files processed", fmt_int(result.files_processed)])
    if result.files_failed:
        rows.append(["Files failed", fmt_int(result.files_failed)])
    rows.append(["Processing time", fmt_duration(result.processing_time)])
    if not result.complete:
        rows.append(["Status", f"incomplete ({fmt_int(result.files_processed)}/{fmt_int(result.total_files)} files)"])
    return _header("Summary", emoji) + "\n" + render_table(["Metric", "Value"], rows, align_right={1})


def render_authors_table(result: AnalysisResult, *, emoji: bool = False, quiet: bool = False) -> str:
    out: list[str] = []
    if not quiet:
        out.append(_header("Author Contributions", emoji))
    if not result.authors:
        if not quiet:
            out.append("No authors found matching criteria")
        return "\n".join(out) + ("\n" if out else "")

    rows: list[list[str]] = []
    for i, a in enumerate(result.authors):
        rank = MEDALS[i] if emoji and i < len(MEDALS) else str(i + 1)
        rows.append([rank, fmt_int(a.line_count), fmt_int(a.file_count), f"{a.percentage:.1f}%", trunc(a.name, 60)])
    out.append(render_table(["Rank", "Lines", "Files", "Percentage", "Author"], rows, align_right={1, 2, 3}))
    if not quiet:
        out.append("")
        out.append(render_summary(result, emoji=emoji))
    return "\n".join(out) + "\n"


def render_contributions_table(result: AnalysisResult, *, emoji: bool = False, quiet: bool = False) -> str:
    out: list[str] = []
    if not quiet:
        out.append(_header(f"{result.focus_author}'s Contributions", emoji))
    if not result.contributions:
        if not quiet:
            out.append(f"No contributions found for author {result.focus_author!r}")
        return "\n".join(out) + ("\n" if out else "")

    rows = [[fmt_int(c.line_count), c.path] for c in result.contributions]
    out.append(render_table(["Lines", "File"], rows, align_right={0}))
    if not quiet:
        out.append("")
        out.append(render_summary(result, emoji=emoji))
    return "\n".join(out) + "\n"


def render_plain(result: AnalysisResult) -> str:
    lines: list[str] = []
    if result.focus_author:
        lines.append(f"User: {result.focus_author}")
        lines.append(f"Total Lines: {fmt_int(result.focus_lines)}")
        lines.append(f"Files: {len(result.contributions)}")
        lines.append("")
        for c in result.contributions:
            lines.append(f"{fmt_int(c.line_count)}\t{c.path}")
    else:
        lines.append(f"Total Lines: {fmt_int(result.total_lines)}")
        lines.append(f"Authors: {len(result.authors)}")
        lines.append(f"Files: {result.files_processed}")
        lines.append("")
        for a in result.authors:
            lines.append(f"{fmt_int(a.line_count)}\t{fmt_int(a.file_count)}\t{a.name}\t{a.percentage:.2f}%")
    return "\n".join(lines) + "\n"


def result_to_dict(result: AnalysisResult) -> dict[str, object]:
    data: dict[str, object] = {
        "authors": [
            {
                "name": a.name,
                "line_count": a.line_count,
                "file_count": a.file_count,
                "percentage": round(a.percentage, 4),
            }
            for a in result.authors
        ],
        "total_lines": result.total_lines,
        "files_processed": result.files_processed,
        "total_files": result.total_files,
        "files_failed": result.files_failed,
        "files_cancelled": result.files_cancelled,
        "complete": result.complete,
        "processing_time": round(result.processing_time, 6),
        "repository": result.repository,
        "generated_at": result.generated_at.isoformat() if result.generated_at is not None else None,
    }
    if result.focus_author:
        data["focus_author"] = result.focus_author
        data["user_contributions"] = [{"path": c.path, "line_count": c.line_count} for c in result.contributions]
    return data


def render_json(result: AnalysisResult) -> str:
    return json.dumps(result_to_dict(result), indent=2, ensure_ascii=False) + "\n"


def render_csv(result: AnalysisResult) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    if result.focus_author:
        writer.writerow(["File", "Lines"])
        for c in result.contributions:
            writer.writerow([c.path, c.line_count])
    else:
        writer.writerow(["Author", "Lines", "Files", "Percentage"])
        for a in result.authors:
            writer.writerow([a.name, a.line_count, a.file_count, f"{a.percentage:.2f}"])
    return buf.getvalue()


def render(result: AnalysisResult, fmt: str = "table", *, emoji: bool = False, quiet: bool = False) -> str:
    if fmt == "json":
        return render_json(result)
    if fmt == "csv":
        return render_csv(result)
    if fmt == "plain":
        return render_plain(result)
    if result.focus_author:
        return render_contributions_table(result, emoji=emoji, quiet=quiet)
    return render_authors_table(result, emoji=emoji, quiet=quiet)
