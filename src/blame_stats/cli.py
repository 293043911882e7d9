from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path
from typing import Mapping

from .cancel import CancelToken
from .completion import SHELLS, completion_script
from .config import find_config_file, load_config, options_from_settings, resolve_settings
from .errors import BlameStatsError, ConfigError
from .logging_utils import configure_logging
from .models import AUTHOR_FORMATS, SORT_KEYS
from .render import OUTPUT_FORMATS, render
from .run import ProgressPrinter, analyze_repository, cancel_on_signals

EXIT_OK = 0
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130

EPILOG = """\
examples:
  blame-stats                                   all authors across all files
  blame-stats /path/to/project                  analyze a specific directory
  blame-stats . "John Doe"                      one author's contributions per file
  blame-stats -o json --min-lines 100 --since 2024-01-01
  blame-stats -o csv --sort files --limit 10
  blame-stats --exclude-author bot --exclude-pattern "*.generated.go"

configuration:
  Settings are read from --config, ./blame-stats.json or
  ~/.config/blame-stats/config.json (JSON object, keys like "min_lines"),
  then from BLAME_STATS_* environment variables (e.g. BLAME_STATS_MIN_LINES=50),
  then from the command line.
"""


def _version() -> str:
    try:
        return metadata.version("blame-stats")
    except metadata.PackageNotFoundError:
        return "0+unknown"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blame-stats",
        description="Count the lines each author owns in a git repository, using git blame.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("directory", nargs="?", type=Path, default=Path("."), help="Repository root (default: current directory).")
    parser.add_argument("author", nargs="?", default=None, help="Show per-file contributions for this author.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")

    out = parser.add_argument_group("output")
    out.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default=None, help="Output format (default: table).")
    out.add_argument("--sort", dest="sort_by", choices=SORT_KEYS, default=None, help="Sort authors by lines, name or files (default: lines).")
    out.add_argument("--limit", dest="max_results", type=int, default=None, help="Limit number of results (0 = no limit).")
    out.add_argument("--emoji", action="store_true", default=None, help="Include emoji in table output.")

    filt = parser.add_argument_group("filtering")
    filt.add_argument("--min-lines", type=int, default=None, help="Minimum lines for an author or file to be listed (default: 1).")
    filt.add_argument("--exclude-author", dest="exclude_authors", action="append", default=None, help="Exclude an author (repeatable, comma-separated).")
    filt.add_argument("--include-author", dest="include_authors", action="append", default=None, help="Only count these authors (repeatable, comma-separated).")
    filt.add_argument("--since", default=None, help="Only attribute lines changed since this date (YYYY-MM-DD).")
    filt.add_argument("--until", default=None, help="Only attribute lines changed until this date (YYYY-MM-DD).")
    filt.add_argument("--exclude-pattern", dest="exclude_patterns", action="append", default=None, help="Additional file glob to exclude (repeatable).")
    filt.add_argument("--author-format", choices=AUTHOR_FORMATS, default=None, help="How authors are identified (default: name).")

    beh = parser.add_argument_group("behaviour")
    beh.add_argument("-c", "--concurrency", type=int, default=None, help="Number of parallel git blame processes (default: 2 x CPU cores).")
    beh.add_argument("-v", "--verbose", action="count", default=None, help="Report per-file failures; repeat for debug logging.")
    beh.add_argument("-q", "--quiet", action="store_true", default=None, help="Suppress everything except the results.")
    beh.add_argument("--no-progress", action="store_true", default=None, help="Disable progress output.")
    beh.add_argument("--config", type=Path, default=None, help="Path to a JSON config file.")
    beh.add_argument("--completion", choices=SHELLS, default=None, help="Print a shell completion script and exit.")
    return parser


def _cli_settings(args: argparse.Namespace) -> dict[str, object]:
    settings: dict[str, object] = {
        "output": args.output,
        "sort_by": args.sort_by,
        "max_results": args.max_results,
        "emoji": args.emoji,
        "min_lines": args.min_lines,
        "exclude_authors": args.exclude_authors,
        "include_authors": args.include_authors,
        "since": args.since,
        "until": args.until,
        "exclude_patterns": args.exclude_patterns,
        "author_format": args.author_format,
        "concurrency": args.concurrency,
        "verbose": bool(args.verbose) if args.verbose is not None else None,
        "quiet": args.quiet,
        "no_progress": args.no_progress,
    }
    if args.author is not None:
        settings["focus_author"] = args.author
    return {k: v for k, v in settings.items() if v is not None}


def main(argv: list[str] | None = None, *, environ: Mapping[str, str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.completion:
        sys.stdout.write(completion_script(parser, args.completion))
        return EXIT_OK

    try:
        config_path = find_config_file(args.config)
        file_settings = load_config(config_path) if config_path is not None else {}
        settings = resolve_settings(file_settings=file_settings, environ=environ, cli_settings=_cli_settings(args))
        options = options_from_settings(settings)
        if settings.get("output") not in OUTPUT_FORMATS:
            raise ConfigError(f"output must be one of {', '.join(OUTPUT_FORMATS)}, got {settings.get('output')!r}")
    except BlameStatsError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_ERROR

    quiet = bool(settings.get("quiet"))
    verbosity = int(args.verbose or (1 if options.verbose else 0))
    configure_logging(verbosity, quiet=quiet)

    def announce(msg: str) -> None:
        if not quiet:
            print(f"[INFO] {msg}", file=sys.stderr)

    if config_path is not None:
        announce(f"Using config file: {config_path}")

    show_progress = not quiet and not bool(settings.get("no_progress"))
    token = CancelToken()
    try:
        with cancel_on_signals(token, announce=not quiet):
            result = analyze_repository(
                args.directory,
                options,
                extra_patterns=list(settings.get("exclude_patterns") or []),
                token=token,
                on_progress=ProgressPrinter() if show_progress else None,
                announce=announce,
            )
    except BlameStatsError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_ERROR

    sys.stdout.write(render(result, str(settings.get("output") or "table"), emoji=bool(settings.get("emoji")), quiet=quiet))
    sys.stdout.flush()

    if not result.complete:
        print(
            f"[WARN] Run interrupted: results cover {result.files_processed:,} of {result.total_files:,} files and are incomplete.",
            file=sys.stderr,
        )
        return EXIT_INTERRUPTED
    if result.files_failed and not options.verbose and not quiet:
        print(f"[WARN] {result.files_failed:,} files could not be blamed (use -v for details).", file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
