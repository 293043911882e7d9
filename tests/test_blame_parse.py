from __future__ import annotations

from blame_stats.blame import parse_line_porcelain
from blame_stats.identity import AuthorFilter


def _record(sha: str, name: str, email: str, line_no: int, content: str) -> list[str]:
    return [
        f"{sha} {line_no} {line_no} 1\n",
        f"author {name}\n",
        f"author-mail <{email}>\n",
        "author-time 1735689600\n",
        "author-tz +0000\n",
        f"committer {name}\n",
        f"committer-mail <{email}>\n",
        "committer-time 1735689600\n",
        "committer-tz +0000\n",
        "summary author notes\n",
        "filename src/app.py\n",
        f"\t{content}\n",
    ]


PORCELAIN = [
    *_record("a" * 40, "Alice", "alice@example.com", 1, "import os"),
    *_record("b" * 40, "Bob", "bob@example.com", 2, "author fake"),
    *_record("a" * 40, "Alice", "alice@example.com", 3, ""),
]


def test_one_identity_per_blamed_line_in_file_order() -> None:
    assert parse_line_porcelain(PORCELAIN) == ["Alice", "Bob", "Alice"]


def test_author_formats() -> None:
    assert parse_line_porcelain(PORCELAIN, author_format="email") == [
        "alice@example.com",
        "bob@example.com",
        "alice@example.com",
    ]
    assert parse_line_porcelain(PORCELAIN, author_format="name-email") == [
        "Alice <alice@example.com>",
        "Bob <bob@example.com>",
        "Alice <alice@example.com>",
    ]


def test_exclude_filter_is_case_insensitive() -> None:
    f = AuthorFilter.from_lists([], ["ALICE"])
    assert parse_line_porcelain(PORCELAIN, author_filter=f) == ["Bob"]


def test_include_filter_keeps_only_listed_authors() -> None:
    f = AuthorFilter.from_lists(["bob@EXAMPLE.com"], [])
    assert parse_line_porcelain(PORCELAIN, author_filter=f) == ["Bob"]


def test_exclude_wins_over_include() -> None:
    f = AuthorFilter.from_lists(["alice", "bob"], ["bob"])
    assert parse_line_porcelain(PORCELAIN, author_filter=f) == ["Alice", "Alice"]


def test_empty_author_lines_are_skipped() -> None:
    lines = _record("c" * 40, "", "nobody@example.com", 1, "x")
    assert parse_line_porcelain(lines) == []
    assert parse_line_porcelain(lines, author_format="email") == ["nobody@example.com"]


def test_empty_output_yields_no_authors() -> None:
    assert parse_line_porcelain([]) == []
