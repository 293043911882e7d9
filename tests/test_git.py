from __future__ import annotations

from pathlib import Path

import pytest

from blame_stats.errors import RepositoryError
from blame_stats.git import blame_args, validate_repository


def test_blame_args_include_dates_only_when_set() -> None:
    assert blame_args("a.txt") == ["blame", "-M", "-C", "-w", "--line-porcelain", "--", "a.txt"]
    assert blame_args("-odd", since="2024-01-01", until="2024-12-31") == [
        "blame",
        "-M",
        "-C",
        "-w",
        "--line-porcelain",
        "--since=2024-01-01",
        "--until=2024-12-31",
        "--",
        "-odd",
    ]


def test_validate_repository_accepts_git_dir_and_worktree_file(tmp_path: Path) -> None:
    (tmp_path / "clone" / ".git").mkdir(parents=True)
    assert validate_repository(tmp_path / "clone") == (tmp_path / "clone").resolve()

    (tmp_path / "wt").mkdir()
    (tmp_path / "wt" / ".git").write_text("gitdir: elsewhere\n", encoding="utf-8")
    assert validate_repository(tmp_path / "wt") == (tmp_path / "wt").resolve()


def test_validate_repository_rejects_bad_roots(tmp_path: Path) -> None:
    with pytest.raises(RepositoryError, match="does not exist"):
        validate_repository(tmp_path / "missing")

    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(RepositoryError, match="is not a directory"):
        validate_repository(f)

    with pytest.raises(RepositoryError, match="is not a git repository"):
        validate_repository(tmp_path)
