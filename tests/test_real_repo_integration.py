from __future__ import annotations

import json
import os
import shutil
import subprocess
from pathlib import Path

import pytest

from blame_stats.cli import main
from blame_stats.models import AnalysisOptions
from blame_stats.run import analyze_repository

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _commit(repo: Path, *, name: str, email: str, message: str) -> None:
    env = os.environ.copy()
    env["GIT_AUTHOR_NAME"] = name
    env["GIT_AUTHOR_EMAIL"] = email
    env["GIT_COMMITTER_NAME"] = name
    env["GIT_COMMITTER_EMAIL"] = email
    env["GIT_AUTHOR_DATE"] = "2025-01-01T00:00:00Z"
    env["GIT_COMMITTER_DATE"] = "2025-01-01T00:00:00Z"
    _run(["git", "add", "-A"], cwd=repo)
    _run(["git", "commit", "-q", "-m", message], cwd=repo, env=env)


def _make_repo(repo: Path) -> Path:
    """A: 10 lines by alice. B: 5 by alice, 5 by bob. C: untracked, so blame fails."""
    repo.mkdir(parents=True)
    _run(["git", "init", "-q"], cwd=repo)
    _run(["git", "config", "user.name", "Repo User"], cwd=repo)
    _run(["git", "config", "user.email", "repo@example.com"], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)

    (repo / "a.txt").write_text("".join(f"alpha line {i}\n" for i in range(10)), encoding="utf-8")
    (repo / "b.txt").write_text("".join(f"beta by alice {i}\n" for i in range(5)), encoding="utf-8")
    _commit(repo, name="alice", email="alice@example.com", message="alice")

    with (repo / "b.txt").open("a", encoding="utf-8") as f:
        f.write("".join(f"beta by bob {i}\n" for i in range(5)))
    _commit(repo, name="bob", email="bob@example.com", message="bob")

    (repo / "c.txt").write_text("not tracked\n", encoding="utf-8")
    return repo


def test_analyze_repository_counts_blame_lines(tmp_path: Path) -> None:
    repo = _make_repo(tmp_path / "repo")
    res = analyze_repository(repo, AnalysisOptions(concurrency=2))

    assert res.complete
    assert res.total_files == 3
    assert res.files_processed == 2
    assert res.files_failed == 1
    assert res.total_lines == 20
    assert [(a.name, a.line_count, a.file_count) for a in res.authors] == [("alice", 15, 2), ("bob", 5, 1)]


def test_analyze_repository_focus_author(tmp_path: Path) -> None:
    repo = _make_repo(tmp_path / "repo")
    res = analyze_repository(repo, AnalysisOptions(focus_author="bob"))
    assert [(c.path, c.line_count) for c in res.contributions] == [("b.txt", 5)]


def test_email_identities_and_exclusion(tmp_path: Path) -> None:
    repo = _make_repo(tmp_path / "repo")
    res = analyze_repository(repo, AnalysisOptions(author_format="email", exclude_authors=("ALICE",)))
    assert [(a.name, a.line_count) for a in res.authors] == [("bob@example.com", 5)]
    assert res.total_lines == 5


def test_cli_json_output(tmp_path: Path, monkeypatch, capsys) -> None:
    repo = _make_repo(tmp_path / "repo")
    monkeypatch.chdir(tmp_path)

    code = main([str(repo), "-o", "json", "-q"], environ={})
    out = capsys.readouterr().out

    assert code == 0
    data = json.loads(out)
    assert data["total_lines"] == 20
    assert data["files_processed"] == 2
    assert data["total_files"] == 3
    assert data["complete"] is True
    assert [a["name"] for a in data["authors"]] == ["alice", "bob"]


def test_cli_csv_for_focus_author(tmp_path: Path, monkeypatch, capsys) -> None:
    repo = _make_repo(tmp_path / "repo")
    monkeypatch.chdir(tmp_path)

    code = main([str(repo), "alice", "-o", "csv", "--no-progress"], environ={})
    captured = capsys.readouterr()

    assert code == 0
    assert captured.out.splitlines() == ["File,Lines", "a.txt,10", "b.txt,5"]
    assert "Found 3 files to analyze" in captured.err
