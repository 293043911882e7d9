from __future__ import annotations

import json
from pathlib import Path

import pytest

from blame_stats.config import env_settings, find_config_file, load_config, options_from_settings, resolve_settings
from blame_stats.errors import ConfigError
from blame_stats.models import AnalysisOptions


def test_precedence_defaults_file_env_cli() -> None:
    settings = resolve_settings(
        file_settings={"min-lines": 5, "sort": "files", "exclude_author": ["bot", "ci"], "output": "csv"},
        environ={"BLAME_STATS_MIN_LINES": "50", "BLAME_STATS_LIMIT": "3", "UNRELATED": "x"},
        cli_settings={"max_results": 7},
    )
    assert settings["min_lines"] == 50
    assert settings["sort_by"] == "files"
    assert settings["max_results"] == 7
    assert settings["exclude_authors"] == ["bot", "ci"]
    assert settings["output"] == "csv"
    assert settings["emoji"] is False

    options = options_from_settings(settings)
    assert options == AnalysisOptions(min_lines=50, sort_by="files", max_results=7, exclude_authors=("bot", "ci"))


def test_env_lists_and_booleans() -> None:
    settings = env_settings({"BLAME_STATS_INCLUDE_AUTHORS": "alice, bob", "BLAME_STATS_VERBOSE": "yes"})
    assert settings == {"include_authors": ["alice", "bob"], "verbose": True}


def test_bad_values_raise_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_settings(environ={"BLAME_STATS_CONCURRENCY": "many"})
    with pytest.raises(ConfigError):
        resolve_settings(file_settings={"emoji": "sometimes"}, environ={})
    with pytest.raises(ConfigError):
        resolve_settings(file_settings={"colour": "blue"}, environ={})


def test_options_validation() -> None:
    with pytest.raises(ConfigError):
        AnalysisOptions(sort_by="size")
    with pytest.raises(ConfigError):
        AnalysisOptions(min_lines=-1)
    with pytest.raises(ConfigError):
        AnalysisOptions(author_format="initials")
    assert AnalysisOptions(concurrency=3).workers == 3
    assert AnalysisOptions().workers >= 2
    assert AnalysisOptions(concurrency=2).queue_size == 8


def test_load_and_find_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert load_config(tmp_path / "missing.json") == {}

    cfg = tmp_path / "blame-stats.json"
    cfg.write_text(json.dumps({"min_lines": 2}), encoding="utf-8")
    assert find_config_file(None) == Path("blame-stats.json")
    assert load_config(cfg) == {"min_lines": 2}

    cfg.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg)
    with pytest.raises(ConfigError):
        find_config_file(tmp_path / "nope.json")
