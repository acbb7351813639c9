from __future__ import annotations

from pathlib import Path

import pytest

from treematch.cli import ArgumentError, main, parse_config


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exit_info:
        main(["--help"])

    assert exit_info.value.code == 0
    assert "--strip-components" in capsys.readouterr().out


def test_missing_archive_exits_one(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1

    captured = capsys.readouterr()
    assert "usage: treematch" in captured.err
    assert "archive path is required" in captured.err


def test_invalid_option_value_exits_one(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["pkg.tar.gz", "--limit", "many"]) == 1
    assert "--limit" in capsys.readouterr().err


def test_positional_arguments_forward_history_query(tmp_path: Path) -> None:
    config = parse_config(
        ["--repo", str(tmp_path), "pkg.tar.gz", "v1.0..v2.0", "--", "--first-parent", "src/"]
    )

    assert config.archive == Path("pkg.tar.gz").resolve()
    assert config.repo_root == tmp_path.resolve()
    assert config.match.rev_args == ("v1.0..v2.0", "--first-parent", "src/")


def test_flags_map_onto_config(tmp_path: Path) -> None:
    config = parse_config(
        [
            "--repo",
            str(tmp_path),
            "--ignore=\\.log$",
            "--strip-components=0",
            "--limit=3",
            "--show-match",
            "--show-no-match",
            "--sort",
            "--commit=abc123",
            "--debug",
            "pkg.tar.gz",
        ]
    )

    assert config.match.ignore == r"\.log$"
    assert config.match.strip_components == 0
    assert config.match.limit == 3
    assert config.match.commit == "abc123"
    assert config.output.show_match is True
    assert config.output.show_no_match is True
    assert config.output.sort is True
    assert config.output.debug_level == 1


def test_diff_flags_select_presentation(tmp_path: Path) -> None:
    repo = ["--repo", str(tmp_path)]

    assert parse_config([*repo, "--diff", "a.tgz"]).output.diff == "full"
    assert parse_config([*repo, "--diff-line", "a.tgz"]).output.diff == "line"
    with_opts = parse_config([*repo, "--diff-opt=-w -B", "a.tgz"])
    assert with_opts.output.diff == "full"
    assert with_opts.output.diff_opts == ("-w", "-B")
    assert parse_config([*repo, "--debug=3", "a.tgz"]).output.debug_level == 3


def test_bad_ignore_pattern_is_an_argument_error(tmp_path: Path) -> None:
    with pytest.raises(ArgumentError, match="ignore"):
        parse_config(["--repo", str(tmp_path), "--ignore=(", "a.tgz"])


def test_options_may_follow_the_archive_and_revisions(tmp_path: Path) -> None:
    config = parse_config(
        ["pkg.tar.gz", "--limit=2", "v1..v2", "--repo", str(tmp_path), "--", "--", "docs/"]
    )

    assert config.archive == Path("pkg.tar.gz").resolve()
    assert config.match.limit == 2
    assert config.match.rev_args == ("v1..v2", "--", "docs/")
