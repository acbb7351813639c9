"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "treematch.toml"
DEFAULT_STRIP_COMPONENTS = 1
DIFF_MODES = ("none", "line", "full")


@dataclass(slots=True, frozen=True)
class MatchConfig:
    """Settings that shape the digest indices and the commit scan."""

    strip_components: int
    ignore: str | None
    limit: int | None
    commit: str | None
    rev_args: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Settings that only affect presentation."""

    sort: bool
    show_match: bool
    show_no_match: bool
    diff: str
    diff_opts: tuple[str, ...]
    debug_level: int


@dataclass(slots=True, frozen=True)
class RunConfig:
    """Fully merged run configuration."""

    archive: Path
    repo_root: Path
    audit_log: Path | None
    match: MatchConfig
    output: OutputConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return a serializable config snapshot for the audit log."""
        return {
            "archive": str(self.archive),
            "repo_root": str(self.repo_root),
            "match": {
                "strip_components": self.match.strip_components,
                "ignore": self.match.ignore,
                "limit": self.match.limit,
                "commit": self.match.commit,
                "rev_args": list(self.match.rev_args),
            },
            "output": {
                "sort": self.output.sort,
                "show_match": self.output.show_match,
                "show_no_match": self.output.show_no_match,
                "diff": self.output.diff,
                "diff_opts": list(self.output.diff_opts),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line values applied at highest precedence."""

    strip_components: int | None = None
    ignore: str | None = None
    limit: int | None = None
    commit: str | None = None
    rev_args: tuple[str, ...] = ()
    sort: bool | None = None
    show_match: bool | None = None
    show_no_match: bool | None = None
    diff: str | None = None
    diff_opts: tuple[str, ...] | None = None
    debug_level: int | None = None
    audit_log: Path | None = None


def default_config(archive: Path, repo_root: Path) -> RunConfig:
    """Build default config for an archive and repository root."""
    return RunConfig(
        archive=archive.resolve(),
        repo_root=repo_root.resolve(),
        audit_log=None,
        match=MatchConfig(
            strip_components=DEFAULT_STRIP_COMPONENTS,
            ignore=None,
            limit=None,
            commit=None,
            rev_args=(),
        ),
        output=OutputConfig(
            sort=False,
            show_match=False,
            show_no_match=False,
            diff="none",
            diff_opts=(),
            debug_level=0,
        ),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional treematch.toml from the repository root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"{CONFIG_FILE_NAME} is not valid TOML: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{name}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{name}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_string(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    return value


def _optional_pattern(value: object, name: str, default: str | None) -> str | None:
    pattern = _optional_string(value, name, default)
    if pattern is None:
        return None
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"Config field '{name}' is not a valid pattern: {exc}") from exc
    return pattern


def _optional_non_negative_int(value: object, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Config field '{name}' must be a non-negative integer.")
    return value


def _optional_positive_int(value: object, name: str, default: int | None) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    return value


def _diff_mode(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if value not in DIFF_MODES:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(DIFF_MODES)}.")
    return str(value)


def merge_config(
    base: RunConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> RunConfig:
    """Merge defaults, repo config, then CLI overrides."""
    match_payload = _get_table(repo_payload, "match")
    output_payload = _get_table(repo_payload, "output")

    diff_opts = base.output.diff_opts
    if "diff_opts" in output_payload:
        diff_opts = _tuple_of_strings(output_payload["diff_opts"], "output.diff_opts")

    merged = RunConfig(
        archive=base.archive,
        repo_root=base.repo_root,
        audit_log=base.audit_log,
        match=MatchConfig(
            strip_components=_optional_non_negative_int(
                match_payload.get("strip_components"),
                "match.strip_components",
                base.match.strip_components,
            ),
            ignore=_optional_pattern(
                match_payload.get("ignore"), "match.ignore", base.match.ignore
            ),
            limit=_optional_positive_int(
                match_payload.get("limit"), "match.limit", base.match.limit
            ),
            commit=base.match.commit,
            rev_args=base.match.rev_args,
        ),
        output=OutputConfig(
            sort=_optional_bool(output_payload.get("sort"), "output.sort", base.output.sort),
            show_match=_optional_bool(
                output_payload.get("show_match"), "output.show_match", base.output.show_match
            ),
            show_no_match=_optional_bool(
                output_payload.get("show_no_match"),
                "output.show_no_match",
                base.output.show_no_match,
            ),
            diff=_diff_mode(output_payload.get("diff"), "output.diff", base.output.diff),
            diff_opts=diff_opts,
            debug_level=base.output.debug_level,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: RunConfig, overrides: CliOverrides) -> RunConfig:
    """Apply command-line values at highest precedence."""
    match = MatchConfig(
        strip_components=_optional_non_negative_int(
            overrides.strip_components,
            "overrides.strip_components",
            config.match.strip_components,
        ),
        ignore=_optional_pattern(overrides.ignore, "overrides.ignore", config.match.ignore),
        limit=_optional_positive_int(overrides.limit, "overrides.limit", config.match.limit),
        commit=overrides.commit if overrides.commit is not None else config.match.commit,
        rev_args=overrides.rev_args or config.match.rev_args,
    )
    output = OutputConfig(
        sort=overrides.sort if overrides.sort is not None else config.output.sort,
        show_match=(
            overrides.show_match if overrides.show_match is not None else config.output.show_match
        ),
        show_no_match=(
            overrides.show_no_match
            if overrides.show_no_match is not None
            else config.output.show_no_match
        ),
        diff=_diff_mode(overrides.diff, "overrides.diff", config.output.diff),
        diff_opts=(
            overrides.diff_opts if overrides.diff_opts is not None else config.output.diff_opts
        ),
        debug_level=_optional_non_negative_int(
            overrides.debug_level, "overrides.debug_level", config.output.debug_level
        ),
    )
    audit_log = overrides.audit_log or config.audit_log
    return RunConfig(
        archive=config.archive,
        repo_root=config.repo_root,
        audit_log=audit_log.resolve() if audit_log is not None else None,
        match=match,
        output=output,
    )


def load_effective_config(
    archive: Path, repo_root: Path, overrides: CliOverrides | None = None
) -> RunConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    base = default_config(archive, repo_root)
    payload = load_repo_config_file(base.repo_root)
    return merge_config(base, payload, overrides or CliOverrides())
