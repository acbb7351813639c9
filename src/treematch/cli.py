"""Command-line entrypoint: find the commit an archive was built from."""

from __future__ import annotations

import argparse
import shlex
import signal
import sys
from pathlib import Path
from typing import TextIO

from treematch.config import CliOverrides, RunConfig, load_effective_config
from treematch.index import (
    DigestIndex,
    GitBlobHasher,
    IgnoreRule,
    build_archive_index,
    build_commit_index,
)
from treematch.logging import (
    JsonlAuditLogger,
    build_run_id,
    configure_debug,
    get_debug_channel,
    install_toggle_handler,
)
from treematch.report import DiffRenderer, DiffRenderError, ExternalDiffRenderer, Reporter
from treematch.scoring import Comparison, RunResult, TerminationReason, select_best
from treematch.sources import (
    ArchiveExtractor,
    ExtractionError,
    GitRepository,
    HistoryAccessError,
    RepositoryAccessor,
    ScratchDirectory,
    TarArchiveExtractor,
    enumerate_commits,
)

EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_FATAL = 2


class ArgumentError(Exception):
    """Raised for missing or invalid command-line input."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ArgumentError(message)


def tool_warning(message: str, stream: TextIO | None = None) -> None:
    """Print warning messages."""
    print(f"Warning: {message}", file=stream or sys.stderr)


def tool_error(message: str, stream: TextIO | None = None) -> None:
    """Print error messages."""
    print(f"Error: {message}", file=stream or sys.stderr)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a matching run."""
    parser = _ArgumentParser(
        prog="treematch",
        description="Find the commit whose tree matches the files in an archive.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s project-1.2.tar.gz                  # scan full history from HEAD
  %(prog)s project-1.2.tar.gz v1.1..v1.3       # scan a revision range
  %(prog)s project-1.2.tar.gz -- --all src/    # forward dash options to git log
  %(prog)s project-1.2.tar.gz --commit=abc123 --diff-line
        """,
    )
    parser.add_argument("archive", nargs="?", help="Archive (tarball) to identify")
    parser.add_argument(
        "rev_args",
        nargs="*",
        help="Extra arguments forwarded to the history query (revisions, paths)",
    )
    parser.add_argument("--repo", default=".", help="Repository root (default: current directory)")
    parser.add_argument("--ignore", default=None, help="Regex of paths to leave out of scoring")
    parser.add_argument(
        "--strip-components",
        type=int,
        default=None,
        help="Leading path segments removed from archive entries (default: 1)",
    )
    parser.add_argument(
        "--diff", action="store_true", default=None, help="Show full diffs of differing files"
    )
    parser.add_argument(
        "--diff-line",
        action="store_true",
        default=None,
        help="Show one '-removed,+added' line per differing file",
    )
    parser.add_argument(
        "--diff-opt",
        default=None,
        help="Options passed to the external 'diff -u' program; implies --diff",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Give up after this many commits without an exact match",
    )
    parser.add_argument(
        "--show-match", action="store_true", default=None, help="List files that match"
    )
    parser.add_argument(
        "--show-no-match", action="store_true", default=None, help="List files that differ"
    )
    parser.add_argument(
        "--sort",
        action="store_true",
        default=None,
        help="Print all records at the end, ascending by score",
    )
    parser.add_argument("--commit", default=None, help="Only score this commit")
    parser.add_argument(
        "--debug",
        nargs="?",
        type=int,
        const=1,
        default=None,
        metavar="LEVEL",
        help="Print internal diagnostics to stderr (SIGUSR1 toggles them)",
    )
    parser.add_argument("--audit-log", default=None, help="Append JSONL run events to this file")
    return parser


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed arguments into highest-precedence config overrides."""
    diff: str | None = None
    diff_opts: tuple[str, ...] | None = None
    if args.diff_opt is not None:
        diff_opts = tuple(shlex.split(args.diff_opt))
    if args.diff_line:
        diff = "line"
    elif args.diff or diff_opts is not None:
        diff = "full"
    return CliOverrides(
        strip_components=args.strip_components,
        ignore=args.ignore,
        limit=args.limit,
        commit=args.commit,
        rev_args=tuple(args.rev_args),
        sort=args.sort,
        show_match=args.show_match,
        show_no_match=args.show_no_match,
        diff=diff,
        diff_opts=diff_opts,
        debug_level=args.debug,
        audit_log=Path(args.audit_log) if args.audit_log is not None else None,
    )


def split_argv(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first `--`; the tail is forwarded to git untouched.

    A bare --debug is pinned to level 1 so it never swallows the archive path.
    """
    options: list[str] = []
    for index, item in enumerate(argv):
        if item == "--":
            return options, argv[index + 1 :]
        options.append("--debug=1" if item == "--debug" else item)
    return options, []


def parse_config(argv: list[str] | None = None) -> RunConfig:
    """Parse argv and load the effective run configuration."""
    parser = build_arg_parser()
    options, forwarded = split_argv(sys.argv[1:] if argv is None else argv)
    args = parser.parse_intermixed_args(options)
    if not args.archive and forwarded:
        args.archive = forwarded.pop(0)
    args.rev_args = [*args.rev_args, *forwarded]
    if not args.archive:
        raise ArgumentError("the archive path is required")
    try:
        return load_effective_config(
            archive=Path(args.archive),
            repo_root=Path(args.repo),
            overrides=overrides_from_args(args),
        )
    except ValueError as exc:
        raise ArgumentError(str(exc)) from exc


def run_match(
    config: RunConfig,
    *,
    out_stream: TextIO,
    err_stream: TextIO,
    repository: RepositoryAccessor | None = None,
    extractor: ArchiveExtractor | None = None,
    renderer: DiffRenderer | None = None,
) -> int:
    """Run one archive-against-history scan and return the process exit code."""
    debug = get_debug_channel()
    repo = repository or GitRepository(config.repo_root)
    unpacker = extractor or TarArchiveExtractor()
    if renderer is None and config.output.diff_opts:
        renderer = ExternalDiffRenderer(config.output.diff_opts)
    ignore = IgnoreRule(config.match.ignore)
    audit = (
        JsonlAuditLogger(config.audit_log, run_id=build_run_id(config.archive))
        if config.audit_log is not None
        else None
    )
    if audit is not None:
        audit.log("run_start", config=config.to_public_dict())

    with ScratchDirectory() as scratch:
        try:
            file_count = unpacker.extract(
                config.archive, scratch.path, config.match.strip_components
            )
            debug.emit(f"extracted {file_count} files from {config.archive}")
            hasher = GitBlobHasher(repo.object_format())
            archive_index = build_archive_index(
                scratch.path, hasher, ignore, source=str(config.archive)
            )
            debug.emit(f"archive index: {len(archive_index)} files ({hasher.name})")

            reporter = Reporter(
                config.output,
                out_stream,
                archive_root=archive_index.root,
                read_commit_blob=repo.read_blob,
                renderer=renderer,
                debug=debug,
            )

            def index_commit(commit: str) -> DigestIndex:
                index = build_commit_index(repo, commit, ignore)
                debug.emit(f"commit {commit}: {len(index)} tracked files")
                return index

            def on_comparison(comparison: Comparison) -> None:
                reporter.on_comparison(comparison)
                if audit is not None:
                    audit.log_record(comparison.record)

            commits = enumerate_commits(
                repo, commit=config.match.commit, rev_args=config.match.rev_args
            )
            result = select_best(
                archive_index,
                commits,
                index_commit,
                limit=config.match.limit,
                on_comparison=on_comparison,
            )
            reporter.finish(result)
        except ExtractionError as exc:
            return _fatal(exc.message, audit, err_stream)
        except HistoryAccessError as exc:
            return _fatal(f"git: {exc.message}", audit, err_stream)
        except DiffRenderError as exc:
            return _fatal(f"diff: {exc}", audit, err_stream)

    if audit is not None:
        audit.log_result(result)
    return _exit_code(config, result, err_stream)


def _fatal(message: str, audit: JsonlAuditLogger | None, err_stream: TextIO) -> int:
    tool_error(message, err_stream)
    if audit is not None:
        audit.log_fatal(message)
    return EXIT_FATAL


def _exit_code(config: RunConfig, result: RunResult, err_stream: TextIO) -> int:
    if result.records and all(record.compared == 0 for record in result.records):
        tool_warning(
            "no archive path was found in any scanned commit; check --strip-components.",
            err_stream,
        )
    if result.reason is TerminationReason.PERFECT_MATCH:
        return EXIT_MATCH
    if result.reason is TerminationReason.LIMIT_EXCEEDED:
        tool_error(
            f"no exact match within the first {config.match.limit} commits.", err_stream
        )
    elif result.reason is TerminationReason.NO_COMMITS:
        tool_error("no commits to scan.", err_stream)
    else:
        tool_error(f"no exact match in {result.evaluated} commits.", err_stream)
    return EXIT_NO_MATCH


def _raise_system_exit(signum: int, _frame: object) -> None:
    raise SystemExit(128 + signum)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the treematch command."""
    try:
        config = parse_config(argv)
    except ArgumentError as exc:
        build_arg_parser().print_usage(sys.stderr)
        tool_error(exc.message)
        return EXIT_NO_MATCH
    configure_debug(config.output.debug_level)
    install_toggle_handler()
    # Turn SIGTERM into SystemExit so the scratch directory is removed.
    signal.signal(signal.SIGTERM, _raise_system_exit)
    return run_match(config, out_stream=sys.stdout, err_stream=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
