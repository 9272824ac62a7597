from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import default_jobs, load_config, resolve_settings
from .models import FORMAT_CHOICES, ORDER_BY_CHOICES
from .run import run_ownership


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-ownership",
        description="Per-author line, commit and file counts from git blame at one revision.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--repository", type=Path, default=None, help="Path to the git repository (default: .).")
    parser.add_argument("--revision", type=str, default=None, help="Commit-ish to blame at (default: HEAD).")
    parser.add_argument("--order-by", choices=list(ORDER_BY_CHOICES), default=None, help="Ranking key (default: lines).")
    parser.add_argument(
        "--use-committer",
        action="store_true",
        default=None,
        help="Attribute lines to the committer instead of the author.",
    )
    parser.add_argument("--format", choices=list(FORMAT_CHOICES), default=None, help="Output format (default: tabular).")
    parser.add_argument(
        "--extensions",
        type=str,
        action="append",
        default=None,
        help="Only count files with these extensions, comma separated (e.g. '.go,.md').",
    )
    parser.add_argument(
        "--languages",
        type=str,
        action="append",
        default=None,
        help="Only count files of these languages, comma separated (e.g. 'go,markdown').",
    )
    parser.add_argument(
        "--exclude",
        type=str,
        action="append",
        default=None,
        help="Glob patterns of files to leave out, comma separated (e.g. 'vendor/*,*.lock').",
    )
    parser.add_argument(
        "--restrict-to",
        type=str,
        action="append",
        default=None,
        help="Glob patterns; only files matching at least one are counted.",
    )
    parser.add_argument("--config", type=Path, default=Path(".git-ownership.json"), help="Path to a JSON config file.")
    parser.add_argument("--jobs", type=int, default=None, help=f"Parallel blame jobs (default: {default_jobs()}).")
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        default=None,
        help="Report files whose blame output cannot be parsed and carry on without them.",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output on stderr.")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    settings = resolve_settings(args, config)
    return run_ownership(settings)


if __name__ == "__main__":
    raise SystemExit(main())
