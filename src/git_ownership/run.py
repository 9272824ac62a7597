from __future__ import annotations

import sys

from .analysis import aggregate_files
from .authors import total_lines
from .config import Settings
from .errors import OwnershipError
from .git import get_repo_toplevel, list_files
from .models import AggregateConfig
from .paths import build_file_filter
from .ranking import rank_authors
from .render import render


def _note(msg: str) -> None:
    print(msg, file=sys.stderr)


def run_ownership(settings: Settings) -> int:
    repo = settings.repository.resolve()
    if not repo.is_dir() or get_repo_toplevel(repo) is None:
        _note(f"Not a git repository: {repo}")
        return 2

    file_filter, unknown_languages = build_file_filter(
        exclude=list(settings.exclude),
        restrict_to=list(settings.restrict_to),
        extensions=list(settings.extensions),
        languages=list(settings.languages),
    )
    for name in unknown_languages:
        _note(f"Warning: unknown language {name!r} ignored.")

    try:
        all_files = list_files(repo, settings.revision)
    except OwnershipError as e:
        _note(f"error: {e}")
        return 2
    files = file_filter.apply(all_files)

    if not settings.quiet:
        _note(f"Blaming {len(files)} of {len(all_files)} files at {settings.revision} (jobs={settings.jobs})...")

    def progress(done: int, total: int) -> None:
        if settings.quiet:
            return
        if done % 100 == 0 or done == total:
            _note(f"Blamed {done}/{total} files...")

    try:
        result = aggregate_files(
            repo,
            settings.revision,
            files,
            AggregateConfig(use_committer=settings.use_committer, skip_errors=settings.skip_errors),
            jobs=settings.jobs,
            progress=progress,
        )
    except OwnershipError as e:
        _note(f"error: {e}")
        return 2

    for err in result.errors:
        _note(f"Skipped {err}")
    if result.files_skipped and not settings.quiet:
        _note(f"Note: {len(result.files_skipped)} files had no attributable history.")
    if not settings.quiet:
        _note(f"Attributed {total_lines(result.authors)} lines to {len(result.authors)} contributors.")

    ranked = rank_authors(result.authors.values(), settings.order_by)
    print(render(ranked, settings.format))

    if not files:
        _note("No files matched the given filters.")
        return 2
    return 0
