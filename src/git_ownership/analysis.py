from __future__ import annotations

import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable

from .authors import aggregate_authors
from .blame_parse import parse_blame_porcelain
from .errors import OwnershipError
from .git import blame_porcelain, last_change
from .ledger import CommitLedger
from .models import AggregateConfig, AggregateResult

ProgressFn = Callable[[int, int], None]


def attribute_file(repo: Path, revision: str, path: str, config: AggregateConfig) -> CommitLedger:
    """
    Blame one file into its own ledger. An empty ledger means the file had no
    blame output and no last change to fall back on.
    """
    ledger = CommitLedger()
    lines = blame_porcelain(repo, revision, path)
    if lines:
        ledger.fold_file(parse_blame_porcelain(lines, path=path, use_committer=config.use_committer), path)
        return ledger

    found = last_change(repo, revision, path, use_committer=config.use_committer)
    if found is not None:
        sha, name = found
        ledger.fold_last_change(sha, name, path)
    return ledger


def aggregate_files(
    repo: Path,
    revision: str,
    files: list[str],
    config: AggregateConfig,
    *,
    jobs: int = 1,
    progress: ProgressFn | None = None,
) -> AggregateResult:
    ledger = CommitLedger()
    skipped: list[str] = []
    errors: list[str] = []
    total = len(files)

    def collect(path: str, part: CommitLedger) -> None:
        if len(part) == 0:
            skipped.append(path)
            return
        ledger.merge(part)

    def failed(path: str, e: Exception) -> None:
        if not config.skip_errors:
            raise e
        errors.append(f"{path}: {e}")

    if jobs <= 1 or total <= 1:
        for i, path in enumerate(files, start=1):
            try:
                part = attribute_file(repo, revision, path, config)
            except (OwnershipError, subprocess.TimeoutExpired) as e:
                failed(path, e)
            else:
                collect(path, part)
            if progress is not None:
                progress(i, total)
    else:
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            futs = {ex.submit(attribute_file, repo, revision, path, config): path for path in files}
            try:
                for i, fut in enumerate(as_completed(futs), start=1):
                    path = futs[fut]
                    try:
                        part = fut.result()
                    except (OwnershipError, subprocess.TimeoutExpired) as e:
                        failed(path, e)
                    else:
                        collect(path, part)
                    if progress is not None:
                        progress(i, total)
            except BaseException:
                for f in futs:
                    f.cancel()
                raise

    skipped.sort()
    errors.sort()
    return AggregateResult(
        authors=aggregate_authors(ledger),
        commits=ledger.commits,
        files_total=total,
        files_skipped=skipped,
        errors=errors,
    )
