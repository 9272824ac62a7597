from __future__ import annotations

from typing import Iterable, Iterator

from .models import CommitRecord, Hunk


class CommitLedger:
    """
    Commit hash -> CommitRecord, accumulated across files.

    Every operation is additive (line counts sum, file sets union, an empty name is
    backfilled), so folding files in any order, or merging per-file ledgers in any
    tree shape, ends in the same state.
    """

    def __init__(self) -> None:
        self._commits: dict[str, CommitRecord] = {}

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, commit_hash: object) -> bool:
        return commit_hash in self._commits

    def __iter__(self) -> Iterator[CommitRecord]:
        return iter(self._commits.values())

    def get(self, commit_hash: str) -> CommitRecord | None:
        return self._commits.get(commit_hash)

    @property
    def commits(self) -> dict[str, CommitRecord]:
        return self._commits

    def _add(self, commit_hash: str, name: str | None, line_count: int, files: Iterable[str], *, override: bool) -> None:
        cur = self._commits.get(commit_hash)
        if cur is None:
            self._commits[commit_hash] = CommitRecord(
                hash=commit_hash,
                contributor_name=name or "",
                line_count=line_count,
                files=set(files),
            )
            return
        cur.line_count += line_count
        cur.files.update(files)
        if override and name is not None:
            cur.contributor_name = name
        elif not cur.contributor_name and name:
            cur.contributor_name = name

    def fold(self, hunk: Hunk, path: str) -> None:
        self._add(hunk.commit_hash, hunk.contributor_name, hunk.line_count, (path,), override=hunk.overrides_name)

    def fold_file(self, hunks: Iterable[Hunk], path: str) -> None:
        for hunk in hunks:
            self.fold(hunk, path)

    def fold_last_change(self, commit_hash: str, contributor_name: str, path: str) -> None:
        # file with no blame output: attributed to its last change, with no lines
        self._add(commit_hash, contributor_name, 0, (path,), override=False)

    def merge(self, other: CommitLedger) -> None:
        for rec in other:
            self._add(rec.hash, rec.contributor_name, rec.line_count, rec.files, override=False)

    def total_lines(self) -> int:
        return sum(rec.line_count for rec in self._commits.values())
