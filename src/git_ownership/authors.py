from __future__ import annotations

from typing import Iterable

from .models import AuthorRecord, CommitRecord


def aggregate_authors(commits: Iterable[CommitRecord]) -> dict[str, AuthorRecord]:
    # keyed by contributor name; "" collects commits with no known contributor
    agg: dict[str, AuthorRecord] = {}
    for commit in commits:
        name = commit.contributor_name
        cur = agg.get(name)
        if cur is None:
            cur = AuthorRecord(name=name)
            agg[name] = cur
        cur.line_count += commit.line_count
        cur.commit_count += 1
        cur.files.update(commit.files)
    return agg


def total_lines(authors: dict[str, AuthorRecord]) -> int:
    return sum(a.line_count for a in authors.values())
