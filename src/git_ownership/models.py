from __future__ import annotations

import dataclasses

ORDER_BY_CHOICES = ("lines", "commits", "files")
FORMAT_CHOICES = ("tabular", "csv", "json", "json-lines")


@dataclasses.dataclass(frozen=True)
class Hunk:
    commit_hash: str
    contributor_name: str | None
    line_count: int
    # set for committer-mode names, which replace whatever the ledger holds
    overrides_name: bool = False


@dataclasses.dataclass
class CommitRecord:
    hash: str
    contributor_name: str = ""
    line_count: int = 0
    files: set[str] = dataclasses.field(default_factory=set)


@dataclasses.dataclass
class AuthorRecord:
    name: str = ""
    line_count: int = 0
    commit_count: int = 0
    files: set[str] = dataclasses.field(default_factory=set)

    @property
    def file_count(self) -> int:
        return len(self.files)


@dataclasses.dataclass(frozen=True)
class AggregateConfig:
    use_committer: bool = False
    skip_errors: bool = False


@dataclasses.dataclass
class AggregateResult:
    authors: dict[str, AuthorRecord]
    commits: dict[str, CommitRecord]
    files_total: int
    files_skipped: list[str]  # no blame output and no usable last change
    errors: list[str]
