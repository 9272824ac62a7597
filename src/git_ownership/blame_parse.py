from __future__ import annotations

import dataclasses
from typing import Iterable

from .errors import InvalidLineCount, MalformedRecord
from .models import Hunk

_EXPECT_HEADER = "expect-header"
_HEADER_PENDING = "header-pending"
_IN_HUNK = "in-hunk"

_AUTHOR_PREFIX = "author "
_COMMITTER_PREFIX = "committer "


def _parse_line_count(value: str, *, path: str, line_no: int, line: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise InvalidLineCount("line count is not an integer", path=path, line_no=line_no, line=line) from None
    if n < 0:
        raise InvalidLineCount("line count is negative", path=path, line_no=line_no, line=line)
    return n


class _PorcelainScanner:
    """
    Line-at-a-time reader for `git blame --porcelain` output.

    A group header is `<sha> <orig> <final> <count>`; lines inside a group repeat
    the header without the count. The `author` block appears only the first time a
    commit shows up in one blame run, so a 4-field header followed by anything else
    is a continuation of a commit that was already introduced.
    """

    def __init__(self, *, path: str, use_committer: bool) -> None:
        self.path = path
        self.use_committer = use_committer
        self.hunks: list[Hunk] = []
        self._state = _EXPECT_HEADER
        self._line_no = 0
        self._pending: tuple[str, int] | None = None
        self._last_new: int | None = None

    def _malformed(self, message: str, line: str) -> MalformedRecord:
        return MalformedRecord(message, path=self.path, line_no=self._line_no, line=line)

    def _flush_pending(self, contributor_name: str | None) -> None:
        assert self._pending is not None
        sha, count = self._pending
        self._pending = None
        self.hunks.append(Hunk(commit_hash=sha, contributor_name=contributor_name, line_count=count))
        if contributor_name is not None:
            self._last_new = len(self.hunks) - 1

    def feed(self, raw_line: str) -> None:
        line = raw_line.rstrip("\r\n")
        self._line_no += 1
        if not line:
            return

        if line.startswith("\t"):
            if self._state == _HEADER_PENDING:
                self._flush_pending(None)
            self._state = _EXPECT_HEADER
            return

        if self._state == _EXPECT_HEADER:
            if self._line_no == 1 and line.startswith(_AUTHOR_PREFIX):
                # stream starts inside a metadata block; its header is not ours
                self._state = _IN_HUNK
                return
            if line.startswith(_AUTHOR_PREFIX):
                raise self._malformed("author line without a group header", line)
            fields = line.split()
            if len(fields) == 4:
                count = _parse_line_count(fields[3], path=self.path, line_no=self._line_no, line=line)
                self._pending = (fields[0], count)
                self._state = _HEADER_PENDING
            elif len(fields) == 3:
                self._state = _IN_HUNK
            else:
                raise self._malformed("unexpected header shape", line)
            return

        if self._state == _HEADER_PENDING:
            self._state = _IN_HUNK
            if line.startswith(_AUTHOR_PREFIX):
                self._flush_pending(line[len(_AUTHOR_PREFIX) :])
                return
            self._flush_pending(None)

        # metadata lines inside a group (author-mail, summary, filename, boundary, ...)
        if line.startswith(_AUTHOR_PREFIX):
            raise self._malformed("author line not preceded by a 4-field header", line)
        if self.use_committer and line.startswith(_COMMITTER_PREFIX) and self._last_new is not None:
            idx = self._last_new
            self.hunks[idx] = dataclasses.replace(
                self.hunks[idx],
                contributor_name=line[len(_COMMITTER_PREFIX) :],
                overrides_name=True,
            )

    def finish(self) -> list[Hunk]:
        if self._state == _HEADER_PENDING:
            self._flush_pending(None)
        self._state = _EXPECT_HEADER
        return self.hunks


def parse_blame_porcelain(output: str | Iterable[str], *, path: str = "", use_committer: bool = False) -> list[Hunk]:
    lines = output.split("\n") if isinstance(output, str) else output
    scanner = _PorcelainScanner(path=path, use_committer=use_committer)
    for line in lines:
        scanner.feed(line)
    return scanner.finish()
