from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

from git_ownership import analysis
from git_ownership.analysis import aggregate_files, attribute_file
from git_ownership.errors import GitCommandError, InvalidLineCount
from git_ownership.git import blame_porcelain, last_change, list_files
from git_ownership.models import AggregateConfig
from git_ownership.ranking import rank_authors


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _commit(repo: Path, *, author: str, committer: str, date: str, message: str) -> str:
    env = os.environ.copy()
    env.update(
        {
            "GIT_AUTHOR_NAME": author,
            "GIT_AUTHOR_EMAIL": f"{author.lower()}@example.com",
            "GIT_COMMITTER_NAME": committer,
            "GIT_COMMITTER_EMAIL": f"{committer.lower()}@example.com",
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_DATE": date,
        }
    )
    _run(["git", "add", "-A"], cwd=repo, env=env)
    _run(["git", "-c", "commit.gpgsign=false", "commit", "-q", "-m", message], cwd=repo, env=env)
    return _run(["git", "rev-parse", "HEAD"], cwd=repo).strip()


def _init_repo(repo: Path) -> dict[str, str]:
    """
    c1  Alice (committed by Carl)  a.go, 5 lines
    c2  Bob                        b.txt 3 lines, c.txt 7 lines
    c3  Carol (committed by Dave)  new.txt, empty
    c4  Bob                        rewrites line 2 of a.go
    """
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-q"], cwd=repo)

    (repo / "a.go").write_text("".join(f"line {i}\n" for i in range(1, 6)), encoding="utf-8")
    c1 = _commit(repo, author="Alice", committer="Carl", date="2025-01-01T00:00:00Z", message="a")

    (repo / "b.txt").write_text("b1\nb2\nb3\n", encoding="utf-8")
    (repo / "c.txt").write_text("".join(f"c{i}\n" for i in range(7)), encoding="utf-8")
    c2 = _commit(repo, author="Bob", committer="Bob", date="2025-01-02T00:00:00Z", message="b and c")

    (repo / "new.txt").write_text("", encoding="utf-8")
    c3 = _commit(repo, author="Carol", committer="Dave", date="2025-01-03T00:00:00Z", message="empty")

    (repo / "a.go").write_text("line 1\nchanged 2\nline 3\nline 4\nline 5\n", encoding="utf-8")
    c4 = _commit(repo, author="Bob", committer="Bob", date="2025-01-04T00:00:00Z", message="edit a")
    return {"c1": c1, "c2": c2, "c3": c3, "c4": c4}


def _totals(result) -> dict[str, tuple[int, int, int]]:
    return {n: (a.line_count, a.commit_count, a.file_count) for n, a in result.authors.items()}


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    r = tmp_path / "repo"
    _init_repo(r)
    return r


def test_list_files_and_empty_blame(repo: Path) -> None:
    assert list_files(repo, "HEAD") == ["a.go", "b.txt", "c.txt", "new.txt"]
    assert blame_porcelain(repo, "HEAD", "new.txt") == []
    assert blame_porcelain(repo, "HEAD", "b.txt")[1] == "author Bob"


def test_last_change_follows_attribution_mode(tmp_path: Path) -> None:
    r = tmp_path / "repo"
    shas = _init_repo(r)
    assert last_change(r, "HEAD", "new.txt") == (shas["c3"], "Carol")
    assert last_change(r, "HEAD", "new.txt", use_committer=True) == (shas["c3"], "Dave")
    assert last_change(r, "HEAD", "missing.txt") is None


def test_aggregate_by_author(repo: Path) -> None:
    result = aggregate_files(repo, "HEAD", list_files(repo, "HEAD"), AggregateConfig())

    assert _totals(result) == {
        "Alice": (4, 1, 1),
        "Bob": (11, 2, 3),
        "Carol": (0, 1, 1),
    }
    assert result.files_total == 4
    assert result.files_skipped == []
    assert result.errors == []
    assert sum(c.line_count for c in result.commits.values()) == 15


def test_aggregate_by_committer(repo: Path) -> None:
    result = aggregate_files(repo, "HEAD", list_files(repo, "HEAD"), AggregateConfig(use_committer=True))
    assert _totals(result) == {
        "Carl": (4, 1, 1),
        "Bob": (11, 2, 3),
        "Dave": (0, 1, 1),
    }


def test_ranking_of_real_repo(repo: Path) -> None:
    authors = aggregate_files(repo, "HEAD", list_files(repo, "HEAD"), AggregateConfig()).authors.values()
    assert [a.name for a in rank_authors(authors, "lines")] == ["Bob", "Alice", "Carol"]
    assert [a.name for a in rank_authors(authors, "commits")] == ["Bob", "Alice", "Carol"]
    assert [a.name for a in rank_authors(authors, "files")] == ["Bob", "Alice", "Carol"]


def test_older_revision(tmp_path: Path) -> None:
    r = tmp_path / "repo"
    shas = _init_repo(r)
    result = aggregate_files(r, shas["c2"], list_files(r, shas["c2"]), AggregateConfig())
    assert _totals(result) == {"Alice": (5, 1, 1), "Bob": (10, 1, 2)}


def test_parallel_matches_sequential(repo: Path) -> None:
    files = list_files(repo, "HEAD")
    seen: list[tuple[int, int]] = []
    seq = aggregate_files(repo, "HEAD", files, AggregateConfig(), jobs=1)
    par = aggregate_files(repo, "HEAD", files, AggregateConfig(), jobs=4, progress=lambda i, n: seen.append((i, n)))
    assert _totals(par) == _totals(seq)
    assert {n: a.files for n, a in par.authors.items()} == {n: a.files for n, a in seq.authors.items()}
    assert seen[-1] == (4, 4)


def test_attribute_file_of_unknown_path_is_empty(repo: Path) -> None:
    assert len(attribute_file(repo, "HEAD", "new.txt", AggregateConfig())) == 1
    with pytest.raises(GitCommandError):
        attribute_file(repo, "HEAD", "missing.txt", AggregateConfig())


def test_file_without_blame_or_history_is_skipped(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(analysis, "last_change", lambda *a, **k: None)
    result = aggregate_files(repo, "HEAD", ["new.txt", "b.txt"], AggregateConfig())
    assert result.files_skipped == ["new.txt"]
    assert _totals(result) == {"Bob": (3, 1, 1)}


def _break_blame_for(path: str, monkeypatch: pytest.MonkeyPatch) -> None:
    real = analysis.blame_porcelain

    def fake(repo: Path, revision: str, p: str) -> list[str]:
        if p == path:
            return ["0123abc 1 1 many", "author Mallory", "\tbroken"]
        return real(repo, revision, p)

    monkeypatch.setattr(analysis, "blame_porcelain", fake)


@pytest.mark.parametrize("jobs", [1, 3])
def test_parse_error_propagates_by_default(repo: Path, monkeypatch: pytest.MonkeyPatch, jobs: int) -> None:
    _break_blame_for("b.txt", monkeypatch)
    with pytest.raises(InvalidLineCount) as exc:
        aggregate_files(repo, "HEAD", list_files(repo, "HEAD"), AggregateConfig(), jobs=jobs)
    assert exc.value.path == "b.txt"


@pytest.mark.parametrize("jobs", [1, 3])
def test_parse_error_skipped_when_asked(repo: Path, monkeypatch: pytest.MonkeyPatch, jobs: int) -> None:
    _break_blame_for("b.txt", monkeypatch)
    result = aggregate_files(repo, "HEAD", list_files(repo, "HEAD"), AggregateConfig(skip_errors=True), jobs=jobs)

    assert len(result.errors) == 1
    assert result.errors[0].startswith("b.txt: ")
    assert "Mallory" not in result.authors
    assert _totals(result)["Bob"] == (8, 2, 2)


def test_content_with_form_feeds_and_carriage_returns(tmp_path: Path) -> None:
    r = tmp_path / "repo"
    r.mkdir()
    _run(["git", "init", "-q"], cwd=r)
    (r / "COPYING").write_bytes(
        b"one\n\x0cdeadbeef 1 1 99\nthree\r\nfour\rcafe 3 3 7\n\xe2\x80\xa8beef 1 1 5\xc2\x85\x1cx\n"
    )
    _commit(r, author="Alice", committer="Alice", date="2025-01-01T00:00:00Z", message="license")

    result = aggregate_files(r, "HEAD", list_files(r, "HEAD"), AggregateConfig())
    assert _totals(result) == {"Alice": (5, 1, 1)}
    assert len(result.commits) == 1


def test_submodule_gitlinks_are_not_blamed(tmp_path: Path) -> None:
    sub = tmp_path / "sub"
    sub.mkdir()
    _run(["git", "init", "-q"], cwd=sub)
    (sub / "lib.txt").write_text("lib\n", encoding="utf-8")
    _commit(sub, author="Dana", committer="Dana", date="2025-01-01T00:00:00Z", message="lib")

    r = tmp_path / "repo"
    r.mkdir()
    _run(["git", "init", "-q"], cwd=r)
    (r / "a.txt").write_text("a1\na2\n", encoding="utf-8")
    _run(["git", "-c", "protocol.file.allow=always", "submodule", "add", "-q", str(sub), "vendor/sub"], cwd=r)
    _commit(r, author="Alice", committer="Alice", date="2025-01-02T00:00:00Z", message="add sub")

    files = list_files(r, "HEAD")
    assert files == [".gitmodules", "a.txt"]

    gitmodules_lines = (r / ".gitmodules").read_text(encoding="utf-8").count("\n")
    result = aggregate_files(r, "HEAD", files, AggregateConfig())
    assert _totals(result) == {"Alice": (2 + gitmodules_lines, 1, 2)}
    assert result.errors == []
