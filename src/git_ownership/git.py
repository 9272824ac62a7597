from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from .errors import GitCommandError

DEFAULT_TIMEOUT_S = 300


def run_git(args: list[str], cwd: Path, timeout_s: int = DEFAULT_TIMEOUT_S) -> tuple[int, str, str]:
    # bytes in, decoded by hand: text mode would also turn a lone "\r" inside
    # blamed content into a line break
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        timeout=timeout_s,
    )
    return (
        proc.returncode,
        proc.stdout.decode("utf-8", errors="replace"),
        proc.stderr.decode("utf-8", errors="replace"),
    )


def check_git(args: list[str], cwd: Path, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    code, out, err = run_git(args, cwd=cwd, timeout_s=timeout_s)
    if code != 0:
        raise GitCommandError(args, code, err)
    return out


def split_records(out: str) -> list[str]:
    """Split git output on "\\n" only, dropping the trailing empty record."""
    lines = out.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def get_repo_toplevel(candidate: Path) -> Optional[Path]:
    code, out, _ = run_git(["rev-parse", "--show-toplevel"], cwd=candidate)
    if code != 0:
        return None
    try:
        return Path(out.strip()).resolve()
    except Exception:
        return None


def list_files(repo: Path, revision: str) -> list[str]:
    """
    Blob paths tracked at `revision`. Submodule gitlinks (type "commit") have no
    content of their own to blame and are left out.
    """
    out = check_git(["-c", "core.quotePath=false", "ls-tree", "-r", "-z", revision], cwd=repo)
    files: list[str] = []
    for entry in out.split("\0"):
        if not entry:
            continue
        meta, _, path = entry.partition("\t")
        fields = meta.split()
        if len(fields) >= 2 and fields[1] == "blob":
            files.append(path)
    return files


def blame_porcelain(repo: Path, revision: str, path: str, timeout_s: int = DEFAULT_TIMEOUT_S) -> list[str]:
    out = check_git(["blame", "--porcelain", revision, "--", path], cwd=repo, timeout_s=timeout_s)
    return split_records(out)


def last_change(repo: Path, revision: str, path: str, *, use_committer: bool = False) -> tuple[str, str] | None:
    name_fmt = "%cn" if use_committer else "%an"
    out = check_git(["log", "-1", f"--pretty=format:%H%n{name_fmt}", revision, "--", path], cwd=repo)
    lines = split_records(out)
    if not lines or not lines[0].strip():
        return None
    sha = lines[0].strip()
    name = lines[1] if len(lines) > 1 else ""
    return sha, name
