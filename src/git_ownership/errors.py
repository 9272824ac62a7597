from __future__ import annotations


class OwnershipError(Exception):
    pass


class AttributionError(OwnershipError, ValueError):
    """A single file's blame output could not be parsed."""

    def __init__(self, message: str, *, path: str = "", line_no: int = 0, line: str = "") -> None:
        self.path = path
        self.line_no = line_no
        self.line = line
        where = path or "<blame>"
        if line_no:
            where = f"{where}:{line_no}"
        super().__init__(f"{where}: {message}: {line!r}" if line else f"{where}: {message}")


class MalformedRecord(AttributionError):
    pass


class InvalidLineCount(AttributionError):
    pass


class GitCommandError(OwnershipError, RuntimeError):
    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.git_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip()[:500]
        msg = f"git {' '.join(args)} exited {returncode}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class UnknownOrderKey(OwnershipError, ValueError):
    pass


class UnknownOutputFormat(OwnershipError, ValueError):
    pass
