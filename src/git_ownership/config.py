from __future__ import annotations

import argparse
import dataclasses
import json
import os
from pathlib import Path

from .models import FORMAT_CHOICES, ORDER_BY_CHOICES


def default_jobs() -> int:
    return max(1, min(8, (os.cpu_count() or 4)))


@dataclasses.dataclass(frozen=True)
class Settings:
    repository: Path = Path(".")
    revision: str = "HEAD"
    order_by: str = "lines"
    format: str = "tabular"
    use_committer: bool = False
    skip_errors: bool = False
    jobs: int = 1
    quiet: bool = False
    exclude: tuple[str, ...] = ()
    restrict_to: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"Config must be a JSON object: {config_path}")
    return data


def split_csv_args(values: list[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        for part in str(v).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def _str_list(config: dict, key: str) -> list[str]:
    raw = config.get(key) or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise SystemExit(f"Config key {key!r} must be a list of strings, got: {raw!r}")
    return split_csv_args([str(x) for x in raw])


def resolve_settings(args: argparse.Namespace, config: dict) -> Settings:
    """
    Merge CLI flags over config.json values over built-in defaults. Flags left at
    None on the namespace count as "not given".
    """

    def pick(name: str, default: object) -> object:
        v = getattr(args, name, None)
        if v is not None:
            return v
        if name in config and config[name] is not None:
            return config[name]
        return default

    order_by = str(pick("order_by", "lines"))
    if order_by not in ORDER_BY_CHOICES:
        raise SystemExit(f"order_by must be one of {', '.join(ORDER_BY_CHOICES)}, got: {order_by!r}")
    fmt = str(pick("format", "tabular"))
    if fmt not in FORMAT_CHOICES:
        raise SystemExit(f"format must be one of {', '.join(FORMAT_CHOICES)}, got: {fmt!r}")
    try:
        jobs = int(pick("jobs", default_jobs()))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise SystemExit(f"jobs must be an integer, got: {pick('jobs', None)!r}") from None
    if jobs < 1:
        raise SystemExit(f"jobs must be >= 1, got: {jobs}")

    def pick_list(name: str) -> tuple[str, ...]:
        v = getattr(args, name, None)
        if v:
            return tuple(split_csv_args(v))
        return tuple(_str_list(config, name))

    return Settings(
        repository=Path(str(pick("repository", "."))),
        revision=str(pick("revision", "HEAD")),
        order_by=order_by,
        format=fmt,
        use_committer=bool(pick("use_committer", False)),
        skip_errors=bool(pick("skip_errors", False)),
        jobs=jobs,
        quiet=bool(getattr(args, "quiet", False)),
        exclude=pick_list("exclude"),
        restrict_to=pick_list("restrict_to"),
        extensions=pick_list("extensions"),
        languages=pick_list("languages"),
    )
