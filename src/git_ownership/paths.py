from __future__ import annotations

import dataclasses
import fnmatch
import functools
import json
from pathlib import Path

LANGUAGES_FILE = Path(__file__).with_name("languages.json")


@dataclasses.dataclass(frozen=True)
class Language:
    name: str
    type: str = ""
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()


@functools.lru_cache(maxsize=1)
def load_languages() -> dict[str, Language]:
    """Bundled language table, keyed by casefolded name."""
    raw = json.loads(LANGUAGES_FILE.read_text(encoding="utf-8"))
    out: dict[str, Language] = {}
    for item in raw:
        lang = Language(
            name=str(item["name"]),
            type=str(item.get("type") or ""),
            extensions=tuple(item.get("extensions") or ()),
            filenames=tuple(item.get("filenames") or ()),
        )
        out[lang.name.casefold()] = lang
    return out


@dataclasses.dataclass(frozen=True)
class FileFilter:
    exclude_globs: tuple[str, ...] = ()
    restrict_to_globs: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()

    def keep(self, path: str) -> bool:
        p = normalize_path(path)
        if matches_any_glob(p, self.exclude_globs):
            return False
        if self.extensions or self.filenames:
            if not (p.endswith(self.extensions) or p.rsplit("/", 1)[-1] in self.filenames):
                return False
        if self.restrict_to_globs and not matches_any_glob(p, self.restrict_to_globs):
            return False
        return True

    def apply(self, files: list[str]) -> list[str]:
        return [f for f in files if self.keep(f)]


def normalize_path(path: str) -> str:
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p


def matches_any_glob(path: str, globs: tuple[str, ...] | list[str]) -> bool:
    for pat in globs:
        if pat and fnmatch.fnmatchcase(path, pat):
            return True
    return False


def resolve_languages(names: list[str]) -> tuple[tuple[str, ...], tuple[str, ...], list[str]]:
    """
    Resolve language names (case-insensitive) through the bundled table.
    Returns (extensions, filenames, unknown_names).
    """
    table = load_languages()
    exts: list[str] = []
    filenames: list[str] = []
    unknown: list[str] = []
    for name in names:
        lang = table.get(name.strip().casefold())
        if lang is None:
            unknown.append(name)
            continue
        for e in lang.extensions:
            if e not in exts:
                exts.append(e)
        for n in lang.filenames:
            if n not in filenames:
                filenames.append(n)
    return tuple(exts), tuple(filenames), unknown


def build_file_filter(
    *,
    exclude: list[str],
    restrict_to: list[str],
    extensions: list[str],
    languages: list[str],
) -> tuple[FileFilter, list[str]]:
    exts: list[str] = []
    for e in extensions:
        e = e.strip()
        if not e:
            continue
        if not e.startswith("."):
            e = "." + e
        if e not in exts:
            exts.append(e)
    lang_exts, lang_filenames, unknown = resolve_languages(languages)
    for e in lang_exts:
        if e not in exts:
            exts.append(e)
    f = FileFilter(
        exclude_globs=tuple(p for p in exclude if p),
        restrict_to_globs=tuple(p for p in restrict_to if p),
        extensions=tuple(exts),
        filenames=lang_filenames,
    )
    return f, unknown
