"""Widget entry discovery and stylesheet resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

logger = logging.getLogger(__name__)

ENTRY_NAMES: Final[frozenset[str]] = frozenset({"index.tsx", "index.jsx"})
CSS_SUFFIXES: Final[frozenset[str]] = frozenset({".css", ".pcss", ".scss", ".sass"})
_IGNORED_DIRS: Final[frozenset[str]] = frozenset({"node_modules"})


class DuplicateEntryError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class WidgetEntry:
    """A widget entry module and the stylesheets bundled with it."""

    name: str
    path: Path
    css: tuple[Path, ...] = ()

    @property
    def directory(self) -> Path:
        return self.path.parent


def discover_entries(src: Path, widgets: Collection[str]) -> list[WidgetEntry]:
    """Find `index.tsx`/`index.jsx` entries under `src` whose directory name is allow-listed."""
    src = src.resolve()
    entries: list[WidgetEntry] = []
    seen: dict[str, Path] = {}

    candidates = sorted(
        (
            path
            for path in src.rglob("index.*")
            if path.name in ENTRY_NAMES
            and path.is_file()
            and not _IGNORED_DIRS.intersection(path.relative_to(src).parts)
        ),
        key=lambda path: path.relative_to(src).as_posix(),
    )
    for path in candidates:
        name = path.parent.name
        if name not in widgets:
            logger.debug("Skipping %s: %s is not an allowed widget", path, name)
            continue

        if name in seen:
            msg = f"The widget {name!r} is defined twice (i.e. {seen[name]} and {path})"
            raise DuplicateEntryError(msg)

        seen[name] = path
        entries.append(WidgetEntry(name=name, path=path))

    for missing in sorted(set(widgets) - seen.keys()):
        logger.warning("No entry found for widget %s under %s", missing, src)

    return entries


def existing_css(paths: Iterable[Path]) -> tuple[Path, ...]:
    return tuple(path.resolve() for path in paths if path.is_file())


def local_css(directory: Path) -> tuple[Path, ...]:
    """Stylesheets under `directory`, excluding CSS modules (`*.module.*`)."""
    return tuple(
        sorted(
            (
                path
                for path in directory.rglob("*")
                if path.suffix in CSS_SUFFIXES and ".module." not in path.name and path.is_file()
            ),
            key=lambda path: path.relative_to(directory).as_posix(),
        ),
    )


def resolve_css(entry: WidgetEntry, global_css: Iterable[Path]) -> WidgetEntry:
    # Global stylesheets come first so entry-local rules can override them.
    return replace(entry, css=(*existing_css(global_css), *local_css(entry.directory)))
