"""Synthetic entry modules that normalize a widget's export shape."""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection
    from pathlib import Path

    from gdynia.discovery import WidgetEntry


class MalformedEntryError(ValueError):
    pass


class ExportShape(Enum):
    DEFAULT = "default"
    APP = "App"


def export_shape(exports: Collection[str]) -> ExportShape | None:
    """Return which default component a module provides, preferring its own default export."""
    if ExportShape.DEFAULT.value in exports:
        return ExportShape.DEFAULT
    if ExportShape.APP.value in exports:
        return ExportShape.APP
    return None


def _specifier(path: Path) -> str:
    return json.dumps(path.as_posix())


def synthesize(entry: WidgetEntry, exports: Collection[str]) -> str:
    """Build the in-memory module handed to the bundler for `entry`.

    `exports` are the names the entry module actually exports, as reported by the bundler.
    """
    shape = export_shape(exports)
    if shape is None:
        msg = f"The widget {entry.name!r} (i.e. {entry.path}) must export a default component or `App`"
        raise MalformedEntryError(msg)

    target = _specifier(entry.path)
    lines = [f"import {_specifier(css)};" for css in entry.css]
    lines.append(f"export * from {target};")
    if shape is ExportShape.DEFAULT:
        lines.append(f"export {{ default }} from {target};")
    else:
        lines.append(f"export {{ App as default }} from {target};")
    return "\n".join(lines) + "\n"
