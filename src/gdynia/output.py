"""Versioning, inlining and cleanup of compiled widget outputs."""

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Final

from anyio import Path as APath

from gdynia.render import ENV

if TYPE_CHECKING:
    from collections.abc import Collection

logger = logging.getLogger(__name__)

TAG_LENGTH: Final[int] = 4
_COMPILED_SUFFIXES: Final[frozenset[str]] = frozenset({".js", ".css"})
_SCRIPT_CLOSE: Final = re.compile(r"</(script)", re.IGNORECASE)


class MissingOutputError(FileNotFoundError):
    pass


def version_tag(version: str) -> str:
    """Short release tag for `version`; the compiled content never affects it."""
    return hashlib.sha256(version.encode("utf-8")).hexdigest()[:TAG_LENGTH]


async def read_package_version(root: Path) -> str:
    path = APath(root / "package.json")
    if not await path.exists():
        msg = f"The package manifest {path} does not exist"
        raise ValueError(msg)

    version = json.loads(await path.read_text(encoding="utf-8")).get("version")
    if not isinstance(version, str) or not version:
        msg = f"The package manifest {path} does not declare a version"
        raise ValueError(msg)
    return version


async def materialize(output: Path, names: Collection[str], *, tag: str) -> list[Path]:
    """Rename freshly compiled `base.ext` files in `output` to `base-tag.ext`."""
    renamed: list[Path] = []
    paths = sorted([path async for path in APath(output).iterdir()], key=str)
    for path in paths:
        if path.suffix not in _COMPILED_SUFFIXES or path.stem not in names:
            continue
        if not await path.is_file():
            continue
        target = path.with_name(f"{path.stem}-{tag}{path.suffix}")
        await path.replace(target)
        logger.debug("Renamed %s to %s", path.name, target.name)
        renamed.append(Path(target))
    return renamed


def escape_script(js: str) -> str:
    """Keep `</script` sequences in compiled JS from closing the inline script element."""
    return _SCRIPT_CLOSE.sub(r"<\\/\1", js)


def _compiled(output: Path, name: str, tag: str) -> tuple[APath, APath]:
    base = APath(output)
    return base / f"{name}-{tag}.js", base / f"{name}-{tag}.css"


async def inline(name: str, output: Path, *, tag: str) -> tuple[Path, Path]:
    """Fuse the compiled JS and CSS of `name` into its versioned and stable HTML documents."""
    js_path, css_path = _compiled(output, name, tag)
    for path in (js_path, css_path):
        if not await path.exists():
            msg = f"Compiled output for {name} not found (i.e. {path}). Has the bundler been run?"
            raise MissingOutputError(msg)

    html = ENV.render_template(
        "template.html",
        name=name,
        js=escape_script(await js_path.read_text(encoding="utf-8")),
        css=await css_path.read_text(encoding="utf-8"),
    )

    base = APath(output)
    versioned, stable = base / f"{name}-{tag}.html", base / f"{name}.html"
    for path in (versioned, stable):
        await path.write_text(html, encoding="utf-8")
    logger.info("Wrote %s and %s", versioned.name, stable.name)
    return Path(versioned), Path(stable)


async def cleanup(name: str, output: Path, *, tag: str) -> None:
    for path in _compiled(output, name, tag):
        await path.unlink(missing_ok=True)
