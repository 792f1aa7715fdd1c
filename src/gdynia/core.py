"""Build orchestration for single-file widget documents."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, cast

from anyio import Path as APath

from gdynia.bundler import BundleConfig, Esbuild
from gdynia.discovery import WidgetEntry, discover_entries, resolve_css
from gdynia.entry import synthesize
from gdynia.output import cleanup, inline, materialize, version_tag

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from gdynia.protocol import Bundler


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Forge:
    """Builds every allow-listed widget under `src` into inlined HTML documents in `output`."""

    src: Path
    output: Path
    widgets: Collection[str]
    version: str
    tag: str = field(init=False)
    global_css: Sequence[Path] = field(default=(), kw_only=True)
    bundler: Bundler | None = field(default=None, kw_only=True)
    minify: bool = field(default=True, kw_only=True)
    options: Mapping[str, str] = field(default_factory=dict, kw_only=True)

    def __post_init__(self) -> None:
        """Validate required paths and compute the release tag shared by every entry."""
        if not self.src.is_dir():
            msg = f"The source directory {self.src} does not exist"
            raise ValueError(msg)

        if not self.version:
            msg = "A release version is required"
            raise ValueError(msg)

        if isinstance(self.widgets, str):
            msg = f"The widgets must be a collection of names, not a string (i.e. {self.widgets!r})"
            raise ValueError(msg)

        object.__setattr__(self, "src", self.src.resolve())
        object.__setattr__(self, "output", self.output.resolve())
        object.__setattr__(self, "widgets", frozenset(self.widgets))
        object.__setattr__(self, "tag", version_tag(self.version))
        if self.bundler is None:
            object.__setattr__(self, "bundler", Esbuild(root=self.src.parent))

    def entries(self) -> list[WidgetEntry]:
        return [resolve_css(entry, self.global_css) for entry in discover_entries(self.src, self.widgets)]

    async def __call__(self) -> list[Path]:
        """Build all entries one at a time, stopping at the first failure."""
        await APath(self.output).mkdir(parents=True, exist_ok=True)

        queue: asyncio.Queue[WidgetEntry] = asyncio.Queue()
        for entry in self.entries():
            queue.put_nowait(entry)

        logger.info("Building %d widget(s) at release %s (tag %s)", queue.qsize(), self.version, self.tag)
        built: list[Path] = []
        while not queue.empty():
            entry = queue.get_nowait()
            try:
                built.append(await self._build(entry))
            except Exception:
                logger.error("Build aborted at widget %s", entry.name)  # noqa: TRY400
                raise
            finally:
                queue.task_done()
        return built

    async def _build(self, entry: WidgetEntry) -> Path:
        logger.info("Building %s", entry.name)
        bundler = cast("Bundler", self.bundler)
        source = synthesize(entry, await bundler.exports(name=entry.name, entry=entry.path))
        config = BundleConfig.for_entry(entry.name, self.output, minify=self.minify, options=self.options)

        await bundler.bundle(source=source, resolve_dir=entry.directory, config=config)

        await materialize(self.output, {entry.name}, tag=self.tag)
        _, stable = await inline(entry.name, self.output, tag=self.tag)
        await cleanup(entry.name, self.output, tag=self.tag)
        return stable
