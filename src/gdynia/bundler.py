from __future__ import annotations

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass, field
from os import environ, name
from pathlib import Path
from subprocess import PIPE
from tempfile import TemporaryDirectory
from typing import TYPE_CHECKING, ClassVar

from anyio import Path as APath

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

_CHUNK_OPTIONS = frozenset({"splitting", "chunk-names", "manual-chunks"})


class BundleError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class BundleConfig:
    """Per-entry bundler configuration, derived from the widget name."""

    name: str
    output: Path
    format: str = "esm"
    minify: bool = True
    splitting: bool = False
    tree_shaking: bool = True
    inline_dynamic_imports: bool = True
    asset_names: str = "[name]-[hash]"
    options: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def for_entry(
        cls,
        name: str,
        output: Path,
        *,
        minify: bool = True,
        options: Mapping[str, str] | None = None,
    ) -> BundleConfig:
        options = dict(options or {})
        stripped = sorted(key for key in options if key in _CHUNK_OPTIONS)
        if stripped:
            logger.debug("Stripping chunk options %s for %s", stripped, name)
        return cls(
            name=name,
            output=output,
            minify=minify,
            options={key: value for key, value in options.items() if key not in _CHUNK_OPTIONS},
        )

    @property
    def js_path(self) -> Path:
        return self.output / f"{self.name}.js"

    @property
    def css_path(self) -> Path:
        return self.output / f"{self.name}.css"


@dataclass(slots=True, kw_only=True)
class Esbuild:
    """Runs the esbuild CLI; the synthetic entry is piped through stdin and never written to disk."""

    root: Path
    file_loaders: ClassVar[tuple[str, ...]] = (
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".svg",
        ".webp",
        ".woff",
        ".woff2",
        ".ttf",
    )

    async def exports(self, *, name: str, entry: Path) -> frozenset[str]:
        with TemporaryDirectory() as tmp_dir_name:
            tmp_dir = Path(tmp_dir_name)
            metafile = APath(tmp_dir / "meta.json")
            await self._run(
                str(entry),
                "--bundle",
                "--format=esm",
                "--packages=external",
                "--jsx=automatic",
                "--log-level=warning",
                f"--outfile={tmp_dir / 'exports.js'}",
                f"--metafile={metafile}",
                *self._loader_arguments(),
                name=name,
                cwd=entry.parent,
            )
            if not await metafile.exists():
                msg = f"esbuild did not produce a metafile for {name}"
                raise BundleError(msg)
            outputs = json.loads(await metafile.read_text(encoding="utf-8")).get("outputs", {})

        return frozenset(
            export
            for output_path, output in outputs.items()
            if output_path.endswith(".js")
            for export in output.get("exports", ())
        )

    async def bundle(self, *, source: str, resolve_dir: Path, config: BundleConfig) -> None:
        await self._run(*self._arguments(config=config), name=config.name, cwd=resolve_dir, stdin=source)

    async def _run(self, *arguments: str, name: str, cwd: Path, stdin: str | None = None) -> None:
        cli_path = self._resolve_cli()
        process = await asyncio.create_subprocess_exec(
            str(cli_path),
            *arguments,
            stdin=PIPE,
            stdout=PIPE,
            stderr=PIPE,
            cwd=cwd,
            env={
                **environ,
                "NODE_PATH": str(self.root / "node_modules"),
            },
        )
        stdout, stderr = await process.communicate(stdin.encode() if stdin is not None else None)

        if process.returncode != 0:
            error_detail = stderr.decode().strip() or stdout.decode().strip() or "unknown esbuild error"
            msg = f"esbuild failed for {name}: {error_detail}"
            raise BundleError(msg)

    def _loader_arguments(self) -> list[str]:
        return ["--loader:.pcss=css", *(f"--loader:{extension}=file" for extension in self.file_loaders)]

    def _arguments(self, *, config: BundleConfig) -> list[str]:
        # esbuild inlines dynamic imports whenever splitting is off.
        if config.splitting or not config.inline_dynamic_imports:
            msg = f"Code splitting is not supported (i.e. {config.name})"
            raise ValueError(msg)

        arguments = [
            "--bundle",
            f"--format={config.format}",
            "--platform=browser",
            "--jsx=automatic",
            f"--sourcefile={config.name}.entry.tsx",
            f"--outfile={config.js_path}",
            f"--tree-shaking={str(config.tree_shaking).lower()}",
            f"--asset-names={config.asset_names}",
            "--log-level=warning",
            *self._loader_arguments(),
        ]
        if config.minify:
            arguments.append("--minify")
        arguments.extend(f"--{key}={value}" for key, value in config.options.items())
        return arguments

    def _resolve_cli(self) -> Path:
        bin_dir = self.root / "node_modules" / ".bin"
        candidates = [bin_dir / "esbuild"]
        if name == "nt":
            candidates = [bin_dir / "esbuild.cmd", bin_dir / "esbuild.exe", *candidates]

        for candidate in candidates:
            if candidate.exists() and candidate.is_file():
                return candidate

        if found := shutil.which("esbuild"):
            return Path(found)

        msg = (
            "esbuild was not found in node_modules/.bin or on PATH. "
            "Install it with `npm install -D esbuild` in your project directory."
        )
        raise OSError(msg)
