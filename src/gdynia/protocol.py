"""Shared protocol definitions for gdynia bundlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from gdynia.bundler import BundleConfig


class Bundler(Protocol):
    """Bundler interface invoked once per widget entry."""

    async def exports(self, *, name: str, entry: Path) -> frozenset[str]:
        """Return the names exported by the module at `entry`, following re-exports."""

    async def bundle(self, *, source: str, resolve_dir: Path, config: BundleConfig) -> None:
        """Compile the synthetic entry source into `config.js_path` and `config.css_path`."""
