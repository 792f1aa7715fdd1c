from __future__ import annotations

import json
import re
import shutil
from pathlib import Path

import pytest

from gdynia.bundler import BundleConfig

_IMPORT = re.compile(r'^import (".*");$', re.MULTILINE)

FIXTURE_EXPORTS = {
    "pizzaz": frozenset({"App", "toppings"}),
    "todo": frozenset({"default", "title"}),
    "other": frozenset({"default"}),
    "broken": frozenset({"Widget"}),
}


class FakeBundler:
    """Writes `name.js`/`name.css` from the synthetic source instead of running esbuild."""

    def __init__(self, *, fail: set[str] | None = None, css: bool = True) -> None:
        self.calls: list[tuple[str, str]] = []
        self.probed: list[str] = []
        self.fail = fail or set()
        self.css = css

    async def exports(self, *, name: str, entry: Path) -> frozenset[str]:
        _ = entry
        self.probed.append(name)
        return FIXTURE_EXPORTS[name]

    async def bundle(self, *, source: str, resolve_dir: Path, config: BundleConfig) -> None:
        _ = resolve_dir
        self.calls.append((config.name, source))
        if config.name in self.fail:
            msg = f"fake bundler failed for {config.name}"
            raise RuntimeError(msg)

        stylesheets = [Path(json.loads(match)) for match in _IMPORT.findall(source)]
        config.js_path.write_text(f"console.log({config.name!r});\n", encoding="utf-8")
        if self.css:
            config.css_path.write_text(
                "".join(path.read_text(encoding="utf-8") for path in stylesheets),
                encoding="utf-8",
            )


@pytest.fixture
def fixture_project_path():
    return Path(__file__).parent / "fixtures" / "project"


@pytest.fixture
def project_dir(tmp_path, fixture_project_path):
    dest = tmp_path / "project"
    shutil.copytree(fixture_project_path, dest)
    return dest


@pytest.fixture
def src_dir(project_dir):
    return project_dir / "src"


@pytest.fixture
def output_dir(project_dir):
    return project_dir / "assets"


@pytest.fixture
def fake_bundler():
    return FakeBundler()


@pytest.fixture
def bundler_factory():
    return FakeBundler
