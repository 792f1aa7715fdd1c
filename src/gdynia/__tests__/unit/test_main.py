from __future__ import annotations

import logging

from gdynia.__main__ import main
from gdynia.output import version_tag


class _Forge:
    instances: list[_Forge] = []

    def __init__(self, src, output, widgets, version, **kwargs) -> None:
        self.src = src
        self.output = output
        self.widgets = widgets
        self.version = version
        self.kwargs = kwargs
        _Forge.instances.append(self)

    async def __call__(self):
        return []


def test_main_reads_version_from_package_json(project_dir, monkeypatch):
    _Forge.instances.clear()
    monkeypatch.chdir(project_dir)
    monkeypatch.setattr("gdynia.__main__.Forge", _Forge)

    assert main(["--widget", "pizzaz", "--widget", "todo"]) == 0

    (forge,) = _Forge.instances
    assert forge.version == "1.2.3"
    assert forge.widgets == ["pizzaz", "todo"]
    assert [str(path) for path in forge.kwargs["global_css"]] == [str(forge.src / "index.css")]
    assert forge.kwargs["minify"] is True


def test_main_accepts_explicit_release_and_css(project_dir, monkeypatch):
    _Forge.instances.clear()
    monkeypatch.chdir(project_dir)
    monkeypatch.setattr("gdynia.__main__.Forge", _Forge)

    assert main(["--widget", "pizzaz", "--release", "9.9.9", "--global-css", "theme.css", "--no-minify"]) == 0

    (forge,) = _Forge.instances
    assert forge.version == "9.9.9"
    assert [str(path) for path in forge.kwargs["global_css"]] == ["theme.css"]
    assert forge.kwargs["minify"] is False


def test_main_returns_error_for_malformed_entry(project_dir, monkeypatch, caplog):
    monkeypatch.chdir(project_dir)

    with caplog.at_level(logging.ERROR, logger="gdynia"):
        assert main(["--widget", "broken"]) == 1

    assert "broken" in caplog.text
    assert not (project_dir / "assets" / f"broken-{version_tag('1.2.3')}.html").exists()


def test_main_returns_error_without_package_version(tmp_path, monkeypatch):
    (tmp_path / "src").mkdir()
    monkeypatch.chdir(tmp_path)

    assert main(["--widget", "pizzaz"]) == 1
