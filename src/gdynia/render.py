"""Template environment setup for rendering gdynia widget documents."""

from pathlib import Path
from typing import Final

from minijinja import Environment

ENV: Final[Environment] = Environment()

for file in Path(__file__).parent.glob("*.html.j2"):
    ENV.add_template(name=file.stem, source=file.read_text(encoding="utf-8"))
