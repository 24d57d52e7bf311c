from __future__ import annotations

import os

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def test_readme_declared_in_pyproject_exists() -> None:
    with open(os.path.join(ROOT, "pyproject.toml"), encoding="utf-8") as fh:
        readme_lines = [line for line in fh if line.strip().startswith("readme")]

    assert readme_lines == ['readme = "README.md"\n']
    assert os.path.isfile(os.path.join(ROOT, "README.md"))
