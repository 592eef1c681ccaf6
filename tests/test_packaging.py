"""Checks on the project metadata."""

import re
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def test_readme_is_the_project_readme():
    pyproject = (ROOT / 'pyproject.toml').read_text(encoding='utf-8')
    readme = re.search(r'^readme = "([^"]+)"', pyproject, re.MULTILINE).group(1)

    assert readme == 'README.md'
    assert (ROOT / readme).is_file()
