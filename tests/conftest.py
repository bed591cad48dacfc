"""Root test configuration: site-tree builders shared across unit and integration tests"""

import logging
import os
from pathlib import Path

import pytest

from mdsite.core.models import BuildRequest


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write {relative path: text} under root, creating directories."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture(name="make_site")
def make_site_fixture(tmp_path):
    """Return a builder that writes files into a fresh site dir and returns its BuildRequest."""
    def _make(files: dict[str, str], **request_kwargs) -> BuildRequest:
        write_tree(tmp_path, files)
        return BuildRequest(site_dir=tmp_path, **request_kwargs)
    return _make


@pytest.fixture(autouse=True)
def clear_mdsite_env(monkeypatch):
    """Keep MDSITE_* variables from the developer's shell out of config loading."""
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def mdsite_debug_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="mdsite")
