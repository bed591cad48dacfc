"""Shared fixtures for docs unit tests"""

import pytest

from mdsite.docs.config import DocsMountConfig


@pytest.fixture(name="mount")
def mount_fixture(tmp_path):
    """A /docs/ mount backed by tmp_path/guide-src with repository metadata."""
    (tmp_path / "guide-src").mkdir()
    return DocsMountConfig(
        name="Guide", source="guide-src", prefix="/docs/",
        repo="https://github.com/acme/proj/", repo_path="docs",
    ).resolve(tmp_path)


@pytest.fixture(name="routes")
def routes_fixture():
    return {
        "index.md": "/docs",
        "overview.md": "/docs/overview",
        "guide/setup.md": "/docs/guide/setup",
    }
