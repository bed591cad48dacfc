"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt

from mdsite.config import SiteConfig
from mdsite.core.models import LanguageContext, PageNode, Site


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="site")
def site_fixture():
    return Site(config=SiteConfig(title="Test Site"), language=LanguageContext(lang="en-us", name="English"))


@pytest.fixture(name="make_page")
def make_page_fixture(site):
    """Build an ordinary page node routed under its section."""
    def _make(slug: str, section: str = "", **fields) -> PageNode:
        segments = [s for s in (section, slug) if s]
        fields.setdefault("title", slug.title())
        return PageNode(
            kind="page",
            rel_permalink="/" + "/".join(segments),
            output_rel_path="/".join([*segments, "index.html"]),
            section=section,
            type=section or "page",
            slug=slug,
            site=site,
            **fields,
        )
    return _make
