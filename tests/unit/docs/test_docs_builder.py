"""Unit tests for docs/builder.py"""

import pytest

from mdsite.docs.builder import build_docs_site, discover_dirs
from mdsite.docs.config import load_docs_config
from mdsite.docs.links import rewrite_content_link
from mdsite.errors import BuildError


DOCS_YAML = """\
mounts:
  - name: Guide
    source: guide-src
    prefix: /docs/
    repo: https://github.com/acme/proj
"""

FILES = {
    "mdsite.docs.yaml": DOCS_YAML,
    "guide-src/README.md": "# Guide Home\n\n## Table of Contents\n\n- [Setup](guide/setup.md)\n",
    "guide-src/guide/setup.md": "---\ntitle: Setup\n---\nSee [intro](../intro.md).\n",
    "guide-src/intro.md": "# Intro\n",
    "guide-src/deep/empty/notes.md": "---\ntitle: Notes\n---\nNotes.\n",
    "guide-src/draft.md": "---\ndraft: true\n---\nWIP\n",
    "guide-src/img/logo.png": "png",
}


@pytest.fixture(name="build")
def build_fixture(make_site):
    def _build(files=None, **request_kwargs):
        request = make_site(files or FILES, **request_kwargs)
        return request, build_docs_site(request, load_docs_config(request.site_dir))
    return _build


def test_discover_dirs_adds_ancestors():
    assert discover_dirs({"a/b/c"}, {"x"}) == {"", "a", "a/b", "a/b/c", "x"}


def test_mount_tree(build):
    _, site = build()
    assert site.docs_mode
    assert site.title == "Docs"
    assert site.search_file == "search.json"

    root, = site.home.pages
    assert root.kind == "section"
    assert root.title == "Guide"
    assert root.rel_permalink == "/docs"
    assert root.output_rel_path == "docs/index.html"
    assert root.params["dirKey"] == ""
    assert root.params["relPath"] == "README.md"
    assert root.params["editURL"] == "https://github.com/acme/proj/blob/main/guide-src/README.md"
    # nested sections by name, then leaves by title; drafts are skipped
    assert [p.title for p in root.pages] == ["Deep", "Guide", "Intro"]

    deep = root.pages[0]
    assert deep.raw_body == ""
    empty, = deep.pages
    assert empty.title == "Empty"
    assert [p.title for p in empty.pages] == ["Notes"]


def test_leaf_routing_and_ancestry(build):
    _, site = build()
    setup = site.get_page("/docs/guide/setup")
    assert setup.output_rel_path == "docs/guide/setup/index.html"
    assert setup.type == "docs"
    assert setup.section == "docs"
    assert setup.params["mount"] == "Guide"
    assert setup.params["relPath"] == "guide/setup.md"

    guide = site.get_page("/docs/guide")
    assert guide.output_rel_path == "docs/guide/index.html"
    root = site.get_page("/docs")
    assert setup.parent is guide
    assert setup.ancestors == [guide, root, site.home]
    assert rewrite_content_link(setup.link_context, "../intro.md") == "/docs/intro"


def test_assets_nav_and_search(build):
    request, site = build()
    assert (request.output_dir / "docs" / "img" / "logo.png").read_text() == "png"

    mount, = site.docs_mounts
    assert mount.url_prefix == "/docs/"
    assert [(i.title, i.url) for i in mount.nav] == [("Setup", "/docs/guide/setup")]

    searched = {p.rel_permalink for p in site.search_docs}
    assert searched == {"/docs", "/docs/guide/setup", "/docs/intro", "/docs/deep/empty/notes"}


def test_drafts_included_on_request(build):
    _, site = build(build_drafts=True)
    assert site.get_page("/docs/draft") is not None


def test_index_precedence(build):
    files = {**FILES, "guide-src/_index.md": "---\ntitle: Preferred\n---\n", "guide-src/index.md": "# Other\n"}
    _, site = build(files)
    root = site.get_page("/docs")
    assert root.title == "Preferred"
    assert root.params["relPath"] == "_index.md"


def test_home_mount_content(build):
    files = {**FILES, "mdsite.docs.yaml": DOCS_YAML + "homeMount: guide\nsiteName: Handbook\n"}
    _, site = build(files)
    assert site.title == "Handbook"
    assert site.home.title == "Guide"
    assert "Table of Contents" in site.home.raw_body


def test_root_mount_shares_home_output(build):
    files = {
        "mdsite.docs.yaml": "mounts:\n  - source: guide-src\n    prefix: /\n",
        "guide-src/index.md": "# Welcome\n",
        "guide-src/setup.md": "# Setup\n",
    }
    _, site = build(files)
    assert [p.rel_permalink for p in site.all_pages].count("/") == 1
    assert site.get_page("/setup").output_rel_path == "setup/index.html"
    assert site.home.pages[0].title == "Docs"


def test_undecodable_page_raises_build_error(make_site):
    request = make_site(FILES)
    (request.site_dir / "guide-src" / "bad.md").write_bytes(b"\xff\xfe")
    with pytest.raises(BuildError, match="Failed to read .*bad.md"):
        build_docs_site(request, load_docs_config(request.site_dir))
