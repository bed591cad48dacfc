"""Integration tests for content-mode builds (scan -> graph -> render)"""

import pytest

from mdsite.core.build import build_content_site, build_site, run_build


BLOG = {
    "config.yaml": "title: Test Blog\nbaseURL: https://example.com\n",
    "content/_index.md": "---\ntitle: Blog\n---\nWelcome.\n",
    "content/posts/_index.md": "---\ntitle: Posts\n---\n",
    "content/posts/2024-hello.md": (
        "---\ntitle: Hello\ndate: 2024-01-01\ntags: [Go]\n---\nHello *world*.\n\n<!--more-->\n\nMore.\n"
    ),
    "content/posts/second.md": (
        "---\ntitle: Second\ndate: 2024-02-01\ntags: [go]\ncategories: [News]\n---\nSecond post.\n"
    ),
    "content/posts/wip.md": "---\ntitle: WIP\ndraft: true\ntags: [Go]\n---\nNot yet.\n",
}


def _read(request, rel):
    return (request.output_dir / rel).read_text(encoding="utf-8")


def test_blog_scenario_graph(make_site):
    """Root and section indexes title their list pages; the post routes by file name."""
    request = make_site({
        "content/_index.md": "---\ntitle: Blog\n---\n",
        "content/posts/_index.md": "---\ntitle: Posts\n---\n",
        "content/posts/2024-hello.md": "---\ntitle: Hello\ndate: 2024-01-01\n---\n",
    })
    site = build_site(request)
    assert site.home.title == "Blog"
    assert site.home.output_rel_path == "index.html"
    posts = site.get_page("/posts")
    assert posts.title == "Posts"
    assert posts.output_rel_path == "posts/index.html"
    assert [p.title for p in posts.pages] == ["Hello"]
    hello = site.get_page("/posts/2024-hello")
    assert hello.output_rel_path == "posts/2024-hello/index.html"
    assert hello.parent is posts
    assert hello.ancestors == [posts, site.home]


def test_shared_tag_scenario(make_site):
    request = make_site({
        "content/posts/a.md": "---\ntitle: A\ntags: [Go]\n---\n",
        "content/posts/b.md": "---\ntitle: B\ntags: [Go]\n---\n",
        "content/posts/c.md": "---\ntitle: C\n---\n",
    })
    site = build_content_site(request)
    term = site.get_page("/tags/go")
    assert term.output_rel_path == "tags/go/index.html"
    assert sorted(p.title for p in term.pages) == ["A", "B"]
    root = site.get_page("/tags")
    assert [t.slug for t in root.pages] == ["go"]


def test_run_build_writes_site(make_site):
    request = make_site(BLOG)
    result = run_build(request)
    # home, posts list, 2 posts, 2 terms, 2 taxonomy roots, sitemap, feed, robots
    assert result.pages_built == 11
    assert result.output_dir == request.output_dir

    assert "<h1>Blog</h1>" in _read(request, "index.html")
    posts = _read(request, "posts/index.html")
    assert "<h1>Posts</h1>" in posts
    assert "/posts/wip" not in posts
    hello = _read(request, "posts/2024-hello/index.html")
    assert "<h1>Hello</h1>" in hello
    assert "<em>world</em>" in hello
    assert not (request.output_dir / "posts" / "wip").exists()

    tag = _read(request, "tags/go/index.html")
    assert 'href="/posts/2024-hello"' in tag
    assert 'href="/posts/second"' in tag
    assert "/posts/wip" not in tag
    assert 'href="/tags/go"' in _read(request, "tags/index.html")
    assert (request.output_dir / "categories" / "news" / "index.html").is_file()

    sitemap = _read(request, "sitemap.xml")
    assert "<loc>https://example.com/posts/2024-hello</loc>" in sitemap
    assert "/posts/wip" not in sitemap
    feed = _read(request, "index.xml")
    assert "<title>Second</title>" in feed
    assert "<title>WIP</title>" not in feed
    hello_item, = [item for item in feed.split("<item>") if "<title>Hello</title>" in item]
    description = hello_item.split("<description>")[1].split("</description>")[0]
    assert "<em>world</em>" in description
    assert "More." not in description
    assert _read(request, "robots.txt").endswith("Sitemap: https://example.com/sitemap.xml\n")


def test_drafts_built_on_request(make_site):
    request = make_site(BLOG, build_drafts=True)
    run_build(request)
    assert "<h1>WIP</h1>" in _read(request, "posts/wip/index.html")
    assert 'href="/posts/wip"' in _read(request, "tags/go/index.html")


def test_drafts_left_out_of_lists_and_terms(make_site):
    site = build_content_site(make_site(BLOG))
    assert site.get_page("/posts/wip") is None
    assert sorted(p.title for p in site.get_page("/posts").pages) == ["Hello", "Second"]
    assert sorted(p.title for p in site.get_page("/tags/go").pages) == ["Hello", "Second"]


def test_static_outputs_not_overwritten(make_site):
    request = make_site({**BLOG, "static/sitemap.xml": "custom", "static/robots.txt": "User-agent: none\n"})
    run_build(request)
    assert _read(request, "sitemap.xml") == "custom"
    assert _read(request, "robots.txt") == "User-agent: none\n"


def test_base_url_override(make_site):
    request = make_site(BLOG, base_url="http://localhost:1313")
    run_build(request)
    assert "<loc>http://localhost:1313/posts/second</loc>" in _read(request, "sitemap.xml")


def test_theme_layouts_and_static(make_site):
    """Site layouts override the theme; theme static files are copied, site static wins."""
    request = make_site({
        **BLOG,
        "config.yaml": "title: Themed\ntheme: plain\n",
        "themes/plain/layouts/_default/baseof.html": "<body>{% block main %}{% endblock %}</body>",
        "themes/plain/layouts/_default/single.html": (
            "{% extends baseof %}{% block main %}theme:{{ page.title }}{% endblock %}"
        ),
        "themes/plain/static/css/site.css": "theme",
        "themes/plain/static/logo.txt": "theme",
        "static/logo.txt": "site",
        "layouts/about/single.html": "{% extends baseof %}{% block main %}site:{{ page.title }}{% endblock %}",
        "content/about.md": "---\ntitle: About\ntype: about\n---\n",
    })
    run_build(request)
    assert _read(request, "posts/second/index.html") == "<body>theme:Second</body>"
    assert _read(request, "about/index.html") == "<body>site:About</body>"
    assert _read(request, "css/site.css") == "theme"
    assert _read(request, "logo.txt") == "site"


def test_missing_theme_falls_back_to_builtin(make_site, caplog):
    request = make_site({**BLOG, "config.yaml": "title: T\ntheme: ghost\n"})
    run_build(request)
    assert "ghost" in caplog.text
    assert "<h1>Hello</h1>" in _read(request, "posts/2024-hello/index.html")


@pytest.mark.parametrize("clean, kept", [(True, False), (False, True)])
def test_clean_destination(make_site, clean, kept):
    request = make_site(BLOG, clean_destination_dir=clean)
    stale = request.output_dir / "stale.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old")
    run_build(request)
    assert stale.exists() is kept


def test_leaf_bundle_resources(make_site):
    request = make_site({
        "content/posts/trip/index.md": "---\ntitle: Trip\n---\n![map](map.txt)\n",
        "content/posts/trip/map.txt": "map",
    })
    run_build(request)
    assert _read(request, "posts/trip/index.html").count("<h1>Trip</h1>") == 1
    assert _read(request, "posts/trip/map.txt") == "map"
