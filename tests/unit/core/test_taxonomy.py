"""Unit tests for core/taxonomy.py"""

from mdsite.core.taxonomy import TAXONOMIES, build_taxonomy, group_terms


def test_group_terms_slugifies_and_dedupes(make_page):
    """Terms group by slug; a page is listed once per term even if repeated."""
    a = make_page("a", tags=("Go", "go ", "Web Dev"))
    b = make_page("b", tags=("GO",))
    c = make_page("c", tags=("", "  ", "!!!"))
    index = group_terms([a, b, c], TAXONOMIES["tags"])
    assert index == {"go": [a, b], "web-dev": [a]}


def test_build_taxonomy_pages(site, make_page):
    a = make_page("a", "posts", tags=("Go",), date="2024-02-01")
    b = make_page("b", "posts", tags=("Go", "Rust"), date="2024-01-01")
    built = build_taxonomy(site, [a, b], "tags", TAXONOMIES["tags"])

    assert [t.slug for t in built.terms] == ["go", "rust"]
    go = built.terms[0]
    assert go.kind == "term"
    assert go.title == "Go"
    assert go.rel_permalink == "/tags/go"
    assert go.output_rel_path == "tags/go/index.html"
    assert go.params == {"term": "go", "taxonomy": "tags"}
    assert go.pages == [a, b]

    assert built.root.kind == "taxonomy"
    assert built.root.rel_permalink == "/tags"
    assert built.root.output_rel_path == "tags/index.html"
    assert built.root.pages == built.terms
    assert built.root.params == {"taxonomy": "tags"}
    assert site.taxonomies["tags"] == {"go": [a, b], "rust": [b]}


def test_build_taxonomy_without_terms_still_has_root(site, make_page):
    built = build_taxonomy(site, [make_page("a")], "categories", TAXONOMIES["categories"])
    assert built.terms == []
    assert built.root.pages == []
    assert site.taxonomies["categories"] == {}
