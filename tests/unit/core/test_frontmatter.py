"""Unit tests for core/frontmatter.py"""

from datetime import datetime, timezone

import pytest

from mdsite.core.frontmatter import FrontMatterMenu, parse_content, parse_date


def test_parse_content_yaml():
    text = """---
title: Hello
date: 2024-01-02
draft: true
tags:
  - a
  - b
author: Ann
---
# Heading
Body
"""
    parsed = parse_content(text)
    fm = parsed.front_matter
    assert fm.title == "Hello"
    assert fm.date == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert fm.draft is True
    assert fm.tags == ["a", "b"]
    assert fm.params == {"author": "Ann"}
    assert parsed.body.startswith("# Heading")


def test_parse_content_toml():
    text = '+++\ntitle = "Hi"\ndate = 2024-03-04T10:00:00Z\ncategories = ["news"]\n+++\nBody\n'
    parsed = parse_content(text)
    assert parsed.front_matter.title == "Hi"
    assert parsed.front_matter.date == datetime(2024, 3, 4, 10, tzinfo=timezone.utc)
    assert parsed.front_matter.categories == ["news"]
    assert parsed.body == "Body\n"


def test_parse_content_without_front_matter():
    parsed = parse_content("# Just markdown\n")
    assert parsed.front_matter.title is None
    assert parsed.front_matter.draft is False
    assert parsed.body == "# Just markdown\n"


def test_parse_content_malformed_yaml_falls_back(caplog):
    """A broken header is dropped with a warning; the body survives."""
    parsed = parse_content("---\ntitle: [unclosed\n---\nBody\n", source="bad.md")
    assert parsed.front_matter.title is None
    assert parsed.body == "Body\n"
    assert "bad.md" in caplog.text


def test_parse_content_non_mapping_header_falls_back():
    parsed = parse_content("---\n- a\n- b\n---\nBody\n")
    assert parsed.front_matter.tags == []
    assert parsed.body == "Body\n"


@pytest.mark.parametrize("header, expected", [
    ("draft: 'true'", True),
    ("draft: 'nope'", False),
    ("tags: go", ["go"]),
    ("tags: ''", []),
])
def test_parse_content_coerces_values(header, expected):
    fm = parse_content(f"---\n{header}\n---\n").front_matter
    key = header.split(":")[0]
    assert getattr(fm, key) == expected


def test_params_table_and_unknown_keys_merge():
    fm = parse_content("---\nparams:\n  color: red\nToc: false\n---\n").front_matter
    assert fm.params == {"color": "red", "Toc": False}


@pytest.mark.parametrize("header, expected", [
    ("menu: main", [FrontMatterMenu(menu="main")]),
    ("menu: [main, footer]", [FrontMatterMenu(menu="main"), FrontMatterMenu(menu="footer")]),
    (
        "menu:\n  main:\n    weight: 2\n    parent: docs\n    Name: Intro",
        [FrontMatterMenu(menu="main", weight=2, parent="docs", name="Intro")],
    ),
])
def test_menu_forms(header, expected):
    assert parse_content(f"---\n{header}\n---\n").front_matter.menus == expected


def test_parse_date():
    assert parse_date("2024-05-06T07:08:09+02:00") == datetime(2024, 5, 6, 5, 8, 9, tzinfo=timezone.utc)
    assert parse_date("2024-05-06T07:08:09Z") == datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    assert parse_date("2024-05-06 07:08") == datetime(2024, 5, 6, 7, 8, tzinfo=timezone.utc)
    assert parse_date("yesterday") is None
    assert parse_date(None) is None
