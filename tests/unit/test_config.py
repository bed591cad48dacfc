"""Unit tests for config.py"""

import pytest

from mdsite.config import load_config
from mdsite.errors import ConfigError


def test_load_config_defaults(tmp_path):
    """Defaults apply when there is no config file, env var, or override."""
    config = load_config(tmp_path)
    assert config.title == "mdsite Site"
    assert config.base_url == ""
    assert config.content_dir == "content"
    assert config.theme is None


def test_load_config_reads_yaml_aliases(tmp_path):
    """Hugo-style keys map onto the settings fields."""
    (tmp_path / "config.yaml").write_text(
        "title: Blog\nbaseURL: https://example.com\nlanguageCode: fr\n"
        "menu:\n  main:\n    - name: Posts\n      pageRef: /posts\n"
    )
    config = load_config(tmp_path)
    assert config.title == "Blog"
    assert config.base_url == "https://example.com/"
    assert config.language_code == "fr"
    assert config.menus["main"][0].page_ref == "/posts"


def test_load_config_reads_toml(tmp_path):
    (tmp_path / "hugo.toml").write_text('title = "Toml Site"\ntheme = "  "\n')
    config = load_config(tmp_path)
    assert config.title == "Toml Site"
    assert config.theme is None


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDSITE_TITLE takes precedence over config.yaml title."""
    (tmp_path / "config.yaml").write_text("title: From File\n")
    monkeypatch.setenv("MDSITE_TITLE", "From Env")
    assert load_config(tmp_path).title == "From Env"


def test_load_config_cli_overrides_env(tmp_path, monkeypatch):
    """A non-None override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDSITE_BASE_URL", "https://env.example/")
    config = load_config(tmp_path, overrides={"base_url": "http://localhost:1313", "title": None})
    assert config.base_url == "http://localhost:1313/"
    assert config.title == "mdsite Site"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ConfigError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid config.yaml"):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping(tmp_path):
    (tmp_path / "config.json").write_text("[1, 2]")
    with pytest.raises(ConfigError, match="expected a mapping"):
        load_config(tmp_path)


def test_load_config_invalid_field(tmp_path):
    (tmp_path / "config.yaml").write_text("menus: not-a-mapping\n")
    with pytest.raises(ConfigError, match="Invalid site configuration"):
        load_config(tmp_path)


def test_languages_mapping_sorted_by_weight(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "languages:\n"
        "  fr:\n    languageName: Français\n    weight: 2\n"
        "  en:\n    languageName: English\n    weight: 1\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert [lang.lang for lang in config.languages] == ["en", "fr"]
    assert config.languages[1].language_name == "Français"
