"""Site configuration: settings schema and config file loader"""

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from mdsite.errors import ConfigError


CONFIG_FILES = (
    "config.yaml", "config.yml", "config.toml", "config.json",
    "hugo.yaml", "hugo.yml", "hugo.toml", "hugo.json",
)
ENV_PREFIX = "MDSITE_"


class MenuEntryConfig(BaseModel):
    """A menu item declared in the site config."""
    model_config = ConfigDict(extra="ignore")

    name:       str = ""
    url:        str = ""
    page_ref:   str = Field(default="", validation_alias=AliasChoices("page_ref", "pageRef", "pageref"))
    title:      str = ""
    weight:     int = 0
    parent:     str = ""
    identifier: str = ""
    pre:        str = ""
    post:       str = ""
    params:     dict[str, Any] = Field(default_factory=dict)


class LanguageConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lang:               str
    language_name:      str = Field(default="", validation_alias=AliasChoices("language_name", "languageName"))
    language_direction: str = Field(default="ltr", validation_alias=AliasChoices("language_direction", "languageDirection"))
    content_dir:        str = Field(default="", validation_alias=AliasChoices("content_dir", "contentDir"))
    weight:             int = 0


class SiteConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title:           str = "mdsite Site"
    base_url:        str = Field(default="", validation_alias=AliasChoices("base_url", "baseURL", "baseurl"))
    language_code:   str = Field(default="en-us", validation_alias=AliasChoices("language_code", "languageCode"))
    content_dir:     str = Field(default="content", validation_alias=AliasChoices("content_dir", "contentDir"))
    theme:           Optional[str] = None
    copyright:       str = ""
    languages:       list[LanguageConfig] = Field(default_factory=list)
    params:          dict[str, Any] = Field(default_factory=dict)
    menus:           dict[str, list[MenuEntryConfig]] = Field(
        default_factory=dict, validation_alias=AliasChoices("menus", "menu"))
    markdown_preset: str = Field(default="gfm-like", description="MarkdownIt parser preset name")

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, v: str) -> str:
        v = v.strip()
        return v if not v or v.endswith("/") else v + "/"

    @field_validator("theme")
    @classmethod
    def _blank_theme(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v else None

    @field_validator("languages", mode="before")
    @classmethod
    def _languages_mapping(cls, v: Any) -> Any:
        """Accept Hugo's `languages: {en: {...}, fr: {...}}` mapping form."""
        if isinstance(v, dict):
            return [{"lang": k, **(props or {})} for k, props in v.items()]
        return v

    @field_validator("languages")
    @classmethod
    def _sort_languages(cls, v: list[LanguageConfig]) -> list[LanguageConfig]:
        return sorted(v, key=lambda lang: lang.weight)


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML, TOML or JSON config file into a mapping."""
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
        if suffix == ".toml":
            data = tomllib.loads(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return data


def find_config_file(site_dir: Path) -> Optional[Path]:
    for name in CONFIG_FILES:
        if (site_dir / name).is_file():
            return site_dir / name
    return None


def load_config(site_dir: Path | str = ".", overrides: dict[str, Any] = None) -> SiteConfig:
    """Load SiteConfig from the site's config file, then MDSITE_<FIELD> env vars, then non-None overrides."""
    site_dir = Path(site_dir)
    data: dict[str, Any] = {}
    if path := find_config_file(site_dir):
        data = read_config_file(path)

    for name, info in SiteConfig.model_fields.items():
        if info.annotation in (str, Optional[str]) and (val := os.getenv(f"{ENV_PREFIX}{name.upper()}")):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return SiteConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid site configuration: {e}") from e
