"""Docs-mode configuration: mounts file schema and loader"""

from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from mdsite.config import read_config_file
from mdsite.core.utils.paths import ensure_leading_slash, ensure_trailing_slash, normalize_slashes
from mdsite.errors import ConfigError


DOCS_CONFIG_FILES = ("mdsite.docs.yaml", "mdsite.docs.yml", "mdsite.docs.json")
DEFAULT_NAV_FILE = "README.md"


class DocsMountConfig(BaseModel):
    """One documentation source tree mounted under a URL prefix."""
    model_config = ConfigDict(extra="ignore")

    name:      str = ""
    source:    str
    prefix:    str
    repo:      Optional[str] = Field(default=None, validation_alias=AliasChoices("repo", "repoUrl", "repo_url"))
    branch:    str = Field(default="main", validation_alias=AliasChoices("branch", "repoBranch", "repo_branch"))
    repo_path: Optional[str] = Field(default=None, validation_alias=AliasChoices("repo_path", "repoPath", "subdir"))
    nav:       Optional[str] = Field(default=None, validation_alias=AliasChoices("nav", "navPath", "nav_path"))
    source_dir: Optional[Path] = Field(default=None, exclude=True)

    @field_validator("source")
    @classmethod
    def _source_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("docs mount `source` cannot be empty")
        return v.strip()

    @field_validator("prefix")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        return ensure_trailing_slash(ensure_leading_slash(v))

    @field_validator("repo", "repo_path", "nav")
    @classmethod
    def _blank_none(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v else None

    @field_validator("branch")
    @classmethod
    def _default_branch(cls, v: str) -> str:
        return v.strip() or "main"

    @property
    def url_prefix(self) -> str:
        return self.prefix

    @property
    def nav_file(self) -> Path:
        raw = (self.nav or "").strip() or DEFAULT_NAV_FILE
        path = Path(raw)
        return path if path.is_absolute() else self.source_dir / path

    def nav_dir_key(self) -> str:
        """Mount-relative directory of the nav file; the file must sit inside the mount source."""
        try:
            rel = self.nav_file.resolve().relative_to(self.source_dir.resolve())
        except ValueError:
            raise ConfigError(f"Mount nav must be inside the mount source: {self.nav_file}") from None
        rel_str = normalize_slashes(str(rel))
        if rel_str in ("", "."):
            raise ConfigError(f"Mount nav must be a file inside the mount source: {self.nav_file}")
        return "/".join(rel_str.split("/")[:-1])

    def resolve(self, site_dir: Path) -> 'DocsMountConfig':
        """Fill in source_dir and the name/repo_path defaults against site_dir."""
        source = Path(self.source)
        source_dir = (source if source.is_absolute() else site_dir / source).resolve()
        name = self.name.strip() or ("Docs" if self.prefix == "/" else self.prefix.strip("/"))
        repo_path = self.repo_path
        if repo_path is None and self.repo:
            repo_path = source_dir.name
        return self.model_copy(update={"source_dir": source_dir, "name": name, "repo_path": repo_path})


class DocsConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mounts:       list[DocsMountConfig] = Field(default_factory=list)
    strict_links: bool = Field(default=False, validation_alias=AliasChoices("strict_links", "strictLinks"))
    search:       bool = True
    search_file:  str = Field(default="search.json", validation_alias=AliasChoices("search_file", "searchFile"))
    home_mount:   Optional[str] = Field(default=None, validation_alias=AliasChoices("home_mount", "homeMount"))
    site_name:    str = Field(default="Docs", validation_alias=AliasChoices("site_name", "siteName"))


def find_docs_config(site_dir: Path) -> Optional[Path]:
    for name in DOCS_CONFIG_FILES:
        if (site_dir / name).is_file():
            return site_dir / name
    return None


def parse_docs_config(data: dict[str, Any], site_dir: Path, source_name: str = "docs config") -> DocsConfig:
    """Validate raw docs config data and resolve mounts against site_dir."""
    try:
        config = DocsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {source_name}: {e}") from e
    if not config.mounts:
        raise ConfigError(f"Invalid {source_name}: no mounts configured")

    mounts = [m.resolve(site_dir) for m in config.mounts]
    for mount in mounts:
        if not mount.source_dir.is_dir():
            raise ConfigError(f"Docs mount not found: {mount.source_dir}")
        # rejects a nav file outside the mount before any output exists
        mount.nav_dir_key()
    return config.model_copy(update={"mounts": mounts})


def load_docs_config(site_dir: Path | str) -> Optional[DocsConfig]:
    """Load the docs config from site_dir; None when the site has none."""
    site_dir = Path(site_dir).resolve()
    path = find_docs_config(site_dir)
    if path is None:
        return None
    return parse_docs_config(read_config_file(path), site_dir, path.name)
