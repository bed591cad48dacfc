"""Docs-mode data models: navigation items, mount contexts, search documents"""

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel


@dataclass(frozen=True)
class NavItem:
    title:      str
    url:        str
    children:   tuple['NavItem', ...] = ()
    is_section: bool = False
    is_current: bool = False
    order:      int = 0


@dataclass(frozen=True)
class DocsMountContext:
    """Per-mount data exposed to templates as `site.docs_mounts`."""
    name:       str
    url_prefix: str
    nav:        tuple[NavItem, ...] = ()


@dataclass(frozen=True)
class DocsRoute:
    """A markdown file inside a mount, with its routing."""
    source_path:     Path
    rel_path:        str
    dir_key:         str
    file_name:       str
    is_index:        bool
    url_segments:    tuple[str, ...]
    output_segments: tuple[str, ...]
    rel_permalink:   str
    output_rel_path: str


class SearchDoc(BaseModel):
    """One entry of the docs search index JSON."""
    title: str
    url:   str
    mount: str
    text:  str
