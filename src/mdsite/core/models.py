"""Site graph data models: scan records, page nodes, menus, and build requests"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from markupsafe import Markup

from mdsite.core.utils.paths import to_absolute_url

if TYPE_CHECKING:
    from mdsite.config import SiteConfig
    from mdsite.core.frontmatter import FrontMatterMenu
    from mdsite.docs.links import DocsLinkContext
    from mdsite.docs.models import DocsMountContext


@dataclass(frozen=True)
class PageFile:
    """Source file identity as exposed to templates."""
    filename:  str          # absolute source path
    dir:       str          # 'posts/2024/' style; '' at content root
    base_name: str          # file name without .md

    @property
    def dir_key(self) -> str:
        return self.dir.rstrip('/')


@dataclass(frozen=True)
class ContentRecord:
    """One ordinary content file after front matter parsing and routing."""
    source_path:     Path
    section:         str
    type:            str
    slug:            str
    title:           str
    date:            datetime   # aware UTC; front matter date, else file mtime
    date_string:     str
    lastmod_string:  str        # always from the filesystem
    draft:           bool
    description:     str
    tags:            tuple[str, ...]
    categories:      tuple[str, ...]
    params:          dict[str, Any]
    raw_body:        str
    rel_permalink:   str
    output_rel_path: str
    layout:          Optional[str]
    file:            PageFile
    menus:           tuple['FrontMatterMenu', ...] = ()


@dataclass(frozen=True)
class ListSourceContent:
    """Content of a directory's branch index (_index.md)."""
    title:       Optional[str]
    raw_body:    str
    description: str
    type:        Optional[str]
    layout:      Optional[str]
    params:      dict[str, Any]
    source_dir:  Path
    file:        Optional[PageFile] = None


@dataclass(frozen=True)
class LanguageContext:
    lang:      str
    name:      str
    direction: str = "ltr"


@dataclass(eq=False)
class PageNode:
    """A node of the final site graph; one output file per node."""
    kind:            str
    title:           str
    rel_permalink:   str
    output_rel_path: str
    section:         str = ""
    type:            str = ""
    slug:            str = ""
    date:            str = ""
    lastmod:         str = ""
    draft:           bool = False
    description:     str = ""
    tags:            tuple[str, ...] = ()
    categories:      tuple[str, ...] = ()
    params:          dict[str, Any] = field(default_factory=dict)
    file:            Optional[PageFile] = None
    layout:          Optional[str] = None
    pages:           list['PageNode'] = field(default_factory=list, repr=False)
    # non-owning back-references
    parent:          Optional['PageNode'] = field(default=None, repr=False)
    ancestors:       list['PageNode'] = field(default_factory=list, repr=False)
    site:            Optional['Site'] = field(default=None, repr=False)
    language:        Optional[LanguageContext] = field(default=None, repr=False)
    # render slots, filled by the renderer
    content:           Markup = field(default_factory=Markup, repr=False)
    summary:           Markup = field(default_factory=Markup, repr=False)
    table_of_contents: Markup = field(default_factory=Markup, repr=False)
    plain:             str = field(default="", repr=False)
    # build inputs
    raw_body:        str = field(default="", repr=False)
    resource_dir:    Optional[Path] = field(default=None, repr=False)
    link_context:    Optional['DocsLinkContext'] = field(default=None, repr=False)

    @property
    def permalink(self) -> str:
        base = self.site.base_url if self.site else ""
        return to_absolute_url(base, self.rel_permalink)

    @property
    def is_home(self) -> bool:
        return self.kind == "home"

    @property
    def is_page(self) -> bool:
        return self.kind == "page"

    @property
    def is_section(self) -> bool:
        return self.kind == "section"

    @property
    def regular_pages(self) -> list['PageNode']:
        return [p for p in self.pages if p.kind == "page"]


@dataclass(eq=False)
class MenuEntry:
    """A menu item; `children` holds the tree, `page` is a resolved reference."""
    name:       str = ""
    url:        str = ""
    page_ref:   str = ""
    title:      str = ""
    weight:     int = 0
    parent:     str = ""
    identifier: str = ""
    pre:        str = ""
    post:       str = ""
    menu:       str = ""
    params:     dict[str, Any] = field(default_factory=dict)
    page:       Optional[PageNode] = field(default=None, repr=False)
    children:   list['MenuEntry'] = field(default_factory=list, repr=False)

    @property
    def key(self) -> str:
        return self.identifier or self.name

    @property
    def rel_url(self) -> str:
        if self.url:
            return self.url
        return self.page.rel_permalink if self.page else ""

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def attach_page(self, page: PageNode) -> bool:
        """Set the resolved page once; later calls are ignored."""
        if self.page is not None:
            return False
        self.page = page
        return True


@dataclass(eq=False)
class Site:
    """Top-level aggregate for one build."""
    config:      'SiteConfig'
    language:    LanguageContext
    languages:   list[LanguageContext] = field(default_factory=list)
    menus:       dict[str, list[MenuEntry]] = field(default_factory=dict)
    pages:       list[PageNode] = field(default_factory=list)
    all_pages:   list[PageNode] = field(default_factory=list)
    home:        Optional[PageNode] = None
    taxonomies:  dict[str, dict[str, list[PageNode]]] = field(default_factory=dict)
    docs_mounts: list['DocsMountContext'] = field(default_factory=list)
    search_docs: list[Any] = field(default_factory=list)
    docs_mode:   bool = False
    search_file: str = ""           # docs search index output; empty disables it

    @property
    def title(self) -> str:
        return self.config.title

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def params(self) -> dict[str, Any]:
        return self.config.params

    def get_page(self, rel_permalink: str) -> Optional[PageNode]:
        for page in self.all_pages:
            if page.rel_permalink == rel_permalink:
                return page
        return None


@dataclass
class BuildRequest:
    site_dir:              Path
    destination_dir:       str = "public"
    base_url:              Optional[str] = None
    themes_dir:            Optional[str] = None
    build_drafts:          bool = False
    clean_destination_dir: bool = True

    @property
    def output_dir(self) -> Path:
        dest = Path(self.destination_dir)
        return dest if dest.is_absolute() else Path(self.site_dir).resolve() / dest


@dataclass
class BuildResult:
    output_dir:  Path
    pages_built: int
