"""Build entry points: content and docs site graphs, full build runs"""

import logging
from pathlib import Path
from typing import Optional

from mdsite.config import SiteConfig, load_config
from mdsite.core.hierarchy import build_home, build_nested_lists, build_page, build_sections
from mdsite.core.menus import build_config_menus, merge_frontmatter_menus, resolve_menu_page_refs
from mdsite.core.models import BuildRequest, BuildResult, LanguageContext, PageNode, Site
from mdsite.core.render import render_site
from mdsite.core.scan import scan_content
from mdsite.core.taxonomy import TAXONOMIES, build_taxonomy
from mdsite.core.templates import LayoutEnvironment
from mdsite.core.utils.fs import copy_tree, delete_tree
from mdsite.docs.builder import build_docs_site
from mdsite.docs.config import load_docs_config


logger = logging.getLogger(__name__)

DEFAULT_THEMES_DIR = "themes"


def _languages(config: SiteConfig) -> list[LanguageContext]:
    if not config.languages:
        return [LanguageContext(lang=config.language_code, name=config.language_code)]
    return [
        LanguageContext(lang=lang.lang, name=lang.language_name or lang.lang, direction=lang.language_direction)
        for lang in config.languages
    ]


def request_config(request: BuildRequest) -> SiteConfig:
    return load_config(request.site_dir, overrides={"base_url": request.base_url})


def link_parents(home: PageNode, lists: list[PageNode]) -> None:
    """Parent/ancestor links for content mode: page -> deepest list -> ... -> home."""
    by_permalink = {p.rel_permalink: p for p in lists}
    nodes = [*lists, *home.pages]
    for node in nodes:
        chain = []
        prefix = node.rel_permalink
        while prefix not in ("", "/"):
            prefix = prefix.rsplit("/", 1)[0] or "/"
            if (owner := by_permalink.get(prefix)) is not None:
                chain.append(owner)
        chain.append(home)
        node.parent = chain[0]
        node.ancestors = chain


def build_content_site(request: BuildRequest, config: Optional[SiteConfig] = None) -> Site:
    """Scan, route and assemble the content site graph (nothing is written)."""
    site_dir = Path(request.site_dir).resolve()
    config = config or request_config(request)
    languages = _languages(config)
    site = Site(config=config, language=languages[0], languages=languages)

    scan = scan_content(site_dir / config.content_dir, build_drafts=request.build_drafts)
    pages = [build_page(site, record) for record in scan.records]
    site.pages = pages

    home = build_home(site, scan.list_index, pages)
    lists = build_sections(site, pages, scan.list_index) + build_nested_lists(site, pages, scan.list_index)
    link_parents(home, lists)

    taxonomy_pages: list[PageNode] = []
    for name, get_terms in TAXONOMIES.items():
        built = build_taxonomy(site, pages, name, get_terms)
        built.root.parent = home
        built.root.ancestors = [home]
        for term in built.terms:
            term.ancestors = [built.root, home]
        taxonomy_pages.extend([*built.terms, built.root])

    site.home = home
    site.all_pages = [home, *lists, *pages, *taxonomy_pages]

    site.menus = build_config_menus(config.menus)
    merge_frontmatter_menus(site, scan.records)
    resolved = resolve_menu_page_refs(site.menus, site.all_pages)
    logger.info(
        "content build: %d pages, %d lists, %d menu refs resolved",
        len(pages), len(lists), resolved,
    )
    return site


def build_site(request: BuildRequest) -> Site:
    """Docs mode when the site has a docs config, content mode otherwise."""
    config = request_config(request)
    docs_config = load_docs_config(request.site_dir)
    if docs_config is not None:
        return build_docs_site(request, docs_config, config)
    return build_content_site(request, config)


def resolve_theme_dir(site_dir: Path, config: SiteConfig, themes_dir: Optional[str] = None) -> Optional[Path]:
    if not config.theme:
        return None
    root = Path(themes_dir) if themes_dir else Path(DEFAULT_THEMES_DIR)
    if not root.is_absolute():
        root = site_dir / root
    theme_dir = root / config.theme
    if not theme_dir.is_dir():
        logger.warning("theme %r not found under %s", config.theme, root)
        return None
    return theme_dir


def run_build(request: BuildRequest) -> BuildResult:
    """Clean the destination, copy static files, build the site graph and render it."""
    site_dir = Path(request.site_dir).resolve()
    config = request_config(request)
    docs_config = load_docs_config(site_dir)
    theme_dir = resolve_theme_dir(site_dir, config, request.themes_dir)
    out_dir = request.output_dir

    if request.clean_destination_dir:
        delete_tree(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    if theme_dir is not None:
        copy_tree(theme_dir / "static", out_dir)
    copy_tree(site_dir / "static", out_dir)

    if docs_config is not None:
        site = build_docs_site(request, docs_config, config)
    else:
        site = build_content_site(request, config)

    env = LayoutEnvironment(site_dir, theme_dir)
    pages_built = render_site(site, env, out_dir)
    return BuildResult(output_dir=out_dir, pages_built=pages_built)
