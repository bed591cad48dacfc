"""Docs-mode site graph: one section tree per mount under a shared home page"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from mdsite.config import SiteConfig, load_config
from mdsite.core.frontmatter import parse_content
from mdsite.core.models import BuildRequest, LanguageContext, PageFile, PageNode, Site
from mdsite.core.utils.fs import mtime_utc, read_text
from mdsite.core.utils.paths import (
    combine_url,
    dir_depth,
    last_segment,
    output_rel_path,
    parent_dir_key,
    url_prefix_segments,
    without_md_extension,
)
from mdsite.core.utils.slug import humanize
from mdsite.docs.config import DocsConfig, DocsMountConfig
from mdsite.docs.links import DocsLinkContext, RouteMap, edit_url
from mdsite.docs.models import DocsMountContext, DocsRoute
from mdsite.docs.nav import load_mount_nav
from mdsite.docs.scan import build_route_map, index_rank, scan_mount
from mdsite.errors import BuildError


logger = logging.getLogger(__name__)

DOCS_TYPE = "docs"


@dataclass
class MountBuild:
    root:     PageNode
    pages:    list[PageNode] = field(default_factory=list)    # every node with its own output
    searched: list[PageNode] = field(default_factory=list)


def _page_file(route: DocsRoute, base_name: str) -> PageFile:
    return PageFile(
        filename=str(route.source_path.resolve()),
        dir=f"{route.dir_key}/" if route.dir_key else "",
        base_name=base_name,
    )


def _mount_params(mount: DocsMountConfig) -> dict:
    return {"mount": mount.name, "mountPrefix": mount.url_prefix}


def _source_params(mount: DocsMountConfig, route: DocsRoute) -> dict:
    params = {"relPath": route.rel_path}
    if url := edit_url(mount, route.rel_path):
        params["editURL"] = url
    return params


def mount_section(mount: DocsMountConfig) -> str:
    segments = url_prefix_segments(mount.url_prefix)
    return segments[0] if segments else mount.name


def _read(route: DocsRoute):
    try:
        return parse_content(read_text(route.source_path), source=str(route.source_path))
    except (OSError, UnicodeDecodeError) as e:
        raise BuildError(f"Failed to read {route.source_path}: {e}") from e


def build_leaf(site: Site, mount: DocsMountConfig, route: DocsRoute, ctx: DocsLinkContext, build_drafts: bool) -> Optional[PageNode]:
    parsed = _read(route)
    fm = parsed.front_matter
    if fm.draft and not build_drafts:
        logger.debug("%s: draft skipped", route.rel_path)
        return None

    base_name = without_md_extension(route.file_name)
    modified = mtime_utc(route.source_path)
    date = fm.date or modified
    return PageNode(
        kind="page",
        title=fm.title or humanize(base_name),
        rel_permalink=route.rel_permalink,
        output_rel_path=route.output_rel_path,
        section=mount_section(mount),
        type=fm.type or DOCS_TYPE,
        slug=base_name,
        date=date.isoformat(),
        lastmod=modified.isoformat(),
        draft=fm.draft,
        description=fm.description or "",
        tags=tuple(fm.tags),
        categories=tuple(fm.categories),
        params={**fm.params, **_mount_params(mount), **_source_params(mount, route)},
        file=_page_file(route, base_name),
        layout=fm.layout,
        site=site,
        language=site.language,
        raw_body=parsed.body,
        link_context=ctx,
    )


def discover_dirs(index_dirs: set[str], leaf_dirs: set[str]) -> set[str]:
    """Every directory holding an index or a leaf, plus all their ancestors up to the root."""
    dirs = {""}
    for key in index_dirs | leaf_dirs:
        while key not in dirs:
            dirs.add(key)
            key = parent_dir_key(key)
    return dirs


def build_mount(site: Site, mount: DocsMountConfig, routes: list[DocsRoute], route_map: RouteMap,
                strict_links: bool, build_drafts: bool) -> MountBuild:
    """Assemble one mount's section tree, deepest directories first."""
    index_by_dir: dict[str, DocsRoute] = {}
    leaves_by_dir: dict[str, list[PageNode]] = {}
    result_pages: list[PageNode] = []
    searched: list[PageNode] = []

    for route in routes:
        if route.is_index:
            current = index_by_dir.get(route.dir_key)
            if current is None or index_rank(route.file_name) < index_rank(current.file_name):
                index_by_dir[route.dir_key] = route
            continue
        ctx = DocsLinkContext(mount, route.dir_key, route_map, strict_links)
        leaf = build_leaf(site, mount, route, ctx, build_drafts)
        if leaf is None:
            continue
        leaves_by_dir.setdefault(route.dir_key, []).append(leaf)
        result_pages.append(leaf)
        searched.append(leaf)

    dirs = discover_dirs(set(index_by_dir), set(leaves_by_dir))
    child_dirs: dict[str, list[str]] = {}
    for key in dirs:
        if key:
            child_dirs.setdefault(parent_dir_key(key), []).append(key)

    section_name = mount_section(mount)
    sections: dict[str, PageNode] = {}
    for key in sorted(dirs, key=dir_depth, reverse=True):
        children = [sections[c] for c in sorted(child_dirs.get(key, [])) if c in sections]
        children += sorted(leaves_by_dir.get(key, []), key=lambda p: p.title)

        segments = key.split("/") if key else []
        node = PageNode(
            kind="section",
            title=mount.name if not key else humanize(last_segment(key)),
            rel_permalink=combine_url(mount.url_prefix, *segments),
            output_rel_path=output_rel_path([*url_prefix_segments(mount.url_prefix), *segments]),
            section=section_name,
            type=DOCS_TYPE,
            slug=last_segment(key) if key else section_name,
            params={},
            pages=children,
            site=site,
            language=site.language,
        )

        if (route := index_by_dir.get(key)) is not None:
            parsed = _read(route)
            fm = parsed.front_matter
            node.draft = fm.draft
            node.layout = fm.layout
            if not fm.draft or build_drafts:
                modified = mtime_utc(route.source_path)
                node.title = fm.title or node.title
                node.description = fm.description or ""
                node.date = (fm.date or modified).isoformat()
                node.lastmod = modified.isoformat()
                node.file = _page_file(route, "_index")
                node.params = {**fm.params, **_source_params(mount, route)}
                node.raw_body = parsed.body
                node.link_context = DocsLinkContext(mount, key, route_map, strict_links)
                searched.append(node)

        node.params.update(_mount_params(mount))
        node.params["dirKey"] = key
        sections[key] = node
        result_pages.append(node)

    return MountBuild(root=sections[""], pages=result_pages, searched=searched)


def assign_ancestry(root: PageNode) -> None:
    """Set parent and nearest-first ancestors for every node below root, top-down."""
    stack = [(root, None, [])]
    while stack:
        node, parent, ancestors = stack.pop()
        node.parent = parent
        node.ancestors = ancestors
        if node.kind == "page":
            continue
        for child in node.pages:
            stack.append((child, node, [node, *ancestors]))


def _matches_home(mount_root: PageNode, home_mount: str) -> bool:
    wanted = home_mount.strip().lower()
    return wanted in (
        str(mount_root.params.get("mount", "")).lower(),
        str(mount_root.params.get("mountPrefix", "")).lower(),
    )


def build_docs_site(request: BuildRequest, docs_config: DocsConfig, config: Optional[SiteConfig] = None) -> Site:
    """Build the docs-mode site graph; non-markdown mount files are copied to the output as a side effect."""
    site_dir = Path(request.site_dir).resolve()
    config = config or load_config(site_dir, overrides={"base_url": request.base_url})
    if docs_config.site_name.strip():
        config = config.model_copy(update={"title": docs_config.site_name.strip()})

    language = LanguageContext(lang=config.language_code, name=config.language_code)
    site = Site(config=config, language=language, languages=[language], docs_mode=True)
    if docs_config.search and docs_config.search_file.strip():
        site.search_file = docs_config.search_file.strip()

    out_dir = request.output_dir
    mount_roots: list[PageNode] = []
    mount_pages: list[PageNode] = []
    for mount in docs_config.mounts:
        routes = scan_mount(mount, out_dir)
        route_map = build_route_map(routes)
        site.docs_mounts.append(DocsMountContext(
            name=mount.name, url_prefix=mount.url_prefix, nav=tuple(load_mount_nav(mount, route_map)),
        ))
        built = build_mount(site, mount, routes, route_map, docs_config.strict_links, request.build_drafts)
        mount_roots.append(built.root)
        mount_pages.extend(built.pages)
        site.search_docs.extend(built.searched)

    home = PageNode(
        kind="home",
        title=config.title,
        rel_permalink="/",
        output_rel_path="index.html",
        type=DOCS_TYPE,
        pages=list(mount_roots),
        site=site,
        language=language,
    )
    if docs_config.home_mount and docs_config.home_mount.strip():
        chosen = next((m for m in mount_roots if _matches_home(m, docs_config.home_mount)), None)
        if chosen is not None:
            home.title = chosen.title
            home.description = chosen.description
            home.raw_body = chosen.raw_body
            home.link_context = chosen.link_context
    assign_ancestry(home)

    site.home = home
    site.pages = mount_roots
    # a mount at "/" shares the home page's output
    site.all_pages = [home, *(p for p in mount_pages if p.rel_permalink != "/")]
    logger.info("docs build: %d mounts, %d pages", len(mount_roots), len(site.all_pages))
    return site
