"""Docs mount scanning: markdown routing and verbatim asset copying"""

import logging
from pathlib import Path

from mdsite.core.utils.fs import copy_file, iter_files
from mdsite.core.utils.paths import (
    combine_url,
    normalize_slashes,
    output_rel_path,
    url_prefix_segments,
    without_md_extension,
)
from mdsite.docs.config import DocsMountConfig
from mdsite.docs.links import RouteMap, route_key
from mdsite.docs.models import DocsRoute
from mdsite.errors import ConfigError


logger = logging.getLogger(__name__)

INDEX_FILES = ("_index.md", "index.md", "readme.md")   # precedence order


def is_index_file(file_name: str) -> bool:
    return file_name.lower() in INDEX_FILES


def index_rank(file_name: str) -> int:
    """Lower wins when several index files share a directory."""
    return INDEX_FILES.index(file_name.lower())


def route_file(mount: DocsMountConfig, source: Path, rel: str) -> DocsRoute:
    *dir_parts, file_name = rel.split("/")
    is_index = is_index_file(file_name)
    url_segments = tuple(dir_parts) if is_index else (*dir_parts, without_md_extension(file_name))
    output_segments = (*url_prefix_segments(mount.url_prefix), *url_segments)
    return DocsRoute(
        source_path=source,
        rel_path=rel,
        dir_key="/".join(dir_parts),
        file_name=file_name,
        is_index=is_index,
        url_segments=url_segments,
        output_segments=output_segments,
        rel_permalink=combine_url(mount.url_prefix, *url_segments),
        output_rel_path=output_rel_path(list(output_segments)),
    )


def scan_mount(mount: DocsMountConfig, out_dir: Path) -> list[DocsRoute]:
    """Route every markdown file of the mount; copy everything else into out_dir."""
    source_dir = mount.source_dir
    if source_dir is None or not source_dir.is_dir():
        raise ConfigError(f"Docs mount not found: {source_dir or mount.source}")

    prefix_dir = out_dir.joinpath(*url_prefix_segments(mount.url_prefix))
    routes, assets = [], 0
    for path in iter_files(source_dir):
        rel = normalize_slashes(str(path.relative_to(source_dir)))
        if path.suffix.lower() != ".md":
            copy_file(path, prefix_dir / rel)
            assets += 1
            continue
        routes.append(route_file(mount, path, rel))

    logger.info("mount %r: %d markdown files, %d assets copied", mount.name, len(routes), assets)
    return routes


def build_route_map(routes: list[DocsRoute]) -> RouteMap:
    """Lower-cased mount-relative source path -> permalink."""
    return {route_key(r.rel_path): r.rel_permalink for r in routes}
