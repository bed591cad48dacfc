"""Home, section and nested list page assembly from routed content"""

import logging
from pathlib import Path

from mdsite.core.models import ContentRecord, ListSourceContent, PageNode, Site
from mdsite.core.utils.fs import copy_file
from mdsite.core.utils.paths import combine_url, last_segment, output_rel_path, split_path
from mdsite.core.utils.slug import humanize


logger = logging.getLogger(__name__)


def is_leaf_bundle(record: ContentRecord) -> bool:
    return record.file.base_name.lower() == "index" and bool(record.file.dir_key)


def build_page(site: Site, record: ContentRecord) -> PageNode:
    """Turn a scanned record into an ordinary page node."""
    return PageNode(
        kind="page",
        title=record.title,
        rel_permalink=record.rel_permalink,
        output_rel_path=record.output_rel_path,
        section=record.section,
        type=record.type,
        slug=record.slug,
        date=record.date_string,
        lastmod=record.lastmod_string,
        draft=record.draft,
        description=record.description,
        tags=record.tags,
        categories=record.categories,
        params=dict(record.params),
        file=record.file,
        layout=record.layout,
        site=site,
        language=site.language,
        raw_body=record.raw_body,
        resource_dir=record.source_path.parent if is_leaf_bundle(record) else None,
    )


def _list_page(
    site: Site,
    kind: str,
    dir_key: str,
    members: list[PageNode],
    source: ListSourceContent | None,
    default_title: str,
    default_type: str,
) -> PageNode:
    segments = split_path(dir_key)
    node = PageNode(
        kind=kind,
        title=default_title,
        rel_permalink=combine_url(*segments),
        output_rel_path=output_rel_path(segments),
        section=segments[0] if segments else "",
        type=default_type,
        slug=segments[-1] if segments else "",
        pages=list(members),
        site=site,
        language=site.language,
    )
    if members:
        node.date = members[0].date
        node.lastmod = max(p.lastmod for p in members)
    if source is not None:
        node.title = source.title or default_title
        node.raw_body = source.raw_body
        node.description = source.description
        node.type = source.type or default_type
        node.layout = source.layout
        node.params = dict(source.params)
        node.file = source.file
        node.resource_dir = source.source_dir
    return node


def build_home(site: Site, list_index: dict[str, ListSourceContent], pages: list[PageNode]) -> PageNode:
    """Home page: root branch index content if present, every ordinary page as members."""
    return _list_page(site, "home", "", pages, list_index.get(""), site.title, "home")


def section_names(pages: list[PageNode], list_index: dict[str, ListSourceContent]) -> list[str]:
    """Top-level sections: those holding pages plus those with a branch index."""
    names = {p.section for p in pages if p.section}
    names.update(key for key in list_index if key and "/" not in key)
    return sorted(names)


def build_sections(site: Site, pages: list[PageNode], list_index: dict[str, ListSourceContent]) -> list[PageNode]:
    sections = []
    for name in section_names(pages, list_index):
        members = [p for p in pages if p.section == name]
        sections.append(_list_page(site, "section", name, members, list_index.get(name), humanize(name), name))
    return sections


def _under_prefix(rel_permalink: str, prefix: str) -> bool:
    return rel_permalink.startswith(prefix.rstrip("/") + "/")


def build_nested_lists(site: Site, pages: list[PageNode], list_index: dict[str, ListSourceContent]) -> list[PageNode]:
    """One list page per nested directory that has its own branch index."""
    lists = []
    for dir_key in sorted(k for k in list_index if "/" in k):
        prefix = combine_url(dir_key)
        members = [p for p in pages if _under_prefix(p.rel_permalink, prefix)]
        section = split_path(dir_key)[0]
        lists.append(_list_page(
            site, "section", dir_key, members, list_index[dir_key],
            humanize(last_segment(dir_key)), section or "section",
        ))
    return lists


def _has_markdown(directory: Path) -> bool:
    return any(p.is_file() and p.suffix.lower() == ".md" for p in directory.iterdir())


def copy_bundle_resources(src_dir: Path, dest_dir: Path) -> int:
    """Copy non-markdown files next to a bundle index into dest_dir.

    Descent stops at subdirectories that hold markdown of their own; those are
    bundles or content directories with their own output. Returns files copied.
    """
    copied = 0
    stack = [(src_dir, dest_dir)]
    while stack:
        src, dest = stack.pop()
        for entry in sorted(src.iterdir()):
            if entry.is_dir():
                if _has_markdown(entry):
                    continue
                stack.append((entry, dest / entry.name))
            elif entry.suffix.lower() != ".md":
                copy_file(entry, dest / entry.name)
                copied += 1
    if copied:
        logger.debug("copied %d bundle resources from %s", copied, src_dir)
    return copied
