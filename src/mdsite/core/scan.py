"""Content discovery, classification, and URL/output routing"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from mdsite.core.frontmatter import parse_content
from mdsite.core.models import ContentRecord, ListSourceContent, PageFile
from mdsite.core.utils.fs import iter_markdown_files, mtime_utc, read_text
from mdsite.core.utils.paths import combine_url, normalize_slashes, output_rel_path, without_md_extension
from mdsite.core.utils.slug import humanize, slugify
from mdsite.errors import BuildError


logger = logging.getLogger(__name__)


class FileKind(str, Enum):
    branch_index = "branch_index"     # _index.md: list page content
    leaf_bundle  = "leaf_bundle"      # dir/index.md: page named after dir
    leaf         = "leaf"


class Route(NamedTuple):
    slug:            str
    url_segments:    list[str]
    rel_permalink:   str
    output_rel_path: str


@dataclass
class ScanResult:
    records:    list[ContentRecord] = field(default_factory=list)
    list_index: dict[str, ListSourceContent] = field(default_factory=dict)


def classify(file_name: str, depth: int) -> FileKind:
    """Classify a content file by name and directory depth (0 = content root)."""
    lower = file_name.lower()
    if lower == "_index.md":
        return FileKind.branch_index
    if lower == "index.md" and depth > 0:
        return FileKind.leaf_bundle
    return FileKind.leaf


def defining_name(kind: FileKind, dir_parts: list[str], file_name: str) -> str:
    """The name a page's default slug and title derive from."""
    if kind is FileKind.leaf_bundle:
        return dir_parts[-1]
    return without_md_extension(file_name)


def route(kind: FileKind, dir_parts: list[str], file_name: str, slug: str | None = None) -> Route:
    """Derive slug, URL segments, permalink and output path for a page file."""
    slug = slug or slugify(defining_name(kind, dir_parts, file_name))
    parents = dir_parts[:-1] if kind is FileKind.leaf_bundle else dir_parts
    segments = [*parents, slug]
    return Route(slug, segments, combine_url(*segments), output_rel_path(segments))


def build_page_file(source: Path, dir_key: str, file_name: str) -> PageFile:
    return PageFile(
        filename=str(source.resolve()),
        dir=f"{dir_key}/" if dir_key else "",
        base_name=without_md_extension(file_name),
    )


def _scan_file(path: Path, content_dir: Path, result: ScanResult) -> ContentRecord | None:
    rel = normalize_slashes(str(path.relative_to(content_dir)))
    *dir_parts, file_name = rel.split("/")
    dir_key = "/".join(dir_parts)
    kind = classify(file_name, len(dir_parts))

    parsed = parse_content(read_text(path), source=rel)
    fm = parsed.front_matter
    file = build_page_file(path, dir_key, file_name)

    if kind is FileKind.branch_index:
        result.list_index[dir_key] = ListSourceContent(
            title=fm.title,
            raw_body=parsed.body,
            description=fm.description or "",
            type=fm.type,
            layout=fm.layout,
            params=fm.params,
            source_dir=path.parent,
            file=file,
        )
        logger.debug("%s: branch index for %r", rel, dir_key)
        return None

    modified = mtime_utc(path)
    date = fm.date or modified
    section = dir_parts[0] if dir_parts else ""
    r = route(kind, dir_parts, file_name, fm.slug)

    return ContentRecord(
        source_path=path,
        section=section,
        type=fm.type or section or "page",
        slug=r.slug,
        title=fm.title or humanize(defining_name(kind, dir_parts, file_name)),
        date=date,
        date_string=date.isoformat(),
        lastmod_string=modified.isoformat(),
        draft=fm.draft,
        description=fm.description or "",
        tags=tuple(fm.tags),
        categories=tuple(fm.categories),
        params=fm.params,
        raw_body=parsed.body,
        rel_permalink=r.rel_permalink,
        output_rel_path=r.output_rel_path,
        layout=fm.layout,
        file=file,
        menus=tuple(fm.menus),
    )


def scan_content(content_dir: Path, build_drafts: bool = False) -> ScanResult:
    """Scan content_dir into date-sorted page records and a directory-keyed list index."""
    result = ScanResult()
    for path in iter_markdown_files(content_dir):
        try:
            record = _scan_file(path, content_dir, result)
        except (OSError, UnicodeDecodeError) as e:
            raise BuildError(f"Failed to read {path}: {e}") from e
        if record is None:
            continue
        if record.draft and not build_drafts:
            logger.debug("%s: draft skipped", record.source_path)
            continue
        result.records.append(record)

    result.records.sort(key=lambda r: r.date, reverse=True)
    logger.info("scanned %d pages, %d list indexes", len(result.records), len(result.list_index))
    return result
