"""Menu assembly: config menus, front matter merge, and page reference resolution"""

import logging
from typing import Iterable, Optional

from mdsite.config import MenuEntryConfig
from mdsite.core.models import ContentRecord, MenuEntry, PageNode, Site


logger = logging.getLogger(__name__)


def build_menu_hierarchy(entries: list[MenuEntry]) -> list[MenuEntry]:
    """Link a flat entry list into a tree; returns the weight-sorted roots.

    Order-independent: an entry's `parent` is matched against every other
    entry's identifier (or name). Unmatched parents make the entry a root.
    """
    by_key: dict[str, MenuEntry] = {}
    for entry in entries:
        if entry.key:
            by_key[entry.key] = entry

    def _parent_of(entry: MenuEntry) -> Optional[MenuEntry]:
        return by_key.get(entry.parent) if entry.parent else None

    def _in_cycle(entry: MenuEntry) -> bool:
        seen = {id(entry)}
        cur = _parent_of(entry)
        while cur is not None:
            if id(cur) in seen:
                return cur is entry
            seen.add(id(cur))
            cur = _parent_of(cur)
        return False

    roots = []
    for entry in entries:
        parent = _parent_of(entry)
        if parent is None or _in_cycle(entry):
            roots.append(entry)
        else:
            parent.children.append(entry)

    for entry in entries:
        entry.children.sort(key=lambda e: e.weight)
    return sorted(roots, key=lambda e: e.weight)


def flatten_menu(entries: list[MenuEntry]) -> list[MenuEntry]:
    """Flatten a menu tree depth-first, children before their parent; clears child links."""
    flat: list[MenuEntry] = []
    seen: set[int] = set()
    stack = [(e, False) for e in reversed(entries)]
    while stack:
        entry, expanded = stack.pop()
        if expanded or not entry.children:
            entry.children = []
            flat.append(entry)
            continue
        if id(entry) in seen:
            continue
        seen.add(id(entry))
        stack.append((entry, True))
        stack.extend((c, False) for c in reversed(entry.children))
    return flat


def entry_from_config(menu: str, cfg: MenuEntryConfig) -> MenuEntry:
    return MenuEntry(
        name=cfg.name, url=cfg.url, page_ref=cfg.page_ref, title=cfg.title,
        weight=cfg.weight, parent=cfg.parent, identifier=cfg.identifier,
        pre=cfg.pre, post=cfg.post, menu=menu, params=dict(cfg.params),
    )


def build_config_menus(menus: dict[str, list[MenuEntryConfig]]) -> dict[str, list[MenuEntry]]:
    """Build one tree per menu name from config-declared entries."""
    return {
        name: build_menu_hierarchy([entry_from_config(name, cfg) for cfg in entries])
        for name, entries in menus.items()
    }


def merge_frontmatter_menus(site: Site, records: Iterable[ContentRecord]) -> None:
    """Merge `menu:` front matter declarations into site.menus.

    For each menu that gains entries, the existing tree is flattened, joined
    with the new entries, and rebuilt.
    """
    pages_by_filename: dict[str, PageNode] = {
        page.file.filename.lower(): page for page in site.pages if page.file is not None
    }

    additions: dict[str, list[MenuEntry]] = {}
    for record in records:
        if not record.menus:
            continue
        page = pages_by_filename.get(record.file.filename.lower())
        if page is None:
            continue
        for fm in record.menus:
            entry = MenuEntry(
                name=fm.name or page.title,
                title=fm.title,
                weight=fm.weight,
                parent=fm.parent,
                identifier=fm.identifier or page.rel_permalink,
                pre=fm.pre,
                post=fm.post,
                menu=fm.menu,
            )
            entry.attach_page(page)
            additions.setdefault(fm.menu, []).append(entry)

    for name, entries in additions.items():
        combined = flatten_menu(site.menus.get(name, [])) + entries
        site.menus[name] = build_menu_hierarchy(combined)
        logger.debug("menu %r: %d front matter entries merged", name, len(entries))


def _normalize_ref(ref: str) -> str:
    return ref.strip().strip('/').lower()


def find_page_by_ref(pages: list[PageNode], ref: str) -> Optional[PageNode]:
    """Match a menu pageRef against permalinks, then slugs, then 'section/slug'."""
    target = _normalize_ref(ref)
    if not target:
        return None
    for page in pages:
        if _normalize_ref(page.rel_permalink) == target:
            return page
    for page in pages:
        if page.slug.lower() == target or f"{page.section}/{page.slug}".lower() == target:
            return page
    return None


def resolve_menu_page_refs(menus: dict[str, list[MenuEntry]], pages: list[PageNode]) -> int:
    """Attach pages to every entry with a pageRef, nested children included.

    Each entry is visited exactly once. Returns the number of entries resolved.
    """
    resolved = 0
    stack = [e for entries in menus.values() for e in entries]
    while stack:
        entry = stack.pop()
        stack.extend(entry.children)
        if not entry.page_ref or entry.page is not None:
            continue
        page = find_page_by_ref(pages, entry.page_ref)
        if page is None:
            logger.debug("menu %r: unresolved pageRef %r", entry.menu, entry.page_ref)
            continue
        resolved += entry.attach_page(page)
    return resolved
