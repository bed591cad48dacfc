"""Per-mount navigation loading from a README table of contents or a JSON file"""

import json
import logging
import re
from typing import Any, Optional
from urllib.parse import unquote

from markdown_it import MarkdownIt

from mdsite.core.utils.fs import read_text
from mdsite.docs.config import DocsMountConfig
from mdsite.docs.links import RouteMap, resolve_nav_link
from mdsite.docs.models import NavItem
from mdsite.errors import ConfigError


logger = logging.getLogger(__name__)

TOC_HEADING = "table of contents"

# `[title](target)` where CommonMark sees no link, e.g. a target with spaces
BARE_LINK_RE = re.compile(r'\[(.*?)\]\((.*?)\)')


def _inline_link(tokens: list) -> Optional[tuple[str, str]]:
    """First (title, target) link of an inline token run; targets are percent-decoded."""
    for tok in tokens:
        for i, child in enumerate(tok.children or ()):
            if child.type != "link_open":
                continue
            href = unquote(str(child.attrGet("href") or "")).strip()
            title = []
            for inner in tok.children[i + 1:]:
                if inner.type == "link_close":
                    break
                title.append(inner.content)
            text = "".join(title).strip()
            if text and href:
                return text, href
        if m := BARE_LINK_RE.search(tok.content):
            text, target = m.group(1).strip(), m.group(2).strip()
            if text and target:
                return text, target
    return None


def parse_toc_markdown(
    mount: DocsMountConfig,
    text: str,
    dir_key: str,
    routes: RouteMap,
    md: Optional[MarkdownIt] = None,
) -> list[NavItem]:
    """Nav from the `## Table of Contents` section: `### Group` headers over `[title](path)` links.

    Groups come first, then ungrouped links; `order` counts across both.
    """
    md = md or MarkdownIt("commonmark")
    tokens = md.parse(text)

    groups: list[tuple[str, int, list[NavItem]]] = []
    roots: list[NavItem] = []
    current: Optional[list[NavItem]] = None
    in_toc = False
    order = 1

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok.type == "heading_open":
            title = tokens[i + 1].content.strip() if i + 1 < len(tokens) else ""
            if tok.tag == "h2":
                if in_toc:
                    break
                in_toc = title.lower() == TOC_HEADING
            elif tok.tag == "h3" and in_toc and title:
                current = []
                groups.append((title, order, current))
                order += 1
            i += 3
            continue

        if in_toc and tok.type == "inline":
            link = _inline_link([tok])
            if link is not None:
                title, target = link
                url = resolve_nav_link(mount, dir_key, target, routes)
                if url is None:
                    logger.debug("%s: nav link %r unresolved", mount.name, target)
                else:
                    item = NavItem(title=title, url=url, order=order)
                    order += 1
                    (current if current is not None else roots).append(item)
        i += 1

    out = [NavItem(title=t, url="", children=tuple(kids), is_section=True, order=o) for t, o, kids in groups]
    return out + roots


def _lower_keys(obj: dict[str, Any]) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in obj.items()}


def parse_nav_items(mount: DocsMountConfig, dir_key: str, items: Any, routes: RouteMap) -> list[NavItem]:
    """Recursive `[{title, url|path, children}]` list; entries lacking a title or target are dropped."""
    if not isinstance(items, list):
        return []
    out: list[NavItem] = []
    order = 1
    for raw in items:
        if not isinstance(raw, dict):
            continue
        entry = _lower_keys(raw)
        title = entry.get("title")
        children = parse_nav_items(mount, dir_key, entry.get("children"), routes)

        url = None
        if isinstance(entry.get("url"), str):
            url = entry["url"]
        elif isinstance(entry.get("path"), str):
            url = resolve_nav_link(mount, dir_key, entry["path"], routes)
        if not isinstance(title, str) or url is None:
            continue

        out.append(NavItem(title=title, url=url, children=tuple(children), is_section=bool(children), order=order))
        order += 1
    return out


def parse_nav_json(mount: DocsMountConfig, dir_key: str, text: str, routes: RouteMap) -> list[NavItem]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid nav file for mount {mount.name}: {e}") from e
    if isinstance(data, dict):
        data = _lower_keys(data).get("items")
    return parse_nav_items(mount, dir_key, data, routes)


def load_mount_nav(mount: DocsMountConfig, routes: RouteMap) -> list[NavItem]:
    """Navigation tree for one mount; [] when the nav file does not exist."""
    nav_file = mount.nav_file
    if not nav_file.is_file():
        return []
    dir_key = mount.nav_dir_key()
    try:
        text = read_text(nav_file)
    except UnicodeDecodeError as e:
        raise ConfigError(f"Invalid nav file for mount {mount.name}: {e}") from e
    if nav_file.suffix.lower() == ".json":
        return parse_nav_json(mount, dir_key, text, routes)
    return parse_toc_markdown(mount, text, dir_key, routes)
