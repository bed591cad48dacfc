"""Front matter extraction: YAML (---) or TOML (+++) headers into typed fields"""

import logging
import re
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Optional

import yaml


logger = logging.getLogger(__name__)

YAML_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
TOML_RE = re.compile(r'^\+\+\+[ \t]*\r?\n(.*?)\r?\n\+\+\+[ \t]*(?:\r?\n|$)', re.DOTALL)

_KNOWN_KEYS = {
    'title', 'date', 'draft', 'tags', 'categories', 'description',
    'slug', 'layout', 'type', 'params', 'menu', 'menus',
}


@dataclass
class FrontMatterMenu:
    """A `menu:` declaration from a page's front matter."""
    menu:       str
    name:       str = ""
    weight:     int = 0
    parent:     str = ""
    identifier: str = ""
    pre:        str = ""
    post:       str = ""
    title:      str = ""


@dataclass
class FrontMatter:
    title:       Optional[str] = None
    date:        Optional[datetime] = None
    draft:       bool = False
    tags:        list[str] = field(default_factory=list)
    categories:  list[str] = field(default_factory=list)
    description: Optional[str] = None
    slug:        Optional[str] = None
    layout:      Optional[str] = None
    type:        Optional[str] = None
    params:      dict[str, Any] = field(default_factory=dict)
    menus:       list[FrontMatterMenu] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedContent:
    front_matter: FrontMatter
    body:         str


def _as_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value).strip()


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    return None


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_date(value: Any) -> Optional[datetime]:
    """Coerce a front matter date to an aware UTC datetime, or None."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


def _parse_menus(value: Any) -> list[FrontMatterMenu]:
    """Accept `menu: main`, `menu: [main, footer]` or `menu: {main: {weight: 2}}`."""
    if isinstance(value, str):
        return [FrontMatterMenu(menu=value.strip())] if value.strip() else []
    if isinstance(value, list):
        return [m for v in value for m in _parse_menus(v)]
    if not isinstance(value, dict):
        return []
    menus = []
    for name, props in value.items():
        entry = FrontMatterMenu(menu=str(name).strip())
        # TOML [[menu.main]] arrays yield a list of property tables
        for p in props if isinstance(props, list) else [props]:
            if not isinstance(p, dict):
                continue
            lowered = {str(k).lower(): v for k, v in p.items()}
            entry.weight = _as_int(lowered.get('weight', entry.weight))
            for attr in ('name', 'parent', 'identifier', 'pre', 'post', 'title'):
                if (s := _as_str(lowered.get(attr))) is not None:
                    setattr(entry, attr, s)
        menus.append(entry)
    return menus


def to_front_matter(data: dict[str, Any]) -> FrontMatter:
    """Map a raw front matter mapping onto FrontMatter; bad values fall back to defaults."""
    lowered = {str(k).lower(): v for k, v in data.items()}
    fm = FrontMatter(
        title=_as_str(lowered.get('title')),
        date=parse_date(lowered.get('date')),
        draft=_as_bool(lowered.get('draft')) or False,
        tags=_as_list(lowered.get('tags')),
        categories=_as_list(lowered.get('categories')),
        description=_as_str(lowered.get('description')),
        slug=_as_str(lowered.get('slug')) or None,
        layout=_as_str(lowered.get('layout')) or None,
        type=_as_str(lowered.get('type')) or None,
        menus=_parse_menus(lowered.get('menu', lowered.get('menus'))),
    )
    params = lowered.get('params')
    if isinstance(params, dict):
        fm.params.update(params)
    for key, value in data.items():
        if str(key).lower() not in _KNOWN_KEYS:
            fm.params[str(key)] = value
    return fm


def _load_header(text: str) -> tuple[dict[str, Any], str]:
    """Return (raw_mapping, body); raises ValueError for unparseable headers."""
    if m := YAML_RE.match(text):
        try:
            raw = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML front matter: {e}") from e
    elif m := TOML_RE.match(text):
        try:
            raw = tomllib.loads(m.group(1))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML front matter: {e}") from e
    else:
        return {}, text
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid front matter: expected a mapping, got {type(raw).__name__}")
    return raw, text[m.end():]


def parse_content(text: str, source: str = "<string>") -> ParsedContent:
    """Split text into front matter and body.

    Malformed headers never abort the build: the header is discarded with a
    warning and the remaining body is returned with default front matter.
    """
    try:
        raw, body = _load_header(text)
    except ValueError as e:
        logger.warning("%s: %s; using defaults", source, e)
        m = YAML_RE.match(text) or TOML_RE.match(text)
        return ParsedContent(FrontMatter(), text[m.end():] if m else text)
    return ParsedContent(to_front_matter(raw), body)
