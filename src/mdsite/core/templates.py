"""Layout lookup cascade and Jinja2 rendering over site and theme layout overlays"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from mdsite.core.models import PageNode
from mdsite.core.utils.paths import to_absolute_url
from mdsite.core.utils.slug import slugify
from mdsite.errors import BuildError


logger = logging.getLogger(__name__)

DEFAULT_SINGLE = "_default/single.html"
DEFAULT_LIST = "_default/list.html"

BUILTIN_TEMPLATES = {
    DEFAULT_SINGLE: """\
{% if baseof %}{% extends baseof %}{% endif %}<!doctype html>
<html lang="{{ site.config.language_code }}">
<head><meta charset="utf-8"><title>{{ page.title }} | {{ site.title }}</title></head>
<body>
{% block main %}<article>
<h1>{{ page.title }}</h1>
{{ page.content }}
</article>{% endblock %}
</body>
</html>
""",
    DEFAULT_LIST: """\
{% if baseof %}{% extends baseof %}{% endif %}<!doctype html>
<html lang="{{ site.config.language_code }}">
<head><meta charset="utf-8"><title>{{ page.title }} | {{ site.title }}</title></head>
<body>
{% block main %}<section>
<h1>{{ page.title }}</h1>
{{ page.content }}
<ul>
{% for p in page.pages %}<li><a href="{{ p.rel_permalink }}">{{ p.title }}</a></li>
{% endfor %}</ul>
</section>{% endblock %}
</body>
</html>
""",
}


def _normalize_name(name: str) -> str:
    name = name.strip().lstrip("/")
    return name if name.endswith(".html") or name.endswith(".xml") else name + ".html"


# --- candidate lists, most specific first ---

def single_candidates(type_: str, section: str, layout: Optional[str] = None) -> list[str]:
    names = []
    if layout:
        names += [f"{type_}/{layout}.html", f"{section}/{layout}.html", f"_default/{layout}.html", f"{layout}.html"]
        names += [f"{type_}/single.html", f"{section}/single.html", DEFAULT_SINGLE]
    else:
        names.append(f"{type_}/single.html")
        names.append(f"{section}/single.html" if section else DEFAULT_SINGLE)
        names.append(DEFAULT_SINGLE)
    return _dedupe(names)


def single_base_candidates(type_: str, section: str) -> list[str]:
    if not type_:
        return ["_default/baseof.html", "baseof.html"]
    return _dedupe([f"{type_}/baseof.html", f"{section}/baseof.html", "_default/baseof.html", "baseof.html"])


def list_candidates(type_: str, section: str) -> list[str]:
    return _dedupe([f"{type_}/list.html", f"{section}/list.html", DEFAULT_LIST])


def list_base_candidates(type_: str, section: str) -> list[str]:
    return _dedupe([f"{type_}/baseof.html", f"{section}/baseof.html", "_default/baseof.html"])


def home_candidates() -> list[str]:
    return ["index.html", "home.html", "_default/home.html", DEFAULT_LIST, "list.html"]


def term_candidates(taxonomy: str) -> list[str]:
    return [f"{taxonomy}/taxonomy.html", "taxonomy/taxonomy.html", "_default/taxonomy.html", DEFAULT_LIST]


def terms_candidates(taxonomy: str) -> list[str]:
    return [f"{taxonomy}/terms.html", "taxonomy/terms.html", "_default/terms.html", DEFAULT_LIST]


def taxonomy_base_candidates(taxonomy: str) -> list[str]:
    return [f"{taxonomy}/baseof.html", "taxonomy/baseof.html", "_default/baseof.html"]


def docs_home_candidates() -> list[str]:
    return ["index.html", "docs/home.html", "docs/list.html", DEFAULT_LIST]


def docs_list_candidates() -> list[str]:
    return ["docs/list.html", DEFAULT_LIST]


def docs_single_candidates() -> list[str]:
    return ["docs/single.html", DEFAULT_SINGLE]


def docs_base_candidates() -> list[str]:
    return ["_default/baseof.html"]


def _dedupe(names: list[str]) -> list[str]:
    """Drop repeats and names with an empty directory part (no type or section)."""
    out = []
    for name in names:
        if name.startswith("/"):
            continue
        if name not in out:
            out.append(name)
    return out


def page_candidates(page: PageNode, docs_mode: bool = False) -> tuple[list[str], list[str], str]:
    """(main candidates, base candidates, fallback name) for a page node."""
    if docs_mode:
        if page.kind == "home":
            return docs_home_candidates(), docs_base_candidates(), DEFAULT_LIST
        if page.kind == "section":
            return docs_list_candidates(), docs_base_candidates(), DEFAULT_LIST
        return docs_single_candidates(), docs_base_candidates(), DEFAULT_SINGLE

    if page.kind == "home":
        return home_candidates(), list_base_candidates(page.type, page.section), DEFAULT_LIST
    if page.kind == "term":
        taxonomy = page.params.get("taxonomy", page.type)
        return term_candidates(taxonomy), taxonomy_base_candidates(taxonomy), DEFAULT_LIST
    if page.kind == "taxonomy":
        taxonomy = page.params.get("taxonomy", page.type)
        return terms_candidates(taxonomy), taxonomy_base_candidates(taxonomy), DEFAULT_LIST
    if page.kind == "section":
        return list_candidates(page.type, page.section), list_base_candidates(page.type, page.section), DEFAULT_LIST
    return (
        single_candidates(page.type, page.section, page.layout),
        single_base_candidates(page.type, page.section),
        DEFAULT_SINGLE,
    )


class LayoutEnvironment:
    """Jinja2 environment over `<site>/layouts` and `<theme>/layouts`.

    Selection only considers real files in the two overlays; the built-in
    templates serve as render-time fallbacks.
    """

    def __init__(self, site_dir: Path, theme_dir: Optional[Path] = None):
        self.layout_dirs = [Path(site_dir) / "layouts"]
        if theme_dir is not None:
            self.layout_dirs.append(Path(theme_dir) / "layouts")
        self.env = Environment(
            loader=ChoiceLoader([
                FileSystemLoader([str(d) for d in self.layout_dirs]),
                DictLoader(BUILTIN_TEMPLATES),
            ]),
            autoescape=select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )
        self.env.filters["slugify"] = slugify
        self.env.globals["now"] = lambda: datetime.now(timezone.utc)

    def select_template(self, candidates: list[str]) -> Optional[str]:
        """First candidate present in either overlay (site before theme), else None."""
        names = [_normalize_name(c) for c in candidates if c and c.strip()]
        for name in names:
            if any((layout_dir / name).is_file() for layout_dir in self.layout_dirs):
                return name
        return None

    def render_with_base(self, base: Optional[str], main: str, page: PageNode, **extra) -> str:
        """Render `main` for page; templates wrap themselves via `{% extends baseof %}`."""
        try:
            template = self.env.get_template(main)
        except TemplateNotFound:
            logger.warning("template %r not found for %s; rendering empty page", main, page.rel_permalink)
            return ""
        except TemplateSyntaxError as e:
            logger.error("template syntax error in %s line %s: %s", e.filename or e.name, e.lineno, e.message)
            raise BuildError(f"Template syntax error in {e.name or main}: {e.message}") from e

        site = page.site
        base_url = site.base_url if site else ""
        try:
            return template.render(
                page=page,
                site=site,
                baseof=base,
                absurl=lambda rel: to_absolute_url(base_url, rel),
                **extra,
            )
        except TemplateSyntaxError as e:
            logger.error("template syntax error in %s line %s: %s", e.filename or e.name, e.lineno, e.message)
            raise BuildError(f"Template syntax error in {e.name}: {e.message}") from e
        except TemplateError as e:
            logger.error("template %s failed for %s: %s", main, page.rel_permalink, e)
            raise BuildError(f"Template {main} failed for {page.rel_permalink}: {e}") from e
