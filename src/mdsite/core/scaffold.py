"""Site and content scaffolding for `mdsite init` and `mdsite new`"""

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment

from mdsite.core.utils.fs import read_text, write_text
from mdsite.core.utils.slug import humanize, slugify
from mdsite.errors import MdsiteError


DEFAULT_ARCHETYPE = """\
---
title: "{{ title }}"
date: "{{ date }}"
draft: true
description: ""
tags: []
categories: []
---

Write your post here.
"""

CONFIG_YAML = """\
base_url: "http://localhost:1313/"
language_code: "en-us"
title: "{title}"
"""

BASEOF_HTML = """\
<!doctype html>
<html lang="{{ site.config.language_code }}">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{{ page.title }} | {{ site.title }}</title>
    <meta name="description" content="{{ page.description or site.title }}" />
    <link rel="stylesheet" href="/style.css" />
    <link rel="alternate" type="application/rss+xml" href="/index.xml" title="{{ site.title }}" />
  </head>
  <body>
    {% include "partials/header.html" %}
    <main class="container">
      {% block main %}{% endblock %}
    </main>
    {% include "partials/footer.html" %}
  </body>
</html>
"""

HEADER_HTML = """\
<header class="container">
  <h1><a href="/">{{ site.title }}</a></h1>
  <nav>
    {% for entry in menus.get("main", []) %}<a href="{{ entry.rel_url }}">{{ entry.name }}</a>
    {% else %}<a href="/">Home</a>
    <a href="/posts">Posts</a>
    <a href="/tags">Tags</a>
    <a href="/categories">Categories</a>
    {% endfor %}
  </nav>
</header>
"""

FOOTER_HTML = """\
<footer class="container">
  <p class="muted">Built with mdsite</p>
</footer>
"""

SINGLE_HTML = """\
{% extends baseof %}
{% block main %}
<article>
  <h2>{{ page.title }}</h2>
  <p class="muted">
    {{ page.date[:10] }}
    {% for tag in page.tags %}<a href="/tags/{{ tag | slugify }}">{{ tag }}</a> {% endfor %}
  </p>
  <div class="content">{{ page.content }}</div>
</article>
{% endblock %}
"""

LIST_HTML = """\
{% extends baseof %}
{% block main %}
<section>
  <h2>{{ page.title }}</h2>
  <div class="content">{{ page.content }}</div>
  <ul class="post-list">
    {% for p in page.regular_pages %}
    <li>
      <a href="{{ p.rel_permalink }}">{{ p.title }}</a>
      {% if p.summary %}<div class="summary">{{ p.summary }}</div>{% endif %}
      <span class="muted">{{ p.date[:10] }}</span>
    </li>
    {% endfor %}
  </ul>
</section>
{% endblock %}
"""

TERMS_HTML = """\
{% extends baseof %}
{% block main %}
<section>
  <h2>{{ page.title }}</h2>
  <ul class="post-list">
    {% for term in page.pages %}
    <li><a href="{{ term.rel_permalink }}">{{ term.title }}</a> <span class="muted">{{ term.pages | length }}</span></li>
    {% endfor %}
  </ul>
</section>
{% endblock %}
"""

TAXONOMY_HTML = """\
{% extends baseof %}
{% block main %}
<section>
  <h2>{{ page.title }}</h2>
  <ul class="post-list">
    {% for p in page.pages %}
    <li><a href="{{ p.rel_permalink }}">{{ p.title }}</a> <span class="muted">{{ p.date[:10] }}</span></li>
    {% endfor %}
  </ul>
</section>
{% endblock %}
"""

STYLE_CSS = """\
:root { color-scheme: light dark; }
body { font-family: system-ui, sans-serif; margin: 0; line-height: 1.5; }
.container { max-width: 860px; margin: 0 auto; padding: 1.25rem; }
.muted { color: #777; }
nav { display: flex; gap: 1rem; flex-wrap: wrap; }
.post-list { list-style: none; padding: 0; }
"""

INDEX_MD = """\
---
title: "Home"
description: "A new mdsite site."
---

Welcome to your new site.
"""

HELLO_MD = """\
---
title: "Hello World"
date: "{date}"
description: "The first post."
tags: ["hello", "mdsite"]
categories: ["meta"]
---

This is your first post.
<!--more-->

```
mdsite build
mdsite serve
```
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_site(target_dir: Path | str) -> Path:
    """Create a site skeleton in target_dir, which must be missing or empty."""
    root = Path(target_dir).resolve()
    if root.exists() and any(root.iterdir()):
        raise MdsiteError(f"Directory not empty: {root}")
    title = humanize(root.name) or "mdsite Site"
    files = {
        "config.yaml": CONFIG_YAML.format(title=title),
        "archetypes/default.md": DEFAULT_ARCHETYPE,
        "layouts/_default/baseof.html": BASEOF_HTML,
        "layouts/_default/single.html": SINGLE_HTML,
        "layouts/_default/list.html": LIST_HTML,
        "layouts/_default/terms.html": TERMS_HTML,
        "layouts/_default/taxonomy.html": TAXONOMY_HTML,
        "layouts/partials/header.html": HEADER_HTML,
        "layouts/partials/footer.html": FOOTER_HTML,
        "static/style.css": STYLE_CSS,
        "content/_index.md": INDEX_MD,
        "content/posts/hello-world.md": HELLO_MD.format(date=_now()),
    }
    for rel, text in files.items():
        write_text(root / rel, text)
    return root


def new_content(site_dir: Path | str, content_path: str, content_dir: str = "content") -> Path:
    """Create a content file from the site's default archetype (or the built-in one)."""
    site_dir = Path(site_dir).resolve()
    rel = content_path.strip().lstrip("/")
    if not rel.lower().endswith(".md"):
        rel += ".md"
    dest = site_dir / content_dir / rel
    if dest.exists():
        raise MdsiteError(f"File already exists: {dest}")

    archetype = site_dir / "archetypes" / "default.md"
    source = read_text(archetype) if archetype.is_file() else DEFAULT_ARCHETYPE
    title = humanize(slugify(Path(rel).stem))
    write_text(dest, Environment(keep_trailing_newline=True).from_string(source).render(title=title, date=_now()))
    return dest
