"""Site-wide outputs: RSS feed, sitemap, robots.txt"""

from datetime import datetime, timezone
from email.utils import format_datetime

from markupsafe import Markup

from mdsite.core.models import PageNode, Site
from mdsite.core.templates import LayoutEnvironment
from mdsite.core.utils.paths import ensure_trailing_slash, to_absolute_url


RSS_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
<channel>
<title>{{ site.title }}</title>
<link>{{ link }}</link>
<description>{{ site.title }}</description>
<language>{{ site.config.language_code }}</language>
<lastBuildDate>{{ now }}</lastBuildDate>
<generator>mdsite</generator>
{% for item in items %}<item>
<title>{{ item.title }}</title>
<link>{{ item.link }}</link>
<guid isPermaLink="true">{{ item.link }}</guid>
<pubDate>{{ item.pub_date }}</pubDate>
<description>{{ item.summary }}</description>
<content:encoded>{{ item.content }}</content:encoded>
</item>
{% endfor %}</channel>
</rss>
"""

SITEMAP_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
{% for url in urls %}<url><loc>{{ url.loc }}</loc><lastmod>{{ url.lastmod }}</lastmod></url>
{% endfor %}</urlset>
"""


def _cdata(raw: str) -> Markup:
    return Markup("<![CDATA[" + str(raw).replace("]]>", "]]]]><![CDATA[>") + "]]>")


def _rfc822(iso: str, fallback: datetime) -> str:
    try:
        dt = datetime.fromisoformat(iso)
    except (TypeError, ValueError):
        dt = fallback
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def render_rss(env: LayoutEnvironment, site: Site, pages: list[PageNode]) -> str:
    """RSS 2.0 feed of pages; a `rss.xml` layout in either overlay replaces the built-in one."""
    now = datetime.now(timezone.utc)
    items = [
        {
            "title": p.title,
            "link": to_absolute_url(site.base_url, p.rel_permalink),
            "pub_date": _rfc822(p.date, now),
            "summary": _cdata(p.summary),
            "content": _cdata(p.content),
        }
        for p in pages
    ]
    name = env.select_template(["rss.xml", "_default/rss.xml"])
    template = env.env.get_template(name) if name else env.env.from_string(RSS_TEMPLATE)
    return template.render(
        site=site, pages=pages, items=items,
        link=to_absolute_url(site.base_url, "/"),
        now=format_datetime(now, usegmt=True),
    )


def render_sitemap(env: LayoutEnvironment, site: Site, pages: list[PageNode]) -> str:
    now = datetime.now(timezone.utc).isoformat()
    urls = [
        {"loc": to_absolute_url(site.base_url, p.rel_permalink), "lastmod": p.lastmod or now}
        for p in pages
    ]
    name = env.select_template(["sitemap.xml", "_default/sitemap.xml"])
    template = env.env.get_template(name) if name else env.env.from_string(SITEMAP_TEMPLATE)
    return template.render(site=site, pages=pages, urls=urls)


def render_robots(site: Site) -> str:
    base = ensure_trailing_slash(site.base_url)
    sitemap_url = base + "sitemap.xml" if base else "/sitemap.xml"
    return f"User-agent: *\nAllow: /\nSitemap: {sitemap_url}\n"
