"""Render orchestration: markdown slots, template selection, output files"""

import json
import logging
from functools import partial
from pathlib import Path

from markdown_it import MarkdownIt

from mdsite.core.hierarchy import copy_bundle_resources
from mdsite.core.markdown import make_parser, render_markdown
from mdsite.core.models import PageNode, Site
from mdsite.core.outputs import render_robots, render_rss, render_sitemap
from mdsite.core.templates import LayoutEnvironment, page_candidates
from mdsite.core.utils.fs import write_text
from mdsite.docs.links import rewrite_content_link
from mdsite.docs.models import SearchDoc
from mdsite.errors import BuildError, MdsiteError


logger = logging.getLogger(__name__)


def _source_label(page: PageNode) -> str:
    return page.file.filename if page.file else f"<{page.kind} {page.rel_permalink}>"


def render_page_markdown(page: PageNode, md: MarkdownIt) -> None:
    """Fill the content/summary/toc/plain slots from the page's markdown body."""
    if not page.raw_body:
        return
    rewriter = partial(rewrite_content_link, page.link_context) if page.link_context else None
    try:
        result = render_markdown(page.raw_body, link_rewriter=rewriter, md=md)
    except MdsiteError:
        raise
    except Exception as e:
        raise BuildError(f"Failed to render {_source_label(page)}: {e}") from e
    page.content = result.html
    page.summary = result.summary
    page.table_of_contents = result.table_of_contents
    page.plain = result.plain


def render_page(site: Site, env: LayoutEnvironment, page: PageNode) -> str:
    main_candidates, base_candidates, fallback = page_candidates(page, docs_mode=site.docs_mode)
    main = env.select_template(main_candidates) or fallback
    base = env.select_template(base_candidates)
    return env.render_with_base(base, main, page, menus=site.menus)


def search_index_json(pages: list[PageNode]) -> str:
    docs = [
        SearchDoc(title=p.title, url=p.rel_permalink, mount=str(p.params.get("mount", "")), text=p.plain)
        for p in pages
    ]
    return json.dumps([d.model_dump() for d in docs], ensure_ascii=False)


def _write_if_absent(path: Path, content: str) -> bool:
    if path.exists():
        logger.debug("%s exists; not overwritten", path)
        return False
    write_text(path, content)
    return True


def render_site(site: Site, env: LayoutEnvironment, out_dir: Path) -> int:
    """Render every page of site into out_dir; returns the number of files written."""
    md = make_parser(site.config.markdown_preset)
    for page in site.all_pages:
        render_page_markdown(page, md)

    written: dict[str, PageNode] = {}
    count = 0
    for page in site.all_pages:
        if (prev := written.get(page.output_rel_path)) is not None:
            logger.warning(
                "output collision at %s: %s overwrites %s",
                page.output_rel_path, _source_label(page), _source_label(prev),
            )
        html = render_page(site, env, page)
        out_file = out_dir / page.output_rel_path
        write_text(out_file, html)
        written[page.output_rel_path] = page
        count += 1
        if page.resource_dir is not None and page.resource_dir.is_dir():
            copy_bundle_resources(page.resource_dir, out_file.parent)

    if site.docs_mode:
        if site.search_file:
            write_text(out_dir / site.search_file, search_index_json(site.search_docs))
            count += 1
    else:
        count += _write_if_absent(out_dir / "sitemap.xml", render_sitemap(env, site, site.all_pages))
        count += _write_if_absent(out_dir / "index.xml", render_rss(env, site, site.pages))
        count += _write_if_absent(out_dir / "robots.txt", render_robots(site))

    logger.info("rendered %d files into %s", count, out_dir)
    return count
