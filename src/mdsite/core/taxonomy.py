"""Taxonomy indexing: term pages and taxonomy root pages for tags and categories"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from mdsite.core.models import PageNode, Site
from mdsite.core.utils.paths import combine_url, output_rel_path
from mdsite.core.utils.slug import humanize, slugify


logger = logging.getLogger(__name__)

TermGetter = Callable[[PageNode], Iterable[str]]

TAXONOMIES: dict[str, TermGetter] = {
    "tags":       lambda page: page.tags,
    "categories": lambda page: page.categories,
}


@dataclass
class TaxonomyBuild:
    terms: list[PageNode]
    root:  PageNode
    index: dict[str, list[PageNode]]


def group_terms(pages: list[PageNode], get_terms: TermGetter) -> dict[str, list[PageNode]]:
    """Group pages by term slug, keeping page order; a page appears once per term."""
    index: dict[str, list[PageNode]] = {}
    for page in pages:
        seen: set[str] = set()
        for term in get_terms(page):
            slug = slugify(term.strip())
            if not slug or slug in seen:
                continue
            seen.add(slug)
            index.setdefault(slug, []).append(page)
    return index


def build_taxonomy(site: Site, pages: list[PageNode], taxonomy: str, get_terms: TermGetter) -> TaxonomyBuild:
    index = group_terms(pages, get_terms)
    terms = []
    for slug in sorted(index):
        members = index[slug]
        terms.append(PageNode(
            kind="term",
            title=humanize(slug),
            rel_permalink=combine_url(taxonomy, slug),
            output_rel_path=output_rel_path([taxonomy, slug]),
            type=taxonomy,
            slug=slug,
            date=members[0].date,
            lastmod=max(p.lastmod for p in members),
            params={"term": slug, "taxonomy": taxonomy},
            pages=list(members),
            site=site,
            language=site.language,
        ))

    root = PageNode(
        kind="taxonomy",
        title=humanize(taxonomy),
        rel_permalink=combine_url(taxonomy),
        output_rel_path=output_rel_path([taxonomy]),
        type=taxonomy,
        slug=taxonomy,
        params={"taxonomy": taxonomy},
        pages=list(terms),
        site=site,
        language=site.language,
    )
    for term in terms:
        term.parent = root
        term.ancestors = [root]

    site.taxonomies[taxonomy] = index
    logger.debug("taxonomy %r: %d terms", taxonomy, len(terms))
    return TaxonomyBuild(terms=terms, root=root, index=index)
