"""Markdown rendering via markdown-it: HTML, summary, table of contents, plain text"""

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import unquote

from markdown_it import MarkdownIt
from markupsafe import Markup, escape

from mdsite.core.utils.slug import slugify


MORE_MARKER = "<!--more-->"
TOC_LEVELS = (2, 3)

LinkRewriter = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class RenderResult:
    html:              Markup
    summary:           Markup
    table_of_contents: Markup
    plain:             str


def make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _heading_level(token) -> int | None:
    """Extract heading level (1-6) from a heading_open token tag, else None."""
    if token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _inline_text(token) -> str:
    if not token.children:
        return token.content
    return "".join(c.content for c in token.children if c.type in ("text", "code_inline"))


def _assign_heading_ids(tokens: list) -> list[tuple[int, str, str]]:
    """Give every heading a unique id; returns (level, text, id) per heading."""
    headings = []
    used: dict[str, int] = {}
    for i, tok in enumerate(tokens):
        if tok.type != "heading_open":
            continue
        text = _inline_text(tokens[i + 1]) if i + 1 < len(tokens) else ""
        base = tok.attrGet("id") or slugify(text) or "section"
        n = used.get(base, 0)
        used[base] = n + 1
        hid = base if n == 0 else f"{base}-{n}"
        tok.attrSet("id", hid)
        headings.append((_heading_level(tok), text, hid))
    return headings


def _rewrite_links(tokens: list, rewriter: LinkRewriter) -> None:
    for tok in tokens:
        for child in tok.children or ():
            if child.type != "link_open":
                continue
            href = child.attrGet("href")
            if href is None:
                continue
            new = rewriter(unquote(str(href)))
            if new is not None:
                child.attrSet("href", new)


def render_toc(headings: list[tuple[int, str, str]], levels: tuple[int, int] = TOC_LEVELS) -> Markup:
    """Nested <ul> table of contents for headings within levels."""
    low, high = levels
    picked = [(lvl, text, hid) for lvl, text, hid in headings if lvl is not None and low <= lvl <= high]
    if not picked:
        return Markup("")

    out = ['<nav id="TableOfContents">']
    stack: list[int] = []
    for lvl, text, hid in picked:
        if stack and lvl <= stack[-1]:
            out.append("</li>")
        while stack and lvl < stack[-1]:
            stack.pop()
            out.append("</ul></li>" if stack else "</ul>")
        if not stack or lvl > stack[-1]:
            stack.append(lvl)
            out.append("<ul>")
        out.append(f'<li><a href="#{escape(hid)}">{escape(text)}</a>')
    while stack:
        stack.pop()
        out.append("</li></ul>")
    out.append("</nav>")
    return Markup("".join(out))


def _first_block(tokens: list) -> list:
    """Token slice of the first top-level paragraph, else of the first block."""
    start = next((i for i, t in enumerate(tokens) if t.type == "paragraph_open" and t.level == 0), None)
    if start is None:
        start = 0 if tokens else None
    if start is None:
        return []
    if tokens[start].nesting == 0:
        return tokens[start:start + 1]
    for end in range(start + 1, len(tokens)):
        if tokens[end].level == tokens[start].level and tokens[end].nesting == -1:
            return tokens[start:end + 1]
    return tokens[start:]


def render_markdown(
    body: str,
    preset: str = "gfm-like",
    link_rewriter: Optional[LinkRewriter] = None,
    md: Optional[MarkdownIt] = None,
) -> RenderResult:
    """Render a markdown body.

    The summary is everything before a `<!--more-->` marker, else the first
    paragraph. Links are passed through link_rewriter, percent-decoded, when
    given; a None return leaves the href as written.
    """
    md = md or make_parser(preset)
    env: dict = {}
    tokens = md.parse(body, env)
    headings = _assign_heading_ids(tokens)
    if link_rewriter is not None:
        _rewrite_links(tokens, link_rewriter)
    html = Markup(md.renderer.render(tokens, md.options, env))

    if MORE_MARKER in body:
        head = body.split(MORE_MARKER, 1)[0]
        head_tokens = md.parse(head, {})
        if link_rewriter is not None:
            _rewrite_links(head_tokens, link_rewriter)
        summary = Markup(md.renderer.render(head_tokens, md.options, {}))
    else:
        summary = Markup(md.renderer.render(_first_block(tokens), md.options, env))

    plain = " ".join(html.striptags().split())
    return RenderResult(html=html, summary=summary, table_of_contents=render_toc(headings), plain=plain)
