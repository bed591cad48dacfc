"""URL and relative-path helpers shared by the content and docs builders"""

from typing import NamedTuple


_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "//")


def normalize_slashes(path: str) -> str:
    return path.replace("\\", "/")


def split_path(rel: str) -> list[str]:
    """Split a relative path into non-empty segments."""
    return [p for p in normalize_slashes(rel).split("/") if p]


def combine_url(*parts: str) -> str:
    """Join URL parts into a site-relative permalink: '/a/b', root is '/'."""
    segments = []
    for part in parts:
        segments.extend(p.strip() for p in part.strip().strip("/").split("/") if p.strip())
    return "/" + "/".join(segments)


def output_rel_path(segments: list[str]) -> str:
    """Output file for a list of URL segments: 'a/b/index.html'."""
    return "/".join([*segments, "index.html"])


def ensure_trailing_slash(url: str) -> str:
    if not url:
        return url
    return url if url.endswith("/") else url + "/"


def ensure_leading_slash(url: str) -> str:
    url = url.strip()
    if not url:
        return "/"
    return url if url.startswith("/") else "/" + url


def url_prefix_segments(prefix: str) -> list[str]:
    return split_path(prefix.strip())


def is_external_url(url: str) -> bool:
    return url.strip().lower().startswith(_EXTERNAL_PREFIXES)


def is_markdown_path(path: str) -> bool:
    return path.strip().lower().endswith((".md", ".markdown"))


def without_md_extension(file_name: str) -> str:
    return file_name[:-3] if file_name.lower().endswith(".md") else file_name


class UrlSplit(NamedTuple):
    path: str
    suffix: str


def split_url_suffix(url: str) -> UrlSplit:
    """Split 'a/b.md?x=1#frag' into ('a/b.md', '?x=1#frag')."""
    cuts = [i for i in (url.find("?"), url.find("#")) if i >= 0]
    if not cuts:
        return UrlSplit(url, "")
    cut = min(cuts)
    return UrlSplit(url[:cut], url[cut:])


def normalize_relative_path(base_dir: str, target: str) -> str | None:
    """Resolve target against base_dir, honoring '.' and '..'.

    Returns None when the path climbs above the root of base_dir.
    """
    stack = split_path(base_dir.strip())
    for seg in normalize_slashes(target.strip()).split("/"):
        seg = seg.strip()
        if seg in ("", "."):
            continue
        if seg == "..":
            if not stack:
                return None
            stack.pop()
            continue
        stack.append(seg)
    return "/".join(stack)


def parent_dir_key(dir_key: str) -> str:
    idx = dir_key.rfind("/")
    return "" if idx < 0 else dir_key[:idx]


def last_segment(dir_key: str) -> str:
    return dir_key.rsplit("/", 1)[-1]


def dir_depth(dir_key: str) -> int:
    return 0 if dir_key == "" else dir_key.count("/") + 1


def to_absolute_url(base_url: str, rel_permalink: str) -> str:
    base = ensure_trailing_slash(base_url)
    if not base:
        return rel_permalink
    if rel_permalink == "/":
        return base
    return base + rel_permalink.lstrip("/")
