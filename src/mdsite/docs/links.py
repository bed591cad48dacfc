"""Link resolution for docs mounts: nav targets and in-content markdown links"""

import logging
from dataclasses import dataclass
from typing import Optional

from mdsite.core.utils.paths import (
    is_external_url,
    is_markdown_path,
    normalize_relative_path,
    split_url_suffix,
)
from mdsite.docs.config import DocsMountConfig
from mdsite.errors import BuildError


logger = logging.getLogger(__name__)

RouteMap = dict[str, str]


@dataclass(frozen=True)
class DocsLinkContext:
    """Where a docs page lives, for rewriting the links it contains."""
    mount:        DocsMountConfig
    dir_key:      str
    routes:       RouteMap
    strict_links: bool = False


def route_key(rel_path: str) -> str:
    return rel_path.strip().lower()


def github_blob_url(mount: DocsMountConfig, repo_rel_path: str) -> Optional[str]:
    """`{repo}/blob/{branch}/{path}`, or None when the mount has no repository."""
    repo = (mount.repo or "").strip().rstrip("/")
    if not repo:
        return None
    rel = repo_rel_path.strip().lstrip("/")
    if not rel:
        return None
    return f"{repo}/blob/{mount.branch or 'main'}/{rel}"


def edit_url(mount: DocsMountConfig, rel_path: str) -> Optional[str]:
    """Repository URL for editing a mount-relative source file."""
    repo_path = (mount.repo_path or "").strip().strip("/")
    rel = rel_path.lstrip("/")
    return github_blob_url(mount, f"{repo_path}/{rel}" if repo_path else rel)


def _repo_path(mount: DocsMountConfig) -> str:
    return (mount.repo_path or "").strip().strip("/")


def _escaped_blob_url(mount: DocsMountConfig, dir_key: str, path: str, suffix: str) -> Optional[str]:
    """Resolve a path that climbs out of the mount against the repository layout."""
    repo_path = _repo_path(mount)
    if not repo_path:
        return None
    base = f"{repo_path}/{dir_key}" if dir_key.strip() else repo_path
    repo_rel = normalize_relative_path(base, path)
    if repo_rel is None:
        return None
    url = github_blob_url(mount, repo_rel)
    return url + suffix if url else None


def resolve_nav_link(mount: DocsMountConfig, dir_key: str, target: str, routes: RouteMap) -> Optional[str]:
    """Resolve a navigation link target to a URL; None drops the entry."""
    raw = target.strip()
    if not raw:
        return None
    if is_external_url(raw) or raw.startswith("#"):
        return raw

    path, suffix = split_url_suffix(raw)
    path = path.strip()
    if not path:
        return None

    if path.startswith("/"):
        resolved = path.lstrip("/")
    else:
        resolved = normalize_relative_path(dir_key, path)
    if resolved is None:
        return _escaped_blob_url(mount, dir_key, path, suffix)

    if not is_markdown_path(resolved):
        return raw

    if (mapped := routes.get(route_key(resolved))) is not None:
        return mapped + suffix

    repo_path = _repo_path(mount)
    if not repo_path:
        return None
    repo_rel = normalize_relative_path(repo_path, resolved)
    url = github_blob_url(mount, repo_rel) if repo_rel is not None else None
    return url + suffix if url else None


def rewrite_content_link(ctx: DocsLinkContext, url: str) -> Optional[str]:
    """Rewritten href for a link inside a docs page, or None to leave it untouched.

    Raises BuildError for links that leave the mount when strict links are on.
    """
    url = url.strip()
    if not url or url.startswith("#") or is_external_url(url) or url.lower().startswith("javascript:"):
        return None

    path, suffix = split_url_suffix(url)
    path = path.strip()
    if not path:
        return None

    prefix = ctx.mount.url_prefix
    if path.startswith("/"):
        if prefix == "/":
            resolved = path.lstrip("/")
        elif path.lower().startswith(prefix.lower()):
            resolved = path[len(prefix):].lstrip("/")
        else:
            return None
    else:
        resolved = normalize_relative_path(ctx.dir_key, path)
        if resolved is None:
            if ctx.strict_links:
                raise BuildError(f"Out-of-mount link from {ctx.mount.name}: {url}")
            logger.debug("%s: out-of-mount link %r", ctx.mount.name, url)
            return _escaped_blob_url(ctx.mount, ctx.dir_key, path, suffix)

    if not is_markdown_path(resolved):
        return None
    mapped = ctx.routes.get(route_key(resolved))
    return mapped + suffix if mapped is not None else None
