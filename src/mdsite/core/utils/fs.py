"""Filesystem helpers: discovery, text I/O, copying, and timestamps"""

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable


MD_EXTENSIONS = {'.md'}


def iter_markdown_files(root: Path) -> Iterable[Path]:
    """Yield .md files under root in sorted order; nothing if root is missing."""
    if not root.is_dir():
        return
    for p in sorted(root.rglob('*')):
        if p.is_file() and p.suffix.lower() in MD_EXTENSIONS:
            yield p


def iter_files(root: Path) -> Iterable[Path]:
    if not root.is_dir():
        return
    for p in sorted(root.rglob('*')):
        if p.is_file():
            yield p


def read_text(path: Path) -> str:
    return path.read_text(encoding='utf-8')


def write_text(path: Path, content: str) -> None:
    """Write content, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')


def copy_file(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)


def copy_tree(src: Path, dest: Path) -> int:
    """Copy every file under src into dest, overwriting. Returns files copied."""
    count = 0
    for f in iter_files(src):
        copy_file(f, dest / f.relative_to(src))
        count += 1
    return count


def delete_tree(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path)


def mtime_utc(path: Path) -> datetime:
    """Last-modified time of path as an aware UTC datetime."""
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
