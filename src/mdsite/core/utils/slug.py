"""Slug generation and title humanizing for content identifiers"""

import re


_SEPARATORS = re.compile(r'[\s\-_./]+')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug.

    Letters and digits are kept, runs of space/-/_/./ collapse to one hyphen,
    everything else is dropped.
    """
    text = text.strip().lower()
    text = ''.join(ch for ch in text if ch.isalnum() or ch in ' -_./' or ch.isspace())
    text = _SEPARATORS.sub('-', text)
    return text.strip('-')


def humanize(slug: str) -> str:
    """Turn 'getting-started_guide' into 'Getting Started Guide'."""
    words = [p.strip() for p in re.split(r'[-_.]', slug)]
    return ' '.join(w[:1].upper() + w[1:] for w in words if w)
