"""
Feed Link Discovery
===================

Locates the RSS/Atom endpoint advertised by an HTML page and resolves
relative hrefs against the page URL.
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse


# <link rel="alternate" type="application/rss+xml" href="...">
FEED_LINK_PATTERN = re.compile(
    r"""<link[^>]*rel=["']alternate["'][^>]*type=["']application/(rss|atom)\+xml["'][^>]*href=["']([^"']+)["']"""
)

# <link type="application/rss+xml" rel="alternate" href="...">
# href must still follow type; pages that put href first are not matched.
FEED_LINK_TYPE_FIRST_PATTERN = re.compile(
    r"""<link[^>]*type=["']application/(rss|atom)\+xml["'][^>]*href=["']([^"']+)["']"""
)


def resolve_url(href: str, base_url: str) -> str:
    """Resolve a possibly relative href against a base URL.

    Absolute ``http(s)://`` hrefs are returned untouched. Relative,
    root-relative, parent-relative and protocol-relative hrefs are joined
    onto ``base_url``. If ``base_url`` is not an absolute URL the href is
    returned unchanged.
    """
    if href.startswith("http://") or href.startswith("https://"):
        return href

    try:
        base = urlparse(base_url)
    except ValueError:
        return href

    if not base.scheme or not base.netloc:
        return href

    try:
        return urljoin(base_url, href)
    except ValueError:
        return href


def find_feed_link(html: str, base_url: str) -> Optional[str]:
    """Return the first alternate RSS/Atom link in ``html``, resolved.

    Args:
        html: Page markup
        base_url: URL the page was served from (after redirects)

    Returns:
        Absolute feed URL, or None if the page advertises no feed
    """
    match = FEED_LINK_PATTERN.search(html) or FEED_LINK_TYPE_FIRST_PATTERN.search(html)
    if not match:
        return None

    return resolve_url(match.group(2), base_url)
