"""
BeatCheck Processing Module
===========================

Feed fetching, feed discovery and keyword blocklist filtering.
"""

from .feed_fetcher import FeedFetcher, FetchResult
from .feed_discovery import find_feed_link, resolve_url
from .blocklist import Blocklist

__all__ = [
    'FeedFetcher',
    'FetchResult',
    'find_feed_link',
    'resolve_url',
    'Blocklist',
]
