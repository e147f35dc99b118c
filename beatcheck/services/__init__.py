"""
BeatCheck Services
==================

Full article content fetching used by the reader and the CLI.
"""

from .content_fetcher import ContentFetcher

__all__ = [
    'ContentFetcher',
]
