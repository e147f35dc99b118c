"""
Browser Cookie Jar
==================

Fallback chain over local browser cookie stores. Stores are consulted in
order and the first one that yields cookies for a domain wins.
"""

from typing import List, Optional, Sequence

from ..config.settings import BeatCheckSettings
from ..utils.exceptions import CookieStoreError
from ..utils.logging import get_logger_for_component
from .base import CookieStore
from .chromium import ChromiumCookieStore
from .firefox import FirefoxCookieStore


class BrowserCookieJar:
    """Cookie lookup across Chromium and Firefox with soft failures."""

    def __init__(
        self,
        stores: Optional[Sequence[CookieStore]] = None,
        settings: Optional[BeatCheckSettings] = None,
    ):
        """Initialize cookie jar.

        Args:
            stores: Stores in priority order, defaults to Chromium then Firefox
            settings: Settings used to build the default stores
        """
        if stores is None:
            stores = [
                ChromiumCookieStore(settings=settings),
                FirefoxCookieStore(settings=settings),
            ]
        self.stores: List[CookieStore] = list(stores)
        self.logger = get_logger_for_component("cookie_jar")

    def cookie_header(self, domain: str) -> str:
        """Return a ``Cookie`` header value for ``domain``, or ``""``.

        A store that fails to copy, open or query its database is skipped.
        """
        for store in self.stores:
            try:
                header = store.cookie_header(domain)
            except CookieStoreError as e:
                self.logger.warning(
                    f"Cookie store {store.browser} failed: {e.user_message}",
                    extra={"error_details": e.to_dict()},
                )
                continue

            if header:
                self.logger.debug(f"Using {store.browser} cookies for {domain}")
                return header

        return ""
