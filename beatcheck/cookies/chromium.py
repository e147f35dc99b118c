"""Chromium-family (Chrome, Chromium) cookie store."""

import time
from pathlib import Path
from typing import Iterable, Optional

from ..config.settings import BeatCheckSettings, get_settings
from .base import CookieStore, chromium_timestamp


class ChromiumCookieStore(CookieStore):
    """Reads the ``cookies`` table of a Chromium profile database."""

    browser = "chromium"
    table = "cookies"
    host_column = "host_key"
    expiry_column = "expires_utc"

    def __init__(
        self,
        paths: Optional[Iterable[str]] = None,
        settings: Optional[BeatCheckSettings] = None,
    ):
        """Initialize Chromium cookie store.

        Args:
            paths: Candidate database paths, first existing one is used
            settings: Settings instance, used when ``paths`` is omitted
        """
        super().__init__()
        if paths is None:
            paths = (settings or get_settings()).content.chromium_cookie_paths
        self.paths = [Path(p).expanduser() for p in paths]

    def locate(self) -> Optional[Path]:
        for path in self.paths:
            if path.is_file():
                return path
        return None

    def now_timestamp(self) -> int:
        return chromium_timestamp(int(time.time()))
