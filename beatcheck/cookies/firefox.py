"""
Firefox Cookie Store
====================

Finds the default Firefox profile through ``profiles.ini`` and reads its
``moz_cookies`` table.
"""

import configparser
import time
from pathlib import Path
from typing import Optional

from ..config.settings import BeatCheckSettings, get_settings
from .base import CookieStore, firefox_timestamp


COOKIES_FILE = "cookies.sqlite"


class FirefoxCookieStore(CookieStore):
    """Reads ``cookies.sqlite`` from the default Firefox profile."""

    browser = "firefox"
    table = "moz_cookies"
    host_column = "host"
    expiry_column = "expiry"

    def __init__(
        self,
        profiles_dir: Optional[str] = None,
        settings: Optional[BeatCheckSettings] = None,
    ):
        """Initialize Firefox cookie store.

        Args:
            profiles_dir: Directory holding ``profiles.ini``
            settings: Settings instance, used when ``profiles_dir`` is omitted
        """
        super().__init__()
        if profiles_dir is None:
            profiles_dir = (settings or get_settings()).content.firefox_profiles_dir
        self.profiles_dir = Path(profiles_dir).expanduser()

    def locate(self) -> Optional[Path]:
        """Cookie database of the default profile.

        The profile marked ``Default=1`` in ``profiles.ini`` wins when its
        database exists. Otherwise the first profile directory holding a
        cookie database is used.
        """
        if not self.profiles_dir.is_dir():
            return None

        default_cookies = self._default_profile_cookies()
        if default_cookies is not None:
            return default_cookies

        for entry in sorted(self.profiles_dir.iterdir()):
            candidate = entry / COOKIES_FILE
            if entry.is_dir() and candidate.is_file():
                return candidate

        return None

    def now_timestamp(self) -> int:
        return firefox_timestamp(int(time.time()))

    def _default_profile_cookies(self) -> Optional[Path]:
        ini_path = self.profiles_dir / "profiles.ini"
        if not ini_path.is_file():
            return None

        parser = configparser.ConfigParser(interpolation=None, strict=False)
        try:
            parser.read(ini_path, encoding="utf-8")
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read {ini_path}: {e}")
            return None

        for section in parser.sections():
            if section == "General":
                continue

            profile = parser[section]
            if profile.get("Default") != "1" or not profile.get("Path"):
                continue

            # Absolute paths survive the join unchanged
            candidate = self.profiles_dir / profile["Path"] / COOKIES_FILE
            if candidate.is_file():
                return candidate

        return None
