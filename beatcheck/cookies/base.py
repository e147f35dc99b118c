"""
Base Cookie Store Interface
===========================

Abstract base class and data model for reading cookies out of a local
browser's SQLite cookie database.

The live database is never opened directly: browsers hold a lock on it,
so each lookup works on a private temporary copy that is always removed.
"""

import os
import shutil
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ..utils.exceptions import CookieStoreError, ErrorCode
from ..utils.logging import get_logger_for_component


# Seconds between 1601-01-01 (Chromium/Windows epoch) and 1970-01-01
CHROMIUM_EPOCH_OFFSET = 11644473600


def chromium_timestamp(unix_seconds: int) -> int:
    """Convert Unix seconds to Chromium microseconds since 1601-01-01."""
    return (unix_seconds + CHROMIUM_EPOCH_OFFSET) * 1_000_000


def firefox_timestamp(unix_seconds: int) -> int:
    """Firefox stores cookie expiry as plain Unix seconds."""
    return unix_seconds


@dataclass
class Cookie:
    """Single browser cookie."""
    name: str
    value: str

    def to_header_fragment(self) -> str:
        return f"{self.name}={self.value}"


def format_cookie_header(cookies: Iterable[Cookie]) -> str:
    """Join cookies into a ``Cookie`` header value."""
    return "; ".join(cookie.to_header_fragment() for cookie in cookies)


class CookieStore(ABC):
    """Abstract base class for browser cookie databases."""

    browser: str = ""
    table: str = ""
    host_column: str = ""
    expiry_column: str = ""

    def __init__(self):
        self.logger = get_logger_for_component(f"cookies.{self.browser}")

    @abstractmethod
    def locate(self) -> Optional[Path]:
        """Return the cookie database path, or None if the browser has none."""
        pass

    @abstractmethod
    def now_timestamp(self) -> int:
        """Current time in the browser's expiry units."""
        pass

    def lookup(self, domain: str) -> List[Cookie]:
        """Return unexpired cookies set for ``domain`` or ``.domain``.

        Args:
            domain: Host name, e.g. ``example.com``

        Returns:
            Cookies in database row order, empty if no database exists

        Raises:
            CookieStoreError: If the database cannot be copied, opened or queried
        """
        path = self.locate()
        if path is None:
            self.logger.debug(f"No {self.browser} cookie database found")
            return []

        copy_path = self._copy_database(path)
        try:
            cookies = self._query(copy_path, domain, path)
        finally:
            self._remove_copy(copy_path)

        self.logger.debug(f"Found {len(cookies)} {self.browser} cookies for {domain}")
        return cookies

    def cookie_header(self, domain: str) -> str:
        return format_cookie_header(self.lookup(domain))

    def _copy_database(self, path: Path) -> Path:
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f"beatcheck-{self.browser}-cookies-", suffix=".sqlite"
            )
            os.close(fd)
        except OSError as e:
            raise CookieStoreError(
                f"Could not create temporary copy of cookie database: {e}",
                browser=self.browser,
                store_path=path,
                error_code=ErrorCode.COOKIE_STORE_COPY,
            ) from e

        copy_path = Path(tmp_name)
        try:
            shutil.copyfile(path, copy_path)
        except OSError as e:
            self._remove_copy(copy_path)
            raise CookieStoreError(
                f"Could not copy cookie database: {e}",
                browser=self.browser,
                store_path=path,
                error_code=ErrorCode.COOKIE_STORE_COPY,
            ) from e

        return copy_path

    def _query(self, copy_path: Path, domain: str, source_path: Path) -> List[Cookie]:
        sql = (
            f"SELECT name, value FROM {self.table} "
            f"WHERE ({self.host_column} = ? OR {self.host_column} LIKE ?) "
            f"AND {self.expiry_column} > ? AND name != '' AND value != ''"
        )

        try:
            connection = sqlite3.connect(f"{copy_path.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise CookieStoreError(
                f"Could not open cookie database: {e}",
                browser=self.browser,
                store_path=source_path,
                error_code=ErrorCode.COOKIE_STORE_OPEN,
            ) from e

        try:
            rows = connection.execute(
                sql, (domain, f".{domain}", self.now_timestamp())
            ).fetchall()
        except sqlite3.Error as e:
            raise CookieStoreError(
                f"Could not query cookie database: {e}",
                browser=self.browser,
                store_path=source_path,
                error_code=ErrorCode.COOKIE_STORE_QUERY,
            ) from e
        finally:
            connection.close()

        return [Cookie(name=name, value=value) for name, value in rows]

    def _remove_copy(self, copy_path: Path) -> None:
        try:
            copy_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove temporary cookie copy {copy_path}: {e}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(browser={self.browser})"
