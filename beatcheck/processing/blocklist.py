"""
Keyword Blocklist
=================

User-maintained list of keywords, one per line, read from
``<user-config-dir>/beatcheck/blocklist.txt``. Keywords are normalized on
load and the file is re-read only when its modification time changes.
"""

import threading
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from ..config.settings import BeatCheckSettings, default_config_dir, get_settings
from ..utils.exceptions import ConfigurationError
from ..utils.logging import get_logger_for_component


ALLOWED_KEYWORD_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 -"
)
DEFAULT_MAX_KEYWORD_LENGTH = 50

logger = get_logger_for_component("blocklist")


class Blocklist:
    """Normalized keyword set with mtime-based hot reload."""

    def __init__(
        self,
        keywords: Iterable[str] = (),
        path: Optional[Path] = None,
        last_modified: Optional[int] = None,
        max_keyword_length: int = DEFAULT_MAX_KEYWORD_LENGTH,
    ):
        self._keywords: FrozenSet[str] = frozenset(keywords)
        self._path = path
        self._last_modified = last_modified
        self._max_keyword_length = max_keyword_length
        self._lock = threading.Lock()

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        settings: Optional[BeatCheckSettings] = None,
    ) -> "Blocklist":
        """Load the blocklist file.

        A missing file yields an empty blocklist. Unreadable files are
        logged and also yield an empty blocklist. If the settings cannot be
        loaded, the default location and keyword length are used.

        Args:
            path: Blocklist file, defaults to the configured location
            settings: Settings instance, defaults to the global settings

        Returns:
            Loaded blocklist
        """
        if settings is None:
            try:
                settings = get_settings()
            except ConfigurationError as e:
                logger.warning(f"Using default blocklist settings: {e}")

        if settings is not None:
            default_path = settings.blocklist.resolved_path()
            max_length = settings.blocklist.max_keyword_length
        else:
            default_path = default_config_dir() / "blocklist.txt"
            max_length = DEFAULT_MAX_KEYWORD_LENGTH

        path = Path(path).expanduser() if path else default_path

        keywords, last_modified = cls._read(path, max_length)
        return cls(
            keywords=keywords,
            path=path,
            last_modified=last_modified,
            max_keyword_length=max_length,
        )

    @staticmethod
    def _read(path: Path, max_length: int):
        keywords = set()
        last_modified = None

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return keywords, last_modified
        except PermissionError:
            logger.warning(f"Permission denied reading blocklist at {path}")
            return keywords, last_modified
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error reading blocklist at {path}: {e}")
            return keywords, last_modified

        try:
            last_modified = path.stat().st_mtime_ns
        except OSError as e:
            logger.debug(f"Could not stat blocklist at {path}: {e}")

        for line in content.splitlines():
            normalized = Blocklist.normalize_keyword(line, max_length)
            if normalized:
                keywords.add(normalized)

        logger.debug(f"Loaded {len(keywords)} blocklist keywords from {path}")
        return keywords, last_modified

    @staticmethod
    def normalize_keyword(
        line: str, max_length: int = DEFAULT_MAX_KEYWORD_LENGTH, quiet: bool = False
    ) -> Optional[str]:
        """Normalize one blocklist line.

        Args:
            line: Raw line from the blocklist file
            max_length: Longest accepted keyword
            quiet: Suppress rejection warnings

        Returns:
            Lowercase keyword with single internal spaces, or None if rejected
        """
        trimmed = line.strip()
        if not trimmed:
            return None

        if len(trimmed) > max_length:
            if not quiet:
                logger.warning(
                    f"Keyword exceeds {max_length} characters, rejecting: {trimmed}"
                )
            return None

        if not set(trimmed) <= ALLOWED_KEYWORD_CHARS:
            if not quiet:
                logger.warning(
                    "Keyword contains invalid characters (only letters, numbers, "
                    f"spaces, hyphens allowed), rejecting: {trimmed}"
                )
            return None

        normalized = " ".join(trimmed.lower().split())

        if not normalized or not set(normalized) <= ALLOWED_KEYWORD_CHARS:
            return None

        return normalized

    def reload(self) -> bool:
        """Re-read the file if its modification time changed.

        Returns:
            True if the keyword set was replaced
        """
        if self._path is None:
            return False

        with self._lock:
            try:
                current_mtime = self._path.stat().st_mtime_ns
            except OSError:
                current_mtime = None

            if current_mtime == self._last_modified:
                return False

            keywords, last_modified = self._read(self._path, self._max_keyword_length)
            self._keywords = frozenset(keywords)
            self._last_modified = last_modified

        logger.info(f"Blocklist reloaded: {len(self._keywords)} keywords")
        return True

    @property
    def keywords(self) -> FrozenSet[str]:
        return self._keywords

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def last_modified(self) -> Optional[int]:
        """File mtime in nanoseconds at the last successful read."""
        return self._last_modified

    def is_empty(self) -> bool:
        return not self._keywords

    def matches(self, text: str) -> bool:
        """Whether ``text`` normalizes to a blocked keyword."""
        normalized = self.normalize_keyword(text, self._max_keyword_length, quiet=True)
        return normalized is not None and normalized in self._keywords

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._keywords

    def __len__(self) -> int:
        return len(self._keywords)

    def __repr__(self) -> str:
        return f"Blocklist(path={self._path}, keywords={len(self._keywords)})"
