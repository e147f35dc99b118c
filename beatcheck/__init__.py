"""
BeatCheck - Feed Fetching Core
==============================

RSS/Atom ingestion for a terminal feed reader.

Main Components:
- Feed fetching: bounded concurrent refresh and feed discovery
- Full content: cookie-authenticated article fetching via local browsers
- Blocklist: normalized keyword list with hot reload
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.2.0"
__author__ = "BeatCheck Development Team"
__description__ = "RSS/Atom feed fetching core for the BeatCheck reader"

# Core imports for easy access
from .config.settings import get_settings
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import BeatCheckError

__all__ = [
    "get_settings",
    "configure_application_logging",
    "get_logger_for_component",
    "BeatCheckError",
]
