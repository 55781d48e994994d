"""
Input validation for feed definitions, settings paths and editor commands.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
import re
import shlex
import shutil
from pathlib import Path
from typing import Any, List
from urllib.parse import urlparse

from ..constants import (
    FEED_NAME_PATTERN,
    COMMAND_NAME_PATTERN,
    FEED_URL_PATTERN,
    MAX_FEED_KEY_LENGTH,
    MAX_FEED_SOURCE_LENGTH,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Editors that may be launched by 'settings edit'
ALLOWED_EDITORS = {
    'nano', 'vim', 'vi', 'nvim', 'emacs', 'micro', 'gedit', 'kate',
    'code', 'subl', 'notepad', 'notepad++', 'mousepad', 'pluma', 'xed',
}


def validate_feed_name(name: str) -> bool:
    """
    Validate a custom feed name.

    Args:
        name: Feed name to validate

    Returns:
        True if name is valid
    """
    if not name or len(name) > 100:
        return False
    return re.match(FEED_NAME_PATTERN, name) is not None


def validate_command_name(command: str) -> bool:
    """
    Validate a CLI command name for a feed.

    Args:
        command: Command name to validate

    Returns:
        True if command is a lowercase word usable as a sub-command
    """
    if not command or len(command) > 50:
        return False
    return re.match(COMMAND_NAME_PATTERN, command) is not None


def validate_feed_key(key: str) -> bool:
    """
    Validate a package source key.

    NuGet allows spaces and punctuation in keys; only control characters,
    quotes and surrounding whitespace are rejected.
    """
    if not key or len(key) > MAX_FEED_KEY_LENGTH:
        return False
    if key != key.strip():
        return False
    if any(ord(ch) < 32 or ch in '"<>' for ch in key):
        return False
    return True


def validate_feed_url(url: str) -> bool:
    """
    Validate a feed URL.

    Args:
        url: URL to validate

    Returns:
        True if URL is an http(s) URL with a hostname
    """
    if not url or len(url) > MAX_FEED_SOURCE_LENGTH:
        return False

    if not re.match(FEED_URL_PATTERN, url):
        logger.debug(f"Invalid URL format: {url}")
        return False

    try:
        parsed = urlparse(url)
    except ValueError as e:
        logger.debug(f"Failed to parse URL {url}: {e}")
        return False

    if parsed.scheme not in ['http', 'https']:
        logger.debug(f"Invalid URL scheme: {parsed.scheme}")
        return False

    if not parsed.hostname:
        logger.debug(f"No hostname in URL: {url}")
        return False

    if parsed.scheme != 'https' and parsed.hostname not in ['localhost', '127.0.0.1', '::1']:
        logger.warning(f"Feed URL is not using HTTPS: {url}")

    return True


def validate_feed_source(source: str) -> bool:
    """
    Validate a feed source, which is either a URL or a filesystem path.

    Args:
        source: URL or path

    Returns:
        True if source is usable as a package source value
    """
    if not source or len(source) > MAX_FEED_SOURCE_LENGTH:
        return False

    if any(ord(ch) < 32 for ch in source):
        return False

    if re.match(r'^[a-zA-Z][a-zA-Z0-9+.\-]*://', source):
        return validate_feed_url(source)

    # Filesystem path (absolute, relative, UNC or drive-letter)
    return source.strip() == source


def validate_settings_path(path: str) -> bool:
    """
    Validate a settings file path.

    Args:
        path: Path to validate

    Returns:
        True if path is valid

    Raises:
        ValueError: If path is unusable
    """
    if not path:
        raise ValueError("Empty path not allowed")

    resolved_path = Path(path).expanduser()

    if resolved_path.suffix.lower() != '.json':
        raise ValueError(f"Invalid settings file extension: {resolved_path.suffix or '(none)'}")

    if resolved_path.exists() and not resolved_path.is_file():
        raise ValueError(f"Path is not a regular file: {path}")

    return True


def validate_settings_json(data: Any) -> bool:
    """
    Validate the structure of a loaded settings document.

    Args:
        data: Parsed JSON

    Returns:
        True if structure is valid

    Raises:
        ValueError: Describing the first problem found
    """
    if not isinstance(data, dict):
        raise ValueError("Settings must be a JSON object")

    version = data.get("version")
    if version is not None and not isinstance(version, str):
        raise ValueError("'version' must be a string")

    feeds = data.get("nuget_feeds", {})
    if not isinstance(feeds, dict):
        raise ValueError("'nuget_feeds' must be an object")

    for name in ("nuget_org", "myget", "local"):
        feed = feeds.get(name, {})
        if feed is not None and not isinstance(feed, dict):
            raise ValueError(f"'nuget_feeds.{name}' must be an object")
        for field_name, value in (feed or {}).items():
            if value is not None and not isinstance(value, str):
                raise ValueError(f"'nuget_feeds.{name}.{field_name}' must be a string")

    custom = feeds.get("custom", {})
    if custom is not None and not isinstance(custom, dict):
        raise ValueError("'nuget_feeds.custom' must be an object")

    for name, feed in (custom or {}).items():
        if not isinstance(feed, dict):
            raise ValueError(f"Custom feed '{name}' must be an object")
        if not feed.get("url"):
            raise ValueError(f"Custom feed '{name}' has no url")

    return True


def validate_editor_command(editor_env: str) -> List[str]:
    """
    Validate the editor command taken from the environment.

    Args:
        editor_env: Value of $EDITOR / $VISUAL

    Returns:
        Command as an argument list

    Raises:
        ValueError: If the editor is not allowed or not installed
    """
    try:
        parts = shlex.split(editor_env)
    except ValueError as e:
        raise ValueError(f"Cannot parse editor command: {e}")

    if not parts:
        raise ValueError("Empty editor command")

    editor_name = os.path.basename(parts[0])
    if editor_name.lower().endswith('.exe'):
        editor_name = editor_name[:-4]

    if editor_name.lower() not in ALLOWED_EDITORS:
        raise ValueError(f"Editor not allowed: {editor_name}")

    if shutil.which(parts[0]) is None:
        raise ValueError(f"Editor not found: {parts[0]}")

    return parts
