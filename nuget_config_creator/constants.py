"""
Application constants for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
from pathlib import Path

# Application info
APP_NAME = "NuGet Config Creator"
APP_VERSION = "1.0.0"
PROG_NAME = "nugetconfigcreator"

# File permissions (octal)
CONFIG_DIR_PERMISSIONS = 0o700  # rwx------
CONFIG_FILE_PERMISSIONS = 0o600  # rw-------

# Document format
DEFAULT_NUGET_CONFIG_FILE = "NuGet.config"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
XML_INDENT = "  "
ROOT_TAG = "configuration"
SOURCES_TAG = "packageSources"
ENTRY_TAG = "add"
KEY_ATTR = "key"
VALUE_ATTR = "value"
PROTOCOL_VERSION_ATTR = "protocolVersion"

# Built-in feeds
DEFAULT_NUGET_ORG_KEY = "nuget"
DEFAULT_NUGET_ORG_COMMAND = "nuget"
DEFAULT_NUGET_ORG_URL = "https://api.nuget.org/v3/index.json"
DEFAULT_NUGET_ORG_PROTOCOL_VERSION = "3"

DEFAULT_MYGET_KEY = "myget"
DEFAULT_MYGET_COMMAND = "myget"
DEFAULT_MYGET_URL = "https://www.myget.org/F/nuget/api/v3/index.json"

DEFAULT_LOCAL_KEY = "local"
DEFAULT_LOCAL_COMMAND = "local"
DEFAULT_LOCAL_FEED_PATH = r"C:\nuget" if os.name == "nt" else str(Path.home() / "nuget")

# Commands that custom feeds may not shadow
RESERVED_COMMANDS = {
    "remove",
    "disable",
    "enable",
    "list",
    "show",
    "feeds",
    "settings",
    "help",
}

# Feed definition validation
FEED_NAME_PATTERN = r'^[A-Za-z0-9][A-Za-z0-9._\-]*$'
COMMAND_NAME_PATTERN = r'^[a-z0-9][a-z0-9\-]*$'
FEED_URL_PATTERN = r'^https?://[a-zA-Z0-9\-._~:/?#[\]@!$&\'()*+,;=%]+$'
MAX_FEED_KEY_LENGTH = 256
MAX_FEED_SOURCE_LENGTH = 2048

# Settings files
SETTINGS_FILE_NAME = "appsettings.json"
SETTINGS_BACKUP_FILE_NAME = "appsettings.backup.json"
MAX_SETTINGS_FILE_SIZE = 1024 * 1024  # 1MB


# Paths
def get_config_dir() -> Path:
    """Get the configuration directory path."""
    override = os.environ.get("NCC_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / "nuget-config-creator"


def get_data_dir() -> Path:
    """Get the data directory path (holds settings backups)."""
    override = os.environ.get("NCC_DATA_DIR")
    if override:
        return Path(override)
    return Path.home() / ".local" / "share" / "nuget-config-creator"


def get_backup_dir() -> Path:
    """Get the settings backup directory path."""
    return get_data_dir() / "backups"


def get_default_settings_path() -> Path:
    """Get the default settings file path."""
    return get_config_dir() / SETTINGS_FILE_NAME


def get_log_dir() -> Path:
    """Get the log directory path."""
    return get_config_dir() / "logs"
