"""
Utility modules for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from .logger import get_logger, set_global_config, get_current_log_file
from .validators import (
    validate_feed_name,
    validate_command_name,
    validate_feed_key,
    validate_feed_url,
    validate_feed_source,
    validate_settings_path,
    validate_settings_json,
    validate_editor_command,
)

__all__ = [
    "get_logger",
    "set_global_config",
    "get_current_log_file",
    "validate_feed_name",
    "validate_command_name",
    "validate_feed_key",
    "validate_feed_url",
    "validate_feed_source",
    "validate_settings_path",
    "validate_settings_json",
    "validate_editor_command",
]
