"""
Settings management for NuGet Config Creator.

The tool keeps its feed definitions in a JSON file. Because a reinstall or
upgrade can leave the user without that file, every save also refreshes a
backup copy in the data directory, and a missing settings file is restored
from that backup on the next start.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import os
import shutil
from pathlib import Path
from typing import Dict, List, Any, Optional, Tuple

from .constants import (
    APP_VERSION,
    CONFIG_DIR_PERMISSIONS, CONFIG_FILE_PERMISSIONS,
    MAX_SETTINGS_FILE_SIZE, RESERVED_COMMANDS,
    SETTINGS_BACKUP_FILE_NAME,
    get_backup_dir, get_default_settings_path,
)
from .exceptions import ConfigurationError, FeedValidationError
from .models import AppSettings, FeedConfig, FeedCommand, FeedKind, NuGetFeedsConfig
from .utils.logger import get_logger
from .utils.validators import (
    validate_command_name,
    validate_feed_key,
    validate_feed_name,
    validate_feed_source,
    validate_settings_json,
    validate_settings_path,
)

logger = get_logger(__name__)


def parse_version(version: str) -> Tuple[int, ...]:
    """
    Parse a dotted version string for comparison.

    Non-numeric parts count as 0, so "1.2.beta" compares as (1, 2, 0).
    """
    parts = []
    for part in str(version).split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


class Config:
    """Manages the persisted tool settings."""

    def __init__(self, config_file: Optional[str] = None, backup_dir: Optional[str] = None) -> None:
        """
        Initialize settings.

        Args:
            config_file: Path to the settings file
            backup_dir: Directory holding settings backups
        """
        if config_file:
            try:
                validate_settings_path(config_file)
                self.config_file = str(Path(config_file).expanduser())
            except ValueError as e:
                raise ConfigurationError(f"Invalid settings file path: {e}")
        else:
            self.config_file = str(get_default_settings_path())

        self.backup_dir = Path(backup_dir) if backup_dir else get_backup_dir()
        self._settings = self._load_config()

    @property
    def backup_file(self) -> Path:
        """Location of the rolling settings backup."""
        return self.backup_dir / SETTINGS_BACKUP_FILE_NAME

    @property
    def settings(self) -> AppSettings:
        """The loaded settings."""
        return self._settings

    @property
    def feeds(self) -> NuGetFeedsConfig:
        """Feed definitions."""
        return self._settings.nuget_feeds

    def _read_settings_file(self, path: Path) -> Dict[str, Any]:
        """
        Read and validate a settings file.

        Raises:
            ValueError: If the file is too large or has an invalid structure
            json.JSONDecodeError: If the file is not JSON
            OSError: If the file cannot be read
        """
        file_size = path.stat().st_size
        if file_size > MAX_SETTINGS_FILE_SIZE:
            raise ValueError(f"Settings file too large: {file_size} bytes")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        validate_settings_json(data)
        return data

    def _load_config(self) -> AppSettings:
        """
        Load settings from file, restoring or creating them when missing.

        Returns:
            AppSettings instance
        """
        path = Path(self.config_file)

        if not path.exists():
            if self.backup_file.exists():
                logger.info(f"Settings file missing, restoring from backup {self.backup_file}")
                try:
                    self._copy_file(self.backup_file, path)
                except OSError as e:
                    logger.error(f"Failed to restore settings from backup: {e}")
                    return AppSettings()
            else:
                logger.info(f"Creating default settings at {path}")
                settings = AppSettings()
                self._settings = settings
                try:
                    self.save_config()
                except ConfigurationError as e:
                    logger.error(f"Failed to create settings file: {e}")
                return settings

        try:
            data = self._read_settings_file(path)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in settings file {path}: {e}")
            logger.info("Using default settings")
            return AppSettings()
        except PermissionError as e:
            logger.error(f"Permission denied reading settings file {path}: {e}")
            return AppSettings()
        except OSError as e:
            logger.error(f"Error reading settings file {path}: {e}")
            return AppSettings()
        except ValueError as e:
            logger.error(f"Invalid settings structure in {path}: {e}")
            logger.info("Using default settings")
            return AppSettings()

        settings = AppSettings.from_dict(data)
        logger.debug(f"Loaded settings from {path}")

        if parse_version(settings.version) < parse_version(APP_VERSION):
            settings = self._upgrade_settings(path, settings)

        return settings

    def _upgrade_settings(self, path: Path, settings: AppSettings) -> AppSettings:
        """Keep a copy of settings written by an older version, then stamp the current one."""
        old_version = settings.version
        versioned_backup = self.backup_dir / f"appsettings-{old_version}.json"
        try:
            self._copy_file(path, versioned_backup)
            logger.info(f"Backed up settings from version {old_version} to {versioned_backup}")
        except OSError as e:
            logger.warning(f"Failed to back up settings from version {old_version}: {e}")

        # from_dict already filled missing fields with defaults
        settings.version = APP_VERSION
        self._settings = settings
        try:
            self.save_config()
            logger.info(f"Upgraded settings from version {old_version} to {APP_VERSION}")
        except ConfigurationError as e:
            logger.error(f"Failed to save upgraded settings: {e}")
        return settings

    def _copy_file(self, src: Path, dst: Path) -> None:
        """Copy a settings file, creating the destination directory."""
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
        try:
            os.chmod(dst, CONFIG_FILE_PERMISSIONS)
        except OSError as e:
            logger.warning(f"Failed to set permissions on {dst}: {e}")

    def save_config(self) -> None:
        """
        Save current settings to file and refresh the backup.

        Raises:
            ConfigurationError: If saving fails
        """
        path = Path(self.config_file)
        temp_path = path.with_suffix(".tmp")

        try:
            config_dir = path.parent
            config_dir.mkdir(parents=True, exist_ok=True)

            try:
                os.chmod(config_dir, CONFIG_DIR_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on settings directory: {e}")

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())

            # Atomic rename
            temp_path.replace(path)

            try:
                os.chmod(path, CONFIG_FILE_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on settings file: {e}")

            logger.info(f"Saved settings to {path}")

        except PermissionError as e:
            raise ConfigurationError(f"Permission denied saving settings: {e}")
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigurationError(f"Failed to save settings: {e}")

        try:
            self.backup_config()
        except ConfigurationError as e:
            logger.warning(f"Settings saved but backup failed: {e}")

    def backup_config(self) -> Path:
        """
        Copy the settings file to the backup location.

        Returns:
            Path of the backup file

        Raises:
            ConfigurationError: If there is nothing to back up or the copy fails
        """
        path = Path(self.config_file)
        if not path.exists():
            raise ConfigurationError(f"No settings file to back up at {path}")

        try:
            self._copy_file(path, self.backup_file)
        except OSError as e:
            raise ConfigurationError(f"Failed to back up settings: {e}")

        logger.info(f"Backed up settings to {self.backup_file}")
        return self.backup_file

    def restore_config(self) -> Path:
        """
        Replace the settings file with the backup and reload it.

        Returns:
            Path of the restored settings file

        Raises:
            ConfigurationError: If no backup exists or the copy fails
        """
        if not self.backup_file.exists():
            raise ConfigurationError(f"No settings backup found at {self.backup_file}")

        try:
            self._read_settings_file(self.backup_file)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Settings backup is not usable: {e}")

        path = Path(self.config_file)
        try:
            self._copy_file(self.backup_file, path)
        except OSError as e:
            raise ConfigurationError(f"Failed to restore settings: {e}")

        self._settings = self._load_config()
        logger.info(f"Restored settings from {self.backup_file}")
        return path

    def reset_to_defaults(self) -> None:
        """Reset all feed definitions to defaults."""
        self._settings = AppSettings()
        self.save_config()
        logger.info("Reset settings to defaults")

    def get_all_settings(self) -> Dict[str, Any]:
        """Get all settings as a dictionary."""
        return self._settings.to_dict()

    def get_feed_commands(self) -> List[Tuple[str, FeedCommand]]:
        """
        Get the feed commands offered by the CLI.

        Returns:
            (command name, FeedCommand) pairs, built-in feeds first. Custom
            feeds whose command clashes with an earlier one are skipped.
        """
        feeds = self.feeds
        commands = [
            FeedCommand(FeedKind.NUGET_ORG, feeds.nuget_org.command, feeds.nuget_org.key,
                        feeds.nuget_org.url, feeds.nuget_org.protocol_version),
            FeedCommand(FeedKind.LOCAL, feeds.local.command, feeds.local.key,
                        feeds.local.default_path),
            FeedCommand(FeedKind.MYGET, feeds.myget.command, feeds.myget.key,
                        feeds.myget.url, feeds.myget.protocol_version),
        ]
        for name, feed in feeds.custom.items():
            commands.append(FeedCommand(FeedKind.CUSTOM, feed.command, feed.key,
                                        feed.url, feed.protocol_version, name=name))

        result: List[Tuple[str, FeedCommand]] = []
        seen = set()
        for command in commands:
            if command.command in seen or command.command in RESERVED_COMMANDS:
                logger.warning(f"Skipping feed command '{command.command}': name already in use")
                continue
            seen.add(command.command)
            result.append((command.command, command))
        return result

    def _builtin_feeds(self) -> List[Tuple[str, str]]:
        """(key, command) of the built-in feeds."""
        feeds = self.feeds
        return [
            (feeds.nuget_org.key, feeds.nuget_org.command),
            (feeds.myget.key, feeds.myget.command),
            (feeds.local.key, feeds.local.command),
        ]

    def add_custom_feed(self, name: str, url: str, key: Optional[str] = None,
                        command: Optional[str] = None,
                        protocol_version: Optional[str] = None) -> FeedConfig:
        """
        Add or replace a user-defined feed.

        Args:
            name: Feed name
            url: Feed URL or path
            key: Package source key (defaults to the lowercased name)
            command: CLI command (defaults to the lowercased name)
            protocol_version: Optional NuGet protocol version

        Returns:
            The stored feed definition

        Raises:
            FeedValidationError: If the definition is invalid or clashes with another feed
        """
        if not validate_feed_name(name):
            raise FeedValidationError(f"Invalid feed name: '{name}'")

        key = key or name.lower()
        command = command or name.lower()

        if not validate_feed_key(key):
            raise FeedValidationError(f"Invalid feed key: '{key}'")
        if not validate_command_name(command):
            raise FeedValidationError(
                f"Invalid command name: '{command}' (use lowercase letters, digits and '-')")
        if command in RESERVED_COMMANDS:
            raise FeedValidationError(f"Command name '{command}' is reserved")
        if not validate_feed_source(url):
            raise FeedValidationError(f"Invalid feed URL or path: '{url}'")
        if protocol_version is not None and not protocol_version.isdigit():
            raise FeedValidationError(f"Invalid protocol version: '{protocol_version}'")

        others = self._builtin_feeds() + [
            (feed.key, feed.command)
            for other_name, feed in self.feeds.custom.items()
            if other_name.lower() != name.lower()
        ]
        for other_key, other_command in others:
            if other_key.lower() == key.lower():
                raise FeedValidationError(f"Key '{key}' is already used by another feed")
            if other_command == command:
                raise FeedValidationError(f"Command '{command}' is already used by another feed")

        # Replace any feed with the same name regardless of case
        for existing in list(self.feeds.custom):
            if existing.lower() == name.lower():
                del self.feeds.custom[existing]

        feed = FeedConfig(key=key, command=command, url=url, protocol_version=protocol_version)
        self.feeds.custom[name] = feed
        self.save_config()
        logger.info(f"Added custom feed: {name}")
        return feed

    def remove_custom_feed(self, name: str) -> bool:
        """
        Remove a user-defined feed.

        Returns:
            True if a feed was removed
        """
        for existing in list(self.feeds.custom):
            if existing.lower() == name.lower():
                del self.feeds.custom[existing]
                self.save_config()
                logger.info(f"Removed custom feed: {existing}")
                return True
        return False
