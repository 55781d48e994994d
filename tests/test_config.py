"""
Tests for settings management.
"""

import json
from unittest.mock import patch

import pytest

from nuget_config_creator.config import Config, parse_version
from nuget_config_creator.constants import APP_VERSION, DEFAULT_NUGET_ORG_URL
from nuget_config_creator.exceptions import ConfigurationError, FeedValidationError
from nuget_config_creator.models import FeedKind


def write_settings(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class TestParseVersion:
    """Version comparison."""

    def test_numeric(self):
        assert parse_version("1.2.3") == (1, 2, 3)

    def test_ordering(self):
        assert parse_version("0.9.0") < parse_version("1.0.0")
        assert parse_version("1.10.0") > parse_version("1.9.0")

    def test_non_numeric_parts(self):
        assert parse_version("1.2.beta") == (1, 2, 0)


class TestConfigLoading:
    """Creating, loading and upgrading the settings file."""

    def test_defaults_created_on_first_run(self, app_config, settings_file):
        assert settings_file.exists()
        assert app_config.backup_file.exists()
        assert app_config.settings.version == APP_VERSION
        assert app_config.feeds.nuget_org.url == DEFAULT_NUGET_ORG_URL
        assert app_config.feeds.custom == {}

        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert data["nuget_feeds"]["myget"]["key"] == "myget"

    def test_default_settings_path_from_environment(self, tmp_app_dirs):
        config_dir, data_dir = tmp_app_dirs

        config = Config()

        assert config.config_file == str(config_dir / "appsettings.json")
        assert config.backup_dir == data_dir / "backups"

    def test_missing_file_restored_from_backup(self, app_config, settings_file):
        app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")
        settings_file.unlink()

        reloaded = Config(str(settings_file), backup_dir=str(app_config.backup_dir))

        assert settings_file.exists()
        assert "Company" in reloaded.feeds.custom

    def test_older_version_is_upgraded(self, tmp_app_dirs, settings_file):
        _, data_dir = tmp_app_dirs
        write_settings(settings_file, {
            "version": "0.9.0",
            "nuget_feeds": {"local": {"default_path": "/srv/feed"}},
        })

        config = Config(str(settings_file), backup_dir=str(data_dir / "backups"))

        assert config.settings.version == APP_VERSION
        assert config.feeds.local.default_path == "/srv/feed"
        assert config.feeds.nuget_org.url == DEFAULT_NUGET_ORG_URL

        versioned = data_dir / "backups" / "appsettings-0.9.0.json"
        assert versioned.exists()
        assert json.loads(versioned.read_text(encoding="utf-8"))["version"] == "0.9.0"
        assert json.loads(settings_file.read_text(encoding="utf-8"))["version"] == APP_VERSION

    def test_missing_version_counts_as_old(self, tmp_app_dirs, settings_file):
        _, data_dir = tmp_app_dirs
        write_settings(settings_file, {"nuget_feeds": {}})

        config = Config(str(settings_file), backup_dir=str(data_dir / "backups"))

        assert config.settings.version == APP_VERSION
        assert (data_dir / "backups" / "appsettings-0.0.0.json").exists()

    def test_invalid_json_uses_defaults_and_keeps_file(self, tmp_app_dirs, settings_file):
        _, data_dir = tmp_app_dirs
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{not json", encoding="utf-8")

        config = Config(str(settings_file), backup_dir=str(data_dir / "backups"))

        assert config.feeds.nuget_org.url == DEFAULT_NUGET_ORG_URL
        assert settings_file.read_text(encoding="utf-8") == "{not json"

    def test_invalid_structure_uses_defaults(self, tmp_app_dirs, settings_file):
        _, data_dir = tmp_app_dirs
        write_settings(settings_file, {"version": APP_VERSION, "nuget_feeds": {"custom": {"x": {}}}})

        config = Config(str(settings_file), backup_dir=str(data_dir / "backups"))

        assert config.feeds.custom == {}

    def test_invalid_settings_path(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Config(str(tmp_path / "settings.yaml"))

    def test_save_failure_raises(self, app_config):
        with patch('nuget_config_creator.config.os.fsync', side_effect=OSError("disk full")):
            with pytest.raises(ConfigurationError):
                app_config.save_config()


class TestBackupRestore:
    """Manual backup and restore."""

    def test_restore_returns_backed_up_state(self, app_config):
        app_config.backup_config()

        with patch.object(app_config, 'backup_config'):
            app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")
        assert "Company" in app_config.feeds.custom

        app_config.restore_config()

        assert app_config.feeds.custom == {}

    def test_restore_without_backup(self, app_config):
        app_config.backup_file.unlink()

        with pytest.raises(ConfigurationError):
            app_config.restore_config()

    def test_backup_without_settings_file(self, app_config, settings_file):
        settings_file.unlink()

        with pytest.raises(ConfigurationError):
            app_config.backup_config()

    def test_reset_to_defaults(self, app_config):
        app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")

        app_config.reset_to_defaults()

        assert app_config.feeds.custom == {}
        assert app_config.get_all_settings()["nuget_feeds"]["custom"] == {}


class TestCustomFeeds:
    """Adding and removing user-defined feeds."""

    def test_add_custom_feed_defaults(self, app_config, settings_file):
        feed = app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")

        assert feed.key == "company"
        assert feed.command == "company"
        assert feed.protocol_version is None

        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert data["nuget_feeds"]["custom"]["Company"]["url"] == "https://nuget.example.com/v3/index.json"

    def test_add_custom_feed_with_path(self, app_config):
        feed = app_config.add_custom_feed("shared", "/mnt/shared/nuget", protocol_version="3")
        assert feed.url == "/mnt/shared/nuget"
        assert feed.protocol_version == "3"

    def test_add_replaces_same_name_ignoring_case(self, app_config):
        app_config.add_custom_feed("Company", "https://a.example.com/v3/index.json")
        app_config.add_custom_feed("company", "https://b.example.com/v3/index.json")

        assert list(app_config.feeds.custom) == ["company"]
        assert app_config.feeds.custom["company"].url == "https://b.example.com/v3/index.json"

    @pytest.mark.parametrize("kwargs", [
        {"name": "bad name", "url": "https://x.example.com"},
        {"name": "Company", "url": "ftp://x.example.com"},
        {"name": "Company", "url": "https://x.example.com", "command": "Upper"},
        {"name": "Company", "url": "https://x.example.com", "command": "remove"},
        {"name": "Company", "url": "https://x.example.com", "key": " padded"},
        {"name": "Company", "url": "https://x.example.com", "protocol_version": "v3"},
        {"name": "Company", "url": "https://x.example.com", "key": "NuGet"},
        {"name": "Company", "url": "https://x.example.com", "command": "local"},
    ])
    def test_add_custom_feed_rejected(self, app_config, kwargs):
        with pytest.raises(FeedValidationError):
            app_config.add_custom_feed(**kwargs)
        assert app_config.feeds.custom == {}

    def test_custom_feeds_cannot_share_command(self, app_config):
        app_config.add_custom_feed("one", "https://one.example.com", command="feed")

        with pytest.raises(FeedValidationError):
            app_config.add_custom_feed("two", "https://two.example.com", command="feed")

    def test_remove_custom_feed(self, app_config):
        app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")

        assert app_config.remove_custom_feed("COMPANY") is True
        assert app_config.remove_custom_feed("Company") is False
        assert app_config.feeds.custom == {}


class TestFeedCommands:
    """Commands generated from settings."""

    def test_builtin_order(self, app_config):
        commands = app_config.get_feed_commands()

        assert [name for name, _ in commands] == ["nuget", "local", "myget"]
        assert [feed.kind for _, feed in commands] == [FeedKind.NUGET_ORG, FeedKind.LOCAL, FeedKind.MYGET]

    def test_custom_feed_appended(self, app_config):
        app_config.add_custom_feed("Company", "https://nuget.example.com/v3/index.json")

        name, feed = app_config.get_feed_commands()[-1]

        assert name == "company"
        assert feed.kind is FeedKind.CUSTOM
        assert feed.name == "Company"
        assert feed.to_source().value == "https://nuget.example.com/v3/index.json"

    def test_clashing_commands_from_file_are_skipped(self, tmp_app_dirs, settings_file):
        _, data_dir = tmp_app_dirs
        write_settings(settings_file, {
            "version": APP_VERSION,
            "nuget_feeds": {"custom": {
                "a": {"url": "https://a.example.com", "command": "remove"},
                "b": {"url": "https://b.example.com", "command": "nuget"},
                "c": {"url": "https://c.example.com"},
            }},
        })

        config = Config(str(settings_file), backup_dir=str(data_dir / "backups"))

        assert [name for name, _ in config.get_feed_commands()] == ["nuget", "local", "myget", "c"]
