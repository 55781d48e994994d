"""
Tests for input validators.
"""

import unittest
from unittest.mock import patch

from nuget_config_creator.utils.validators import (
    validate_command_name,
    validate_editor_command,
    validate_feed_key,
    validate_feed_name,
    validate_feed_source,
    validate_feed_url,
    validate_settings_json,
    validate_settings_path,
)


class TestFeedValidators(unittest.TestCase):
    """Test feed definition validators."""

    def test_validate_feed_name(self):
        self.assertTrue(validate_feed_name("Company"))
        self.assertTrue(validate_feed_name("my-feed.v2"))
        self.assertFalse(validate_feed_name(""))
        self.assertFalse(validate_feed_name("-leading"))
        self.assertFalse(validate_feed_name("has space"))
        self.assertFalse(validate_feed_name("a" * 101))

    def test_validate_command_name(self):
        self.assertTrue(validate_command_name("company"))
        self.assertTrue(validate_command_name("my-feed2"))
        self.assertFalse(validate_command_name("Company"))
        self.assertFalse(validate_command_name("-x"))
        self.assertFalse(validate_command_name("a_b"))

    def test_validate_feed_key(self):
        self.assertTrue(validate_feed_key("nuget"))
        self.assertTrue(validate_feed_key("Company Feed"))
        self.assertFalse(validate_feed_key(""))
        self.assertFalse(validate_feed_key(" nuget"))
        self.assertFalse(validate_feed_key('a"b'))
        self.assertFalse(validate_feed_key("a\tb"))

    def test_validate_feed_url(self):
        self.assertTrue(validate_feed_url("https://api.nuget.org/v3/index.json"))
        self.assertTrue(validate_feed_url("http://localhost:5000/v3/index.json"))
        self.assertFalse(validate_feed_url("ftp://example.com/feed"))
        self.assertFalse(validate_feed_url("https://"))
        self.assertFalse(validate_feed_url("not a url"))

    def test_plain_http_is_accepted_with_warning(self):
        with patch('nuget_config_creator.utils.validators.logger') as mock_logger:
            self.assertTrue(validate_feed_url("http://nuget.example.com/v3/index.json"))
            mock_logger.warning.assert_called_once()

    def test_validate_feed_source(self):
        self.assertTrue(validate_feed_source("https://nuget.example.com/v3/index.json"))
        self.assertTrue(validate_feed_source("/srv/nuget"))
        self.assertTrue(validate_feed_source("C:\\nuget"))
        self.assertTrue(validate_feed_source("\\\\server\\share\\nuget"))
        self.assertFalse(validate_feed_source(""))
        self.assertFalse(validate_feed_source("ftp://example.com"))
        self.assertFalse(validate_feed_source("/srv/nuget\n"))
        self.assertFalse(validate_feed_source(" /srv/nuget"))


class TestSettingsValidators(unittest.TestCase):
    """Test settings validators."""

    def test_validate_settings_path(self):
        self.assertTrue(validate_settings_path("/tmp/appsettings.json"))
        with self.assertRaises(ValueError):
            validate_settings_path("")
        with self.assertRaises(ValueError):
            validate_settings_path("/tmp/appsettings.toml")

    def test_validate_settings_json(self):
        self.assertTrue(validate_settings_json({}))
        self.assertTrue(validate_settings_json({
            "version": "1.0.0",
            "nuget_feeds": {
                "nuget_org": {"url": "https://api.nuget.org/v3/index.json"},
                "custom": {"company": {"url": "https://nuget.example.com"}},
            },
        }))

    def test_validate_settings_json_rejects(self):
        for data in (
            [],
            {"version": 1},
            {"nuget_feeds": []},
            {"nuget_feeds": {"local": "path"}},
            {"nuget_feeds": {"myget": {"url": 5}}},
            {"nuget_feeds": {"custom": []}},
            {"nuget_feeds": {"custom": {"x": {"key": "x"}}}},
        ):
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    validate_settings_json(data)


class TestEditorValidator(unittest.TestCase):
    """Test editor command validation."""

    @patch('nuget_config_creator.utils.validators.shutil.which', return_value='/usr/bin/vim')
    def test_allowed_editor(self, mock_which):
        self.assertEqual(validate_editor_command("vim -n"), ["vim", "-n"])

    @patch('nuget_config_creator.utils.validators.shutil.which', return_value='/usr/bin/rm')
    def test_disallowed_editor(self, mock_which):
        with self.assertRaises(ValueError):
            validate_editor_command("rm -rf")

    @patch('nuget_config_creator.utils.validators.shutil.which', return_value=None)
    def test_missing_editor(self, mock_which):
        with self.assertRaises(ValueError):
            validate_editor_command("nano")

    def test_unparseable_editor(self):
        with self.assertRaises(ValueError):
            validate_editor_command("'vim")
        with self.assertRaises(ValueError):
            validate_editor_command("")


if __name__ == '__main__':
    unittest.main()
