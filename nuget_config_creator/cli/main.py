"""
Main entry point for the nugetconfigcreator command-line tool.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import argparse
import os
import subprocess
import sys
from typing import Optional, List, Dict, Any

from ..config import Config
from ..constants import APP_NAME, APP_VERSION, PROG_NAME, DEFAULT_NUGET_CONFIG_FILE
from ..exceptions import NuGetConfigCreatorError, ConfigurationError, FeedValidationError
from ..models import FeedCommand, FeedKind, SourceState
from ..nuget_config import NuGetConfigManager, write_document_text
from ..templates import (
    NuGetConfigTemplate,
    StandardNuGetConfigTemplate,
    LocalFeedNuGetConfigTemplate,
    MyGetNuGetConfigTemplate,
    CustomFeedNuGetConfigTemplate,
)
from ..utils.logger import get_logger, set_global_config, get_current_log_file
from ..utils.validators import validate_editor_command
from .output import OutputFormatter

logger = get_logger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILURE = 20
EXIT_INTERRUPTED = 130


class NuGetConfigCLI:
    """Main CLI application class."""

    def __init__(self, settings_path: Optional[str] = None,
                 config_path: str = DEFAULT_NUGET_CONFIG_FILE):
        """
        Initialize CLI with tool settings.

        Args:
            settings_path: Alternative settings file
            config_path: NuGet.config file to create or edit
        """
        self.config = Config(settings_path)
        self.config_path = config_path
        self.formatter: Optional[OutputFormatter] = None

    @property
    def feed_commands(self) -> Dict[str, FeedCommand]:
        """Feed commands by command name."""
        return dict(self.config.get_feed_commands())

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the CLI with given arguments.

        Args:
            args: Parsed command line arguments

        Returns:
            Exit code
        """
        self.formatter = OutputFormatter(
            use_color=not args.no_color and sys.stdout.isatty(),
            json_output=args.json,
            quiet=args.quiet
        )
        if args.file:
            self.config_path = args.file

        feed_commands = self.feed_commands
        logger.debug(f"Running command: {args.command or '(default)'} on {self.config_path}")

        if args.command is None:
            return self.cmd_default(args)
        elif args.command in feed_commands:
            return self.cmd_feed(args, feed_commands[args.command])
        elif args.command == 'remove':
            return self.cmd_remove(args)
        elif args.command == 'disable':
            return self.cmd_disable(args)
        elif args.command == 'enable':
            return self.cmd_enable(args)
        elif args.command == 'list':
            return self.cmd_list(args)
        elif args.command == 'show':
            return self.cmd_show(args)
        elif args.command == 'feeds':
            return self.cmd_feeds(args)
        elif args.command == 'settings':
            return self.cmd_settings(args)
        else:
            self.formatter.error(f"Unknown command: {args.command}")
            return EXIT_USAGE

    def _template_for(self, feed: FeedCommand, value: str) -> NuGetConfigTemplate:
        """Pick the template that creates a new NuGet.config for ``feed``."""
        feeds = self.config.feeds
        if feed.kind is FeedKind.LOCAL:
            return LocalFeedNuGetConfigTemplate(feeds, value)
        if feed.kind is FeedKind.MYGET:
            return MyGetNuGetConfigTemplate(feeds)
        if feed.kind is FeedKind.CUSTOM:
            return CustomFeedNuGetConfigTemplate(feeds, feeds.custom[feed.name])
        return StandardNuGetConfigTemplate(feeds)

    def _created_message(self, feed: FeedCommand, value: str) -> str:
        if feed.kind is FeedKind.NUGET_ORG:
            return "Standard NuGet.config created successfully!"
        if feed.kind is FeedKind.LOCAL:
            return f"NuGet.config with local feed ({value}) created successfully!"
        if feed.kind is FeedKind.MYGET:
            return "NuGet.config with MyGet.org feed created successfully!"
        return f"NuGet.config with '{feed.name}' feed created successfully!"

    def _report(self, args: argparse.Namespace, action: str, key: Optional[str] = None) -> None:
        """Emit the JSON result of a mutating command."""
        if args.json:
            data: Dict[str, Any] = {'action': action, 'file': str(self.config_path)}
            if key is not None:
                data['key'] = key
            self.formatter.output_json(data)  # type: ignore[union-attr]

    def cmd_default(self, args: argparse.Namespace) -> int:
        """Handle no sub-command - add nuget.org, then show usage."""
        nuget_org = next(
            (feed for feed in self.feed_commands.values() if feed.kind is FeedKind.NUGET_ORG),
            None
        )
        if nuget_org is None:
            self.formatter.error("The nuget.org feed command is not configured")  # type: ignore[union-attr]
            return EXIT_USAGE

        exit_code = self.cmd_feed(args, nuget_org)
        if exit_code == EXIT_OK and not args.json and not args.quiet:
            print()
            self.show_usage()
        return exit_code

    def cmd_feed(self, args: argparse.Namespace, feed: FeedCommand) -> int:
        """Handle a feed command - create NuGet.config or add the feed to it."""
        value = getattr(args, 'path', None) if feed.kind is FeedKind.LOCAL else None
        source = feed.to_source(value)

        try:
            manager = NuGetConfigManager(self.config_path)
            if manager.exists:
                if manager.key_exists(source.key):
                    self.formatter.info(  # type: ignore[union-attr]
                        f"NuGet.config already exists and contains the '{source.key}' key.")
                    self._report(args, 'unchanged', source.key)
                    return EXIT_OK

                manager.add_or_update(source.key, source.value, source.protocol_version)
                manager.save()
                self.formatter.success(  # type: ignore[union-attr]
                    f"Added '{source.key}' key to existing NuGet.config!")
                self._report(args, 'added', source.key)
            else:
                template = self._template_for(feed, source.value)
                write_document_text(self.config_path, template.generate_config())
                self.formatter.success(self._created_message(feed, source.value))  # type: ignore[union-attr]
                self._report(args, 'created', source.key)

            return EXIT_OK

        except NuGetConfigCreatorError as e:
            self.formatter.error(str(e))  # type: ignore[union-attr]
            return EXIT_FAILURE

    def _open_existing(self) -> Optional[NuGetConfigManager]:
        """Open NuGet.config, reporting when there is none."""
        manager = NuGetConfigManager(self.config_path)
        if not manager.exists:
            self.formatter.error("No NuGet.config file found.")  # type: ignore[union-attr]
            return None
        return manager

    def _key_not_found(self, key: str) -> int:
        self.formatter.error(f"Key '{key}' not found in NuGet.config.")  # type: ignore[union-attr]
        return EXIT_USAGE

    def cmd_remove(self, args: argparse.Namespace) -> int:
        """Handle 'remove' command - remove a key from NuGet.config."""
        try:
            manager = self._open_existing()
            if manager is None:
                return EXIT_USAGE

            if not manager.key_exists(args.key):
                return self._key_not_found(args.key)

            manager.remove(args.key)
            manager.save()
            self.formatter.success(f"Removed key '{args.key}' from NuGet.config successfully!")  # type: ignore[union-attr]
            self._report(args, 'removed', args.key)
            return EXIT_OK

        except NuGetConfigCreatorError as e:
            self.formatter.error(str(e))  # type: ignore[union-attr]
            return EXIT_FAILURE

    def cmd_disable(self, args: argparse.Namespace) -> int:
        """Handle 'disable' command - comment out a key."""
        try:
            manager = self._open_existing()
            if manager is None:
                return EXIT_USAGE

            if not manager.key_exists(args.key):
                if manager.find_disabled(args.key) is not None:
                    self.formatter.info(f"Key '{args.key}' is already disabled.")  # type: ignore[union-attr]
                    self._report(args, 'unchanged', args.key)
                    return EXIT_OK
                return self._key_not_found(args.key)

            if not manager.disable(args.key):
                self.formatter.error(  # type: ignore[union-attr]
                    f"Key '{args.key}' cannot be disabled: its value cannot be stored in an XML comment.")
                return EXIT_USAGE

            manager.save()
            self.formatter.success(f"Disabled key '{args.key}' in NuGet.config successfully!")  # type: ignore[union-attr]
            self._report(args, 'disabled', args.key)
            return EXIT_OK

        except NuGetConfigCreatorError as e:
            self.formatter.error(str(e))  # type: ignore[union-attr]
            return EXIT_FAILURE

    def cmd_enable(self, args: argparse.Namespace) -> int:
        """Handle 'enable' command - uncomment a key."""
        try:
            manager = self._open_existing()
            if manager is None:
                return EXIT_USAGE

            if not manager.enable(args.key):
                if manager.key_exists(args.key):
                    self.formatter.info(f"Key '{args.key}' is already enabled.")  # type: ignore[union-attr]
                    self._report(args, 'unchanged', args.key)
                    return EXIT_OK
                return self._key_not_found(args.key)

            manager.save()
            self.formatter.success(f"Enabled key '{args.key}' in NuGet.config successfully!")  # type: ignore[union-attr]
            self._report(args, 'enabled', args.key)
            return EXIT_OK

        except NuGetConfigCreatorError as e:
            self.formatter.error(str(e))  # type: ignore[union-attr]
            return EXIT_FAILURE

    def cmd_list(self, args: argparse.Namespace) -> int:
        """Handle 'list' command - show package sources and their state."""
        manager = self._open_existing()
        if manager is None:
            return EXIT_USAGE
        if not manager.has_document:
            self.formatter.error("NuGet.config could not be parsed.")  # type: ignore[union-attr]
            return EXIT_USAGE

        entries = manager.get_entries()
        if args.enabled_only:
            entries = [(s, state) for s, state in entries if state is SourceState.ENABLED]

        data = [dict(source.to_dict(), state=state.value) for source, state in entries]

        if args.json:
            self.formatter.output_json(data)  # type: ignore[union-attr]
        elif data:
            self.formatter.header(f"Package sources in {self.config_path}: {len(data)}")  # type: ignore[union-attr]
            print(self.formatter.format_sources_table(data))  # type: ignore[union-attr]
        else:
            self.formatter.info("No package sources in NuGet.config")  # type: ignore[union-attr]
        return EXIT_OK

    def cmd_show(self, args: argparse.Namespace) -> int:
        """Handle 'show' command - print the NuGet.config document."""
        manager = self._open_existing()
        if manager is None:
            return EXIT_USAGE
        if not manager.has_document:
            self.formatter.error("NuGet.config could not be parsed.")  # type: ignore[union-attr]
            return EXIT_USAGE

        content = manager.get_config_content()
        if args.json:
            self.formatter.output_json({'file': str(self.config_path), 'content': content})  # type: ignore[union-attr]
        else:
            print(content, end='')
        return EXIT_OK

    def _feed_rows(self) -> List[Dict[str, Any]]:
        feeds = self.config.feeds
        rows = [
            {'name': 'nuget.org', 'kind': FeedKind.NUGET_ORG.value, **feeds.nuget_org.to_dict(),
             'source': feeds.nuget_org.url},
            {'name': 'myget', 'kind': FeedKind.MYGET.value, **feeds.myget.to_dict(),
             'source': feeds.myget.url},
            {'name': 'local', 'kind': FeedKind.LOCAL.value, **feeds.local.to_dict(),
             'source': feeds.local.default_path},
        ]
        for name, feed in feeds.custom.items():
            rows.append({'name': name, 'kind': FeedKind.CUSTOM.value, **feed.to_dict(), 'source': feed.url})
        return rows

    def cmd_feeds(self, args: argparse.Namespace) -> int:
        """Handle 'feeds' command - manage feed definitions."""
        try:
            if args.action == 'list':
                rows = self._feed_rows()
                if args.json:
                    self.formatter.output_json(rows)  # type: ignore[union-attr]
                else:
                    self.formatter.header("Feeds")  # type: ignore[union-attr]
                    print(self.formatter.format_feeds_table(rows))  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'add':
                if not args.url:
                    self.formatter.error("--url is required for 'feeds add'")  # type: ignore[union-attr]
                    return EXIT_USAGE
                feed = self.config.add_custom_feed(
                    args.name,
                    args.url,
                    key=args.key,
                    command=args.feed_command,
                    protocol_version=args.protocol_version
                )
                self.formatter.success(  # type: ignore[union-attr]
                    f"Added feed '{args.name}' (run '{PROG_NAME} {feed.command}' to use it)")
                if args.json:
                    self.formatter.output_json({'name': args.name, **feed.to_dict()})  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'remove':
                if not self.config.remove_custom_feed(args.name):
                    self.formatter.error(f"Custom feed '{args.name}' not found")  # type: ignore[union-attr]
                    return EXIT_USAGE
                self.formatter.success(f"Removed feed '{args.name}'")  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'reset':
                if not args.yes:
                    response = input("Reset all feed definitions to defaults? [y/N] ")
                    if response.lower() not in ['y', 'yes']:
                        self.formatter.info("Reset cancelled")  # type: ignore[union-attr]
                        return EXIT_OK
                self.config.reset_to_defaults()
                self.formatter.success("Feed definitions reset to defaults")  # type: ignore[union-attr]
                return EXIT_OK

            else:
                self.formatter.error(f"Unknown feeds action: {args.action}")  # type: ignore[union-attr]
                return EXIT_USAGE

        except FeedValidationError as e:
            self.formatter.error(str(e))  # type: ignore[union-attr]
            return EXIT_USAGE
        except NuGetConfigCreatorError as e:
            self.formatter.error(f"Feed operation failed: {e}")  # type: ignore[union-attr]
            return EXIT_FAILURE

    def cmd_settings(self, args: argparse.Namespace) -> int:
        """Handle 'settings' command - view, back up, restore or edit the settings file."""
        try:
            if args.action == 'path':
                print(self.config.config_file)
                return EXIT_OK

            elif args.action == 'show':
                self.formatter.output_json(self.config.get_all_settings())  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'backup':
                path = self.config.backup_config()
                self.formatter.success(f"Settings backed up to {path}")  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'restore':
                path = self.config.restore_config()
                self.formatter.success(f"Settings restored to {path}")  # type: ignore[union-attr]
                return EXIT_OK

            elif args.action == 'edit':
                editor_env = os.environ.get('VISUAL') or os.environ.get('EDITOR') or 'nano'
                try:
                    editor = validate_editor_command(editor_env)
                except ValueError as e:
                    self.formatter.error(f"Editor validation failed: {e}")  # type: ignore[union-attr]
                    return EXIT_USAGE

                try:
                    result = subprocess.run(editor + [self.config.config_file])
                except OSError as e:
                    self.formatter.error(f"Failed to open editor: {e}")  # type: ignore[union-attr]
                    return EXIT_FAILURE
                return EXIT_OK if result.returncode == 0 else EXIT_FAILURE

            else:
                self.formatter.error(f"Unknown settings action: {args.action}")  # type: ignore[union-attr]
                return EXIT_USAGE

        except NuGetConfigCreatorError as e:
            self.formatter.error(f"Settings operation failed: {e}")  # type: ignore[union-attr]
            return EXIT_FAILURE

    def show_usage(self) -> None:
        """Print a short usage summary built from the configured feeds."""
        feeds = self.config.feeds
        print("Usage:")
        print(f"  {PROG_NAME}                    - Create standard config (default)")
        for command, feed in self.config.get_feed_commands():
            if feed.kind is FeedKind.NUGET_ORG:
                continue
            label = 'local' if feed.kind is FeedKind.LOCAL else (feed.name or 'MyGet')
            print(f"  {PROG_NAME} {command:<10} - Create config with {label} feed")
        print()
        print("Management Commands:")
        print(f"  {PROG_NAME} remove --key <key>  - Remove a key from existing config")
        print(f"  {PROG_NAME} disable --key <key> - Disable a key (comment out)")
        print(f"  {PROG_NAME} enable --key <key>  - Enable a key (uncomment)")
        print(f"  {PROG_NAME} list                - List package sources")
        print()
        print("Options:")
        print(f"  --path <path>  - Specify local feed path (default: {feeds.local.default_path})")
        print()
        print("Configuration:")
        print(f"  Settings file: {self.config.config_file}")
        print(f"  Use '{PROG_NAME} feeds add <name> --url <url>' to add your own feeds")


def create_parser(config: Optional[Config] = None) -> argparse.ArgumentParser:
    """
    Create the argument parser.

    Args:
        config: Tool settings; feed commands are generated from them

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description=f'{APP_NAME} - A tool for generating NuGet.config files',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global options
    parser.add_argument(
        '--file',
        metavar='PATH',
        default=DEFAULT_NUGET_CONFIG_FILE,
        help=f'NuGet.config file to create or edit (default: {DEFAULT_NUGET_CONFIG_FILE})'
    )
    parser.add_argument(
        '--settings',
        metavar='PATH',
        help='Alternative settings file path'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output in JSON format'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable ANSI colors'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Minimal output (exit status only)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {APP_VERSION}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Feed commands, generated from settings
    if config is not None:
        for command, feed in config.get_feed_commands():
            feed_parser = subparsers.add_parser(command, help=feed.description)
            if feed.kind is FeedKind.LOCAL:
                feed_parser.add_argument(
                    '--path',
                    default=feed.value,
                    help=f'Path to the local NuGet feed (default: {feed.value})'
                )

    # Management commands
    for name, help_text in (
        ('remove', 'Remove a key from existing NuGet.config'),
        ('disable', 'Disable a key in existing NuGet.config (comment out)'),
        ('enable', 'Enable a key in existing NuGet.config (uncomment)'),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            '--key',
            required=True,
            help=f'The key to {name} in NuGet.config'
        )

    list_parser = subparsers.add_parser('list', help='List package sources in NuGet.config')
    list_parser.add_argument(
        '--enabled-only',
        action='store_true',
        help='Hide disabled package sources'
    )

    subparsers.add_parser('show', help='Print the NuGet.config document')

    # feeds command
    feeds_parser = subparsers.add_parser(
        'feeds',
        help='Manage feed definitions',
        description='Manage the feeds this tool knows about. Examples:\n'
        f'  {PROG_NAME} feeds list\n'
        f'  {PROG_NAME} feeds add Company --url https://nuget.example.com/v3/index.json\n'
        f'  {PROG_NAME} feeds remove Company\n'
        f'  {PROG_NAME} feeds reset',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    feeds_parser.add_argument(
        'action',
        choices=['list', 'add', 'remove', 'reset'],
        help='Feeds action'
    )
    feeds_parser.add_argument(
        'name',
        nargs='?',
        help='Feed name (for add/remove)'
    )
    feeds_parser.add_argument('--url', help='Feed URL or path (for add)')
    feeds_parser.add_argument('--key', help='Package source key (default: lowercased name)')
    feeds_parser.add_argument(
        '--command',
        dest='feed_command',
        metavar='COMMAND',
        help='Command name for the feed (default: lowercased name)'
    )
    feeds_parser.add_argument('--protocol-version', help='NuGet protocol version, e.g. 3')
    feeds_parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='Skip confirmation for reset'
    )

    # settings command
    settings_parser = subparsers.add_parser(
        'settings',
        help='Manage the settings file',
        description='Manage the settings file. Examples:\n'
        f'  {PROG_NAME} settings path     # Show settings file location\n'
        f'  {PROG_NAME} settings show     # Print settings\n'
        f'  {PROG_NAME} settings backup   # Copy settings to the backup location\n'
        f'  {PROG_NAME} settings restore  # Restore settings from the backup\n'
        f'  {PROG_NAME} settings edit     # Open settings in $EDITOR',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    settings_parser.add_argument(
        'action',
        choices=['path', 'show', 'backup', 'restore', 'edit'],
        help='Settings action'
    )

    return parser


def _validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Check argument combinations argparse cannot express."""
    if args.command == 'feeds' and args.action in ('add', 'remove') and not args.name:
        parser.error(f"feeds {args.action}: a feed name is required")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    if argv is None:
        argv = sys.argv[1:]

    # Settings decide which feed commands exist, so read the global options first
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument('--settings')
    pre_parser.add_argument('--debug', action='store_true')
    pre_parser.add_argument('--quiet', action='store_true')
    pre_args, _ = pre_parser.parse_known_args(argv)

    set_global_config({'debug_mode': pre_args.debug, 'quiet': pre_args.quiet})
    if pre_args.debug:
        log_file = get_current_log_file()
        if log_file:
            print(f"Debug log: {log_file}", file=sys.stderr)

    try:
        cli = NuGetConfigCLI(pre_args.settings)
        parser = create_parser(cli.config)
        args = parser.parse_args(argv)
        _validate_args(parser, args)
        exit_code = cli.run(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except ConfigurationError as e:
        print(f"Settings error: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    except Exception as e:
        print(f"Fatal error: {str(e)}", file=sys.stderr)
        if pre_args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(EXIT_USAGE)


if __name__ == '__main__':
    main()
