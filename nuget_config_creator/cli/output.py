"""
Output formatting utilities for the CLI.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import sys
from typing import Any, Dict, List

from colorama import init, Fore, Style

# Initialize colorama for cross-platform color support
init(autoreset=True)


class OutputFormatter:
    """Handles output formatting for the CLI."""

    def __init__(self, use_color: bool = True, json_output: bool = False, quiet: bool = False):
        """
        Initialize output formatter.

        Args:
            use_color: Whether to use ANSI colors
            json_output: Whether to output JSON
            quiet: Suppress informational messages
        """
        self.use_color = use_color
        self.json_output = json_output
        self.quiet = quiet

        # Color shortcuts
        self.green = Fore.GREEN if use_color else ''
        self.yellow = Fore.YELLOW if use_color else ''
        self.red = Fore.RED if use_color else ''
        self.cyan = Fore.CYAN if use_color else ''
        self.white = Fore.WHITE if use_color else ''
        self.dim = Style.DIM if use_color else ''
        self.reset = Style.RESET_ALL if use_color else ''
        self.bright = Style.BRIGHT if use_color else ''

    def success(self, message: str) -> None:
        """Print success message."""
        if not self.json_output and not self.quiet:
            print(f"{self.green}✅ {message}{self.reset}")

    def warning(self, message: str) -> None:
        """Print warning message."""
        if not self.json_output and not self.quiet:
            print(f"{self.yellow}⚠️  {message}{self.reset}")

    def error(self, message: str) -> None:
        """Print error message."""
        if not self.json_output:
            print(f"{self.red}❌ {message}{self.reset}", file=sys.stderr)

    def info(self, message: str) -> None:
        """Print info message."""
        if not self.json_output and not self.quiet:
            print(f"{self.cyan}ℹ️  {message}{self.reset}")

    def header(self, message: str) -> None:
        """Print header message."""
        if not self.json_output and not self.quiet:
            print(f"\n{self.cyan}{self.bright}{message}{self.reset}")
            print(f"{self.cyan}{'─' * len(message)}{self.reset}")

    def format_sources_table(self, sources: List[Dict[str, Any]]) -> str:
        """
        Format package sources as a table.

        Args:
            sources: List of dictionaries with key, value, protocol_version and state

        Returns:
            Formatted table string
        """
        if not sources:
            return "No package sources"

        max_key = max(max(len(s.get('key', '')) for s in sources), 10)
        max_state = 8

        lines = []

        header = f"  {'Key':<{max_key}}  {'State':<{max_state}}  {'Protocol':<8}  Source"
        lines.append(header)
        lines.append(f"  {'─' * max_key}  {'─' * max_state}  {'─' * 8}  {'─' * 30}")

        for source in sources:
            key = source.get('key', '')
            value = source.get('value', '')
            protocol = source.get('protocol_version') or '-'
            state = source.get('state', 'enabled')

            if self.use_color:
                state_color = self.green if state == 'enabled' else self.dim
                row = (f"  {self.white}{key:<{max_key}}{self.reset}  "
                       f"{state_color}{state:<{max_state}}{self.reset}  {protocol:<8}  {value}")
            else:
                row = f"  {key:<{max_key}}  {state:<{max_state}}  {protocol:<8}  {value}"

            lines.append(row)

        return '\n'.join(lines)

    def format_feeds_table(self, feeds: List[Dict[str, Any]]) -> str:
        """
        Format feed definitions as a table.

        Args:
            feeds: List of dictionaries with name, command, key, source and kind

        Returns:
            Formatted table string
        """
        if not feeds:
            return "No feeds defined"

        max_name = max(max(len(f.get('name', '')) for f in feeds), 10)
        max_command = max(max(len(f.get('command', '')) for f in feeds), 8)
        max_key = max(max(len(f.get('key', '')) for f in feeds), 8)

        lines = []

        header = f"  {'Name':<{max_name}}  {'Command':<{max_command}}  {'Key':<{max_key}}  Source"
        lines.append(header)
        lines.append(f"  {'─' * max_name}  {'─' * max_command}  {'─' * max_key}  {'─' * 30}")

        for feed in feeds:
            name = feed.get('name', '')
            command = feed.get('command', '')
            key = feed.get('key', '')
            source = feed.get('source', '')

            if self.use_color and feed.get('kind') == 'custom':
                row = (f"  {self.cyan}{name:<{max_name}}{self.reset}  {command:<{max_command}}  "
                       f"{key:<{max_key}}  {source}")
            else:
                row = f"  {name:<{max_name}}  {command:<{max_command}}  {key:<{max_key}}  {source}"

            lines.append(row)

        return '\n'.join(lines)

    def output_json(self, data: Any) -> None:
        """
        Output data as JSON.

        Args:
            data: Data to output
        """
        print(json.dumps(data, indent=2, default=str))
