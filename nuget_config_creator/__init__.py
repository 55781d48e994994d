"""
NuGet Config Creator - Modular Package

A command-line tool for generating and editing NuGet.config files: add,
remove, enable and disable package sources, and manage the feed definitions
the tool knows about.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

__version__ = "1.0.0"
__author__ = "NeatCode Labs"
__email__ = "neatcodelabs@gmail.com"
