"""
Command-line interface for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later
