"""
Custom exceptions for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later


class NuGetConfigCreatorError(Exception):
    """Base exception for all NuGet Config Creator errors."""

    pass


class ConfigurationError(NuGetConfigCreatorError):
    """Raised when the tool settings are invalid or cannot be saved."""

    pass


class DocumentSaveError(NuGetConfigCreatorError):
    """Raised when a NuGet.config document cannot be written."""

    def __init__(self, message: str, path: str = "") -> None:
        """Initialize the error."""
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return f"{self.args[0]} (File: {self.path})"


class FeedValidationError(NuGetConfigCreatorError):
    """Raised when a feed definition is rejected."""

    pass
