"""
Data models for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional

from .constants import (
    APP_VERSION,
    DEFAULT_NUGET_ORG_KEY, DEFAULT_NUGET_ORG_COMMAND, DEFAULT_NUGET_ORG_URL,
    DEFAULT_NUGET_ORG_PROTOCOL_VERSION,
    DEFAULT_MYGET_KEY, DEFAULT_MYGET_COMMAND, DEFAULT_MYGET_URL,
    DEFAULT_LOCAL_KEY, DEFAULT_LOCAL_COMMAND, DEFAULT_LOCAL_FEED_PATH,
)


class SourceState(Enum):
    """Whether a package source is active or commented out."""
    ENABLED = "enabled"
    DISABLED = "disabled"


class FeedKind(Enum):
    """Where a feed definition comes from."""
    NUGET_ORG = "nuget_org"
    MYGET = "myget"
    LOCAL = "local"
    CUSTOM = "custom"


@dataclass
class PackageSource:
    """One ``add`` entry of a NuGet.config packageSources section."""
    key: str
    value: str
    protocol_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "value": self.value,
            "protocol_version": self.protocol_version
        }

    def __str__(self) -> str:
        """String representation."""
        return f"{self.key} -> {self.value}"


@dataclass
class FeedConfig:
    """Definition of a URL feed the tool can add to a NuGet.config."""
    key: str = ""
    command: str = ""
    url: str = ""
    protocol_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "command": self.command,
            "url": self.url,
            "protocol_version": self.protocol_version
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default: Optional['FeedConfig'] = None) -> 'FeedConfig':
        """Create from dictionary, taking missing fields from ``default``."""
        default = default or cls()
        return cls(
            key=data.get("key") or default.key,
            command=data.get("command") or default.command,
            url=data.get("url") or default.url,
            protocol_version=data.get("protocol_version", default.protocol_version) or None
        )


@dataclass
class LocalFeedConfig:
    """Definition of the local filesystem feed."""
    key: str = DEFAULT_LOCAL_KEY
    command: str = DEFAULT_LOCAL_COMMAND
    default_path: str = DEFAULT_LOCAL_FEED_PATH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "command": self.command,
            "default_path": self.default_path
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LocalFeedConfig':
        """Create from dictionary."""
        return cls(
            key=data.get("key") or DEFAULT_LOCAL_KEY,
            command=data.get("command") or DEFAULT_LOCAL_COMMAND,
            default_path=data.get("default_path") or DEFAULT_LOCAL_FEED_PATH
        )


def default_nuget_org_feed() -> FeedConfig:
    """Default nuget.org feed definition."""
    return FeedConfig(
        key=DEFAULT_NUGET_ORG_KEY,
        command=DEFAULT_NUGET_ORG_COMMAND,
        url=DEFAULT_NUGET_ORG_URL,
        protocol_version=DEFAULT_NUGET_ORG_PROTOCOL_VERSION
    )


def default_myget_feed() -> FeedConfig:
    """Default MyGet feed definition."""
    return FeedConfig(
        key=DEFAULT_MYGET_KEY,
        command=DEFAULT_MYGET_COMMAND,
        url=DEFAULT_MYGET_URL
    )


@dataclass
class NuGetFeedsConfig:
    """All feed definitions: the three built-ins plus user-defined ones."""
    nuget_org: FeedConfig = field(default_factory=default_nuget_org_feed)
    myget: FeedConfig = field(default_factory=default_myget_feed)
    local: LocalFeedConfig = field(default_factory=LocalFeedConfig)
    custom: Dict[str, FeedConfig] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nuget_org": self.nuget_org.to_dict(),
            "myget": self.myget.to_dict(),
            "local": self.local.to_dict(),
            "custom": {name: feed.to_dict() for name, feed in self.custom.items()}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NuGetFeedsConfig':
        """Create from dictionary."""
        custom = {
            name: FeedConfig.from_dict(feed, FeedConfig(key=name.lower(), command=name.lower()))
            for name, feed in (data.get("custom") or {}).items()
        }
        return cls(
            nuget_org=FeedConfig.from_dict(data.get("nuget_org") or {}, default_nuget_org_feed()),
            myget=FeedConfig.from_dict(data.get("myget") or {}, default_myget_feed()),
            local=LocalFeedConfig.from_dict(data.get("local") or {}),
            custom=custom
        )


@dataclass
class AppSettings:
    """Persisted tool settings."""
    version: str = APP_VERSION
    nuget_feeds: NuGetFeedsConfig = field(default_factory=NuGetFeedsConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": self.version,
            "nuget_feeds": self.nuget_feeds.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        """Create from dictionary."""
        return cls(
            version=str(data.get("version") or "0.0.0"),
            nuget_feeds=NuGetFeedsConfig.from_dict(data.get("nuget_feeds") or {})
        )


@dataclass
class FeedCommand:
    """A CLI command that adds one feed to a NuGet.config."""
    kind: FeedKind
    command: str
    key: str
    value: str
    protocol_version: Optional[str] = None
    name: Optional[str] = None  # custom feed name

    @property
    def description(self) -> str:
        """Help text for the command."""
        if self.kind is FeedKind.NUGET_ORG:
            return "Create a standard NuGet.config with only nuget.org feed"
        if self.kind is FeedKind.LOCAL:
            return "Create a NuGet.config with local feed"
        if self.kind is FeedKind.MYGET:
            return "Create a NuGet.config with MyGet.org feed"
        return f"Create a NuGet.config with the '{self.name}' feed"

    def to_source(self, value: Optional[str] = None) -> PackageSource:
        """Build the package source this command adds."""
        return PackageSource(
            key=self.key,
            value=value if value is not None else self.value,
            protocol_version=self.protocol_version
        )
