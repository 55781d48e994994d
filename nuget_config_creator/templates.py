"""
Templates for brand-new NuGet.config files.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod

from .constants import (
    ROOT_TAG, SOURCES_TAG, XML_INDENT,
    DEFAULT_NUGET_ORG_PROTOCOL_VERSION,
)
from .models import NuGetFeedsConfig, FeedConfig, PackageSource
from .nuget_config import serialize_document, source_to_element


class NuGetConfigTemplate(ABC):
    """Base template: a document with the nuget.org feed."""

    def __init__(self, feeds_config: NuGetFeedsConfig) -> None:
        self._feeds_config = feeds_config

    @abstractmethod
    def generate_config(self) -> str:
        """Return the full document text."""

    def _create_base_config(self) -> ET.Element:
        """Build configuration > packageSources with the nuget.org source."""
        nuget_org = self._feeds_config.nuget_org
        root = ET.Element(ROOT_TAG)
        sources = ET.SubElement(root, SOURCES_TAG)
        sources.append(source_to_element(PackageSource(
            key=nuget_org.key,
            value=nuget_org.url,
            protocol_version=nuget_org.protocol_version or DEFAULT_NUGET_ORG_PROTOCOL_VERSION
        )))
        return root

    def _render(self, root: ET.Element) -> str:
        ET.indent(root, space=XML_INDENT)
        return serialize_document(root)

    def _render_with(self, source: PackageSource) -> str:
        """Render the base document with one more source appended."""
        root = self._create_base_config()
        root.find(SOURCES_TAG).append(source_to_element(source))
        return self._render(root)


class StandardNuGetConfigTemplate(NuGetConfigTemplate):
    """nuget.org only."""

    def generate_config(self) -> str:
        return self._render(self._create_base_config())


class LocalFeedNuGetConfigTemplate(NuGetConfigTemplate):
    """nuget.org plus a local folder feed."""

    def __init__(self, feeds_config: NuGetFeedsConfig, local_feed_path: str) -> None:
        super().__init__(feeds_config)
        self._local_feed_path = local_feed_path

    def generate_config(self) -> str:
        return self._render_with(PackageSource(
            key=self._feeds_config.local.key,
            value=self._local_feed_path
        ))


class MyGetNuGetConfigTemplate(NuGetConfigTemplate):
    """nuget.org plus MyGet."""

    def generate_config(self) -> str:
        myget = self._feeds_config.myget
        return self._render_with(PackageSource(
            key=myget.key,
            value=myget.url,
            protocol_version=myget.protocol_version
        ))


class CustomFeedNuGetConfigTemplate(NuGetConfigTemplate):
    """nuget.org plus a user-defined feed."""

    def __init__(self, feeds_config: NuGetFeedsConfig, feed: FeedConfig) -> None:
        super().__init__(feeds_config)
        self._feed = feed

    def generate_config(self) -> str:
        return self._render_with(PackageSource(
            key=self._feed.key,
            value=self._feed.url,
            protocol_version=self._feed.protocol_version
        ))
