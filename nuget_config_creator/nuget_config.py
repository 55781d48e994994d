"""
NuGet.config document editing.

Loads an existing NuGet.config, finds package sources by key (ignoring case)
and adds, replaces, removes, disables or enables them while keeping the rest
of the document as it was: comments, unrelated sections and indentation.

A disabled source is the source's own ``add`` element serialized into an XML
comment at the same position, e.g.::

    <!--<add key="local" value="C:\\nuget" />-->

so enabling it again is a matter of parsing the comment back.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import copy
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .constants import (
    XML_DECLARATION, XML_INDENT,
    ROOT_TAG, SOURCES_TAG, ENTRY_TAG,
    KEY_ATTR, VALUE_ATTR, PROTOCOL_VERSION_ATTR,
)
from .exceptions import DocumentSaveError
from .models import PackageSource, SourceState
from .utils.logger import get_logger

logger = get_logger(__name__)


def normalize_key(key: str) -> str:
    """Keys are persisted lowercase whatever the caller passed."""
    return key.lower()


def serialize_document(root: ET.Element, prolog: Iterable[ET.Element] = (),
                       epilog: Iterable[ET.Element] = ()) -> str:
    """
    Serialize a document tree to the canonical NuGet.config text.

    Args:
        root: The ``configuration`` element
        prolog: Comments and processing instructions before the root
        epilog: Comments and processing instructions after the root

    Returns:
        Document text with a double-quoted XML declaration
    """
    parts = [XML_DECLARATION]
    parts.extend(ET.tostring(node, encoding="unicode") for node in prolog)
    parts.append(ET.tostring(root, encoding="unicode"))
    parts.extend(ET.tostring(node, encoding="unicode") for node in epilog)
    return "\n".join(parts) + "\n"


def write_document_text(path: Union[str, Path], text: str, newline: str = "\n") -> None:
    """
    Write document text atomically.

    Args:
        path: Destination file
        text: Full document text
        newline: Line ending written for each "\\n" in ``text``

    Raises:
        DocumentSaveError: If the file cannot be written
    """
    path = Path(path)
    temp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")

    try:
        with open(temp_path, "w", encoding="utf-8", newline=newline) as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        temp_path.replace(path)
        logger.info(f"Wrote {path}")

    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        try:
            temp_path.unlink()
        except OSError:
            pass
        raise DocumentSaveError(f"Failed to save NuGet.config: {e.strerror or e}", str(path)) from e


def element_to_source(element: ET.Element) -> PackageSource:
    """Build a PackageSource from an ``add`` element."""
    return PackageSource(
        key=element.get(KEY_ATTR, ""),
        value=element.get(VALUE_ATTR, ""),
        protocol_version=element.get(PROTOCOL_VERSION_ATTR)
    )


def source_to_element(source: PackageSource) -> ET.Element:
    """Build an ``add`` element from a PackageSource, lowercasing the key."""
    element = ET.Element(ENTRY_TAG)
    element.set(KEY_ATTR, normalize_key(source.key))
    element.set(VALUE_ATTR, source.value)
    if source.protocol_version:
        element.set(PROTOCOL_VERSION_ATTR, source.protocol_version)
    return element


def parse_disabled_payload(text: Optional[str]) -> Optional[ET.Element]:
    """
    Parse the text of a comment as a disabled ``add`` element.

    Args:
        text: Comment text

    Returns:
        The element, or None if the comment is not a disabled source
    """
    if not text or not text.strip():
        return None
    try:
        element = ET.fromstring(text.strip())
    except ET.ParseError:
        return None
    if element.tag != ENTRY_TAG or element.get(KEY_ATTR) is None:
        return None
    return element


def _is_comment(node: ET.Element) -> bool:
    return node.tag is ET.Comment


def _is_entry(node: ET.Element) -> bool:
    return node.tag == ENTRY_TAG


def _key_matches(element: ET.Element, key: str) -> bool:
    value = element.get(KEY_ATTR)
    return value is not None and value.lower() == key.lower()


def _append_child(parent: ET.Element, child: ET.Element, depth: int) -> None:
    """
    Append ``child`` as the last child of ``parent`` and indent it like its siblings.

    Args:
        parent: Element receiving the child
        child: Element to append
        depth: Nesting depth of ``parent`` (root is 0)
    """
    if len(parent):
        last = parent[-1]
        sibling_indent = parent[-2].tail if len(parent) > 1 else parent.text
        child.tail = last.tail
        last.tail = sibling_indent
    else:
        parent.text = "\n" + XML_INDENT * (depth + 1)
        child.tail = "\n" + XML_INDENT * depth
    parent.append(child)


def _remove_child(parent: ET.Element, child: ET.Element) -> None:
    """Remove ``child`` and hand its trailing whitespace to the previous node."""
    children = list(parent)
    index = children.index(child)
    if index == len(children) - 1:
        if index > 0:
            children[index - 1].tail = child.tail
        else:
            parent.text = child.tail
    parent.remove(child)


def _replace_child(parent: ET.Element, old: ET.Element, new: ET.Element) -> None:
    """Put ``new`` at the position of ``old``."""
    index = list(parent).index(old)
    new.tail = old.tail
    parent[index] = new


class _DocumentBuilder:
    """
    Parser target that builds the tree with comments and processing instructions.

    ``TreeBuilder`` drops nodes outside the root element, so those are
    collected here as ``prolog`` and ``epilog``.
    """

    def __init__(self) -> None:
        self._builder = ET.TreeBuilder(insert_comments=True, insert_pis=True)
        self._depth = 0
        self._root_seen = False
        self.prolog: List[ET.Element] = []
        self.epilog: List[ET.Element] = []

    def _outside_root(self, node: ET.Element) -> ET.Element:
        (self.epilog if self._root_seen else self.prolog).append(node)
        return node

    def start(self, tag, attrs):
        self._depth += 1
        self._root_seen = True
        return self._builder.start(tag, attrs)

    def end(self, tag):
        self._depth -= 1
        return self._builder.end(tag)

    def data(self, data):
        self._builder.data(data)

    def comment(self, text):
        if self._depth:
            return self._builder.comment(text)
        return self._outside_root(ET.Comment(text))

    def pi(self, target, text=None):
        if self._depth:
            return self._builder.pi(target, text)
        return self._outside_root(ET.ProcessingInstruction(target, text))

    def close(self):
        return self._builder.close()


class NuGetConfigManager:
    """Loads, edits and saves one NuGet.config document."""

    def __init__(self, config_path: Union[str, Path] = "NuGet.config") -> None:
        """
        Initialize the manager and load the document if the file exists.

        Args:
            config_path: Path to the NuGet.config file
        """
        self.config_path = Path(config_path)
        self._existed_on_open = self.config_path.exists()
        self._root: Optional[ET.Element] = None
        self._prolog: List[ET.Element] = []
        self._epilog: List[ET.Element] = []
        self._newline = "\n"
        self._load_existing_config()

    @classmethod
    def open(cls, config_path: Union[str, Path]) -> 'NuGetConfigManager':
        """Open the document at ``config_path``."""
        return cls(config_path)

    def _load_existing_config(self) -> None:
        """Parse the file into a tree, keeping comments. Failures leave no document."""
        if not self.config_path.is_file():
            logger.debug(f"No NuGet.config at {self.config_path}")
            return

        try:
            raw = self.config_path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read NuGet.config {self.config_path}: {e}")
            return

        builder = _DocumentBuilder()
        try:
            parser = ET.XMLParser(target=builder)
            parser.feed(raw)
            root = parser.close()
        except ET.ParseError as e:
            logger.warning(f"Ignoring unparseable NuGet.config {self.config_path}: {e}")
            return

        if root.tag != ROOT_TAG:
            logger.warning(f"Ignoring {self.config_path}: root element is <{root.tag}>, expected <{ROOT_TAG}>")
            return

        self._root = root
        self._prolog = builder.prolog
        self._epilog = builder.epilog
        # The parser normalizes line endings; keep the file's own on save
        if b"\r\n" in raw:
            self._newline = "\r\n"
        logger.debug(f"Loaded NuGet.config from {self.config_path}")

    @property
    def exists(self) -> bool:
        """True if the file was on disk when opened, whether or not it could be parsed."""
        return self._existed_on_open

    @property
    def has_document(self) -> bool:
        """True if a document is loaded or has been created in memory."""
        return self._root is not None

    def _create_new_config(self) -> None:
        """Start an empty configuration > packageSources document."""
        root = ET.Element(ROOT_TAG)
        sources = ET.Element(SOURCES_TAG)
        _append_child(root, sources, depth=0)
        self._root = root
        logger.debug("Created empty NuGet.config document")

    def _package_sources(self, create: bool = False) -> Optional[ET.Element]:
        """
        Get the packageSources element.

        Args:
            create: Create the document and/or section when missing

        Returns:
            The packageSources element or None
        """
        if self._root is None:
            if not create:
                return None
            self._create_new_config()

        sources = self._root.find(SOURCES_TAG)
        if sources is None and create:
            sources = ET.Element(SOURCES_TAG)
            _append_child(self._root, sources, depth=0)
        return sources

    # Lookup

    def _find_live_element(self, key: str) -> Optional[ET.Element]:
        sources = self._package_sources()
        if sources is None:
            return None
        for child in sources:
            if _is_entry(child) and _key_matches(child, key):
                return child
        return None

    def find_live(self, key: str) -> Optional[PackageSource]:
        """
        Find an active package source.

        Args:
            key: Source key, compared case-insensitively

        Returns:
            The first matching source in document order, or None
        """
        element = self._find_live_element(key)
        return element_to_source(element) if element is not None else None

    def key_exists(self, key: str) -> bool:
        """True if an active source has this key. Disabled sources don't count."""
        return self._find_live_element(key) is not None

    def find_disabled(self, key: str) -> Optional[ET.Element]:
        """
        Find the comment holding a disabled source.

        Comments that are not a serialized ``add`` element are skipped.

        Args:
            key: Source key, compared case-insensitively

        Returns:
            The comment node, or None
        """
        sources = self._package_sources()
        if sources is None:
            return None
        for child in sources:
            if not _is_comment(child):
                continue
            element = parse_disabled_payload(child.text)
            if element is not None and _key_matches(element, key):
                return child
        return None

    # Mutation

    def add_or_update(self, key: str, value: str, protocol_version: Optional[str] = None) -> None:
        """
        Add a source, replacing any active source with the same key.

        Args:
            key: Source key (stored lowercase)
            value: Feed URL or path
            protocol_version: Optional NuGet protocol version
        """
        sources = self._package_sources(create=True)

        existing = self._find_live_element(key)
        if existing is not None:
            _remove_child(sources, existing)
            logger.debug(f"Replacing package source '{key}'")

        element = source_to_element(PackageSource(key, value, protocol_version))
        _append_child(sources, element, depth=1)
        logger.info(f"Set package source '{normalize_key(key)}' = {value}")

    def remove(self, key: str) -> bool:
        """
        Remove an active source.

        Returns:
            True if a source was removed
        """
        element = self._find_live_element(key)
        if element is None:
            return False
        _remove_child(self._package_sources(), element)
        logger.info(f"Removed package source '{key}'")
        return True

    def disable(self, key: str) -> bool:
        """
        Comment out an active source in place.

        Returns:
            True if a source was disabled, False if there was no active source
            or it cannot be represented as an XML comment
        """
        element = self._find_live_element(key)
        if element is None:
            return False

        detached = copy.copy(element)
        detached.tail = None
        payload = ET.tostring(detached, encoding="unicode")

        # XML comments cannot contain "--"
        if "--" in payload:
            logger.warning(f"Cannot disable '{key}': its definition cannot be stored in an XML comment")
            return False

        _replace_child(self._package_sources(), element, ET.Comment(payload))
        logger.info(f"Disabled package source '{key}'")
        return True

    def enable(self, key: str) -> bool:
        """
        Restore a disabled source in place.

        Returns:
            True if a disabled source was found and restored
        """
        comment = self.find_disabled(key)
        if comment is None:
            return False

        element = parse_disabled_payload(comment.text)
        _replace_child(self._package_sources(), comment, element)
        logger.info(f"Enabled package source '{key}'")
        return True

    # Queries

    def get(self, key: str) -> Optional[str]:
        """Value of the active source with this key, or None."""
        element = self._find_live_element(key)
        return element.get(VALUE_ATTR) if element is not None else None

    def get_all(self) -> List[Tuple[str, str]]:
        """All active sources as (key, value) in document order."""
        sources = self._package_sources()
        if sources is None:
            return []
        return [
            (child.get(KEY_ATTR, ""), child.get(VALUE_ATTR, ""))
            for child in sources
            if _is_entry(child) and child.get(KEY_ATTR) is not None
        ]

    def get_disabled(self) -> List[PackageSource]:
        """All disabled sources in document order."""
        return [
            source for source, state in self.get_entries()
            if state is SourceState.DISABLED
        ]

    def get_entries(self) -> List[Tuple[PackageSource, SourceState]]:
        """Active and disabled sources in document order."""
        sources = self._package_sources()
        if sources is None:
            return []

        entries = []
        for child in sources:
            if _is_entry(child) and child.get(KEY_ATTR) is not None:
                entries.append((element_to_source(child), SourceState.ENABLED))
            elif _is_comment(child):
                element = parse_disabled_payload(child.text)
                if element is not None:
                    entries.append((element_to_source(element), SourceState.DISABLED))
        return entries

    def get_config_content(self) -> str:
        """The serialized document, or an empty string without one."""
        if self._root is None:
            return ""
        return serialize_document(self._root, self._prolog, self._epilog)

    # Persistence

    def save(self) -> None:
        """
        Write the document back to its file. Does nothing without a document.

        Raises:
            DocumentSaveError: If the file cannot be written
        """
        if self._root is None:
            logger.debug("No NuGet.config document to save")
            return
        write_document_text(self.config_path, self.get_config_content(), newline=self._newline)
