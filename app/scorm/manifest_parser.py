"""Streaming parser for ``imsmanifest.xml``.

A single forward pass over the document (``lxml.etree.iterparse``) fills the
intermediate ``ManifestTables``: resources keyed by identifier, items in
source order, and the declared default organization. Namespace prefixes on
element and attribute names are ignored so that manifests written by
different authoring tools parse the same way.

The "currently open organization/resource" context is carried by an explicit
``ParserState`` whose transitions fire only on open/close of
``<organizations>``, ``<organization>`` and ``<resource>``.
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree

from app.scorm.errors import MalformedManifestError, MissingManifestError
from app.scorm.launch_resolver import resolve
from app.scorm.models import ItemRef, ManifestTables, ParsedManifest, ResourceRecord

logger = logging.getLogger(__name__)


def local_name(name: str) -> str:
    """Strip Clark-notation namespace (``{uri}``) and any ``prefix:``."""
    if name.startswith("{"):
        name = name.split("}", 1)[1]
    return name.rsplit(":", 1)[-1]


def get_attr(element, key: str) -> Optional[str]:
    """First attribute whose local name is ``key``; blank values count as absent."""
    for name, value in element.attrib.items():
        if local_name(name) == key:
            value = value.strip()
            return value or None
    return None


def fatal_errors(error_log) -> List:
    """Parse errors that make a manifest unusable.

    Undeclared namespace prefixes are reported by libxml2 in the namespace
    domain; those are tolerated since prefixes are ignored anyway.
    """
    return [
        entry
        for entry in error_log
        if entry.level >= etree.ErrorLevels.ERROR
        and entry.domain != etree.ErrorDomains.NAMESPACE
    ]


@dataclass
class ParserState:
    """Where the stream currently is, relative to organizations and resources."""

    in_organizations: bool = False
    default_organization: Optional[str] = None
    organizations_seen: int = 0
    current_organization: Optional[str] = None
    current_organization_is_default: bool = False
    current_resource: Optional[str] = None

    def open_organizations(self, default: Optional[str]) -> None:
        self.in_organizations = True
        self.default_organization = default

    def close_organizations(self) -> None:
        self.in_organizations = False

    def open_organization(self, identifier: Optional[str]) -> None:
        # With no declared default, the first organization in the document wins.
        if self.default_organization is not None:
            is_default = identifier == self.default_organization
        else:
            is_default = self.organizations_seen == 0
        self.organizations_seen += 1
        self.current_organization = identifier
        self.current_organization_is_default = is_default

    def close_organization(self) -> None:
        self.current_organization = None
        self.current_organization_is_default = False

    def open_resource(self, identifier: str) -> None:
        self.current_resource = identifier

    def close_resource(self) -> None:
        self.current_resource = None


class ManifestParser:
    """Builds ``ManifestTables`` from manifest bytes in one pass."""

    def __init__(self):
        self.state = ParserState()
        self.tables = ManifestTables()

    def feed_start(self, element) -> None:
        tag = local_name(element.tag)
        if tag == "organizations":
            self.state.open_organizations(get_attr(element, "default"))
            self.tables.default_organization = self.state.default_organization
        elif tag == "organization":
            self.state.open_organization(get_attr(element, "identifier"))
        elif tag == "item":
            self._on_item(element)
        elif tag == "resource":
            self._on_resource(element)
        elif tag == "file":
            href = get_attr(element, "href")
            if self.state.current_resource is not None and href:
                self.tables.add_file(self.state.current_resource, href)

    def feed_end(self, element) -> None:
        tag = local_name(element.tag)
        if tag == "organization":
            self.state.close_organization()
        elif tag == "organizations":
            self.state.close_organizations()
        elif tag == "resource":
            self.state.close_resource()

    def _on_item(self, element) -> None:
        identifier = get_attr(element, "identifier")
        identifierref = get_attr(element, "identifierref")
        if identifier is None or identifierref is None:
            return
        tables = self.tables
        if tables.first_item_ref_any is None:
            tables.first_item_ref_any = identifierref
        if (
            self.state.current_organization_is_default
            and tables.first_item_ref_in_default_org is None
        ):
            tables.first_item_ref_in_default_org = identifierref
        tables.items.append(
            ItemRef(
                identifier=identifier,
                identifierref=identifierref,
                parameters=get_attr(element, "parameters"),
                organization=self.state.current_organization,
            )
        )

    def _on_resource(self, element) -> None:
        identifier = get_attr(element, "identifier")
        if identifier is None:
            return
        # scormtype may be unprefixed or carry the adlcp: prefix
        self.tables.add_resource(
            ResourceRecord(
                identifier=identifier,
                href=get_attr(element, "href"),
                scorm_type=get_attr(element, "scormtype"),
            )
        )
        self.state.open_resource(identifier)

    def parse(self, data: bytes) -> ManifestTables:
        try:
            data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedManifestError(f"manifest is not valid UTF-8: {e}") from e
        if not data.strip():
            raise MalformedManifestError("manifest is empty")

        # Recovery keeps undeclared prefixes as raw ``prefix:name`` qnames;
        # everything except namespace errors is still fatal below.
        events = etree.iterparse(
            io.BytesIO(data),
            events=("start", "end"),
            encoding="utf-8",
            resolve_entities=False,
            no_network=True,
            recover=True,
        )
        try:
            for event, element in events:
                if not isinstance(element.tag, str):
                    continue
                if event == "start":
                    self.feed_start(element)
                else:
                    self.feed_end(element)
                    element.clear()
        except etree.XMLSyntaxError as e:
            raise MalformedManifestError(f"failed to parse manifest: {e}") from e

        errors = fatal_errors(events.error_log)
        if errors:
            first = errors[0]
            raise MalformedManifestError(
                f"failed to parse manifest: {first.message.strip()} "
                f"(line {first.line}, column {first.column})"
            )
        return self.tables


def build_tables(source: Union[str, bytes]) -> ManifestTables:
    """Run the streaming pass and return the intermediate tables."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    return ManifestParser().parse(source)


def parse_manifest(source: Union[str, bytes]) -> ParsedManifest:
    """
    Parse manifest text and resolve its launch paths.

    Args:
        source: Manifest document as text or UTF-8 bytes

    Returns:
        ParsedManifest with the default launch path and the SCO list

    Raises:
        MalformedManifestError: If the document is not well-formed UTF-8 XML
        UnresolvableLaunchError: If no launch path can be resolved
    """
    tables = build_tables(source)
    logger.debug(
        "Manifest tables: %d resources, %d items, default organization %r",
        len(tables.resources),
        len(tables.items),
        tables.default_organization,
    )
    return resolve(tables)


def parse_manifest_file(path: Union[str, os.PathLike]) -> ParsedManifest:
    """Read ``path`` and parse it as a manifest."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise MissingManifestError(f"cannot read manifest: {e}") from e
    return parse_manifest(data)
