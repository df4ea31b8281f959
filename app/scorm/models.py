"""Data model for manifest resolution.

The parser builds ``ResourceRecord`` and ``ItemRef`` values into a
``ManifestTables`` instance; the launch resolver turns those tables into the
``ParsedManifest`` handed to the caller. Everything here lives for the duration
of a single parse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class ResourceRecord:
    """A ``<resource>`` entry, possibly assembled from several blocks."""

    identifier: str
    href: Optional[str] = None
    files: List[str] = field(default_factory=list)
    scorm_type: Optional[str] = None

    def launch_href(self) -> Optional[str]:
        """Direct href if present, otherwise the first nested file href."""
        if self.href:
            return self.href
        if self.files:
            return self.files[0]
        return None


def merge_resource(existing: ResourceRecord, incoming: ResourceRecord) -> ResourceRecord:
    """Combine two blocks that share a resource identifier.

    Rules:
        * href: last non-empty value wins
        * files: concatenated, existing files first
        * scorm_type: last non-empty value wins

    Some authoring tools split a resource over several ``<resource>`` blocks,
    so duplicates are folded together instead of rejecting the manifest.
    """
    return ResourceRecord(
        identifier=existing.identifier,
        href=incoming.href or existing.href,
        files=existing.files + incoming.files,
        scorm_type=incoming.scorm_type or existing.scorm_type,
    )


@dataclass(frozen=True)
class ItemRef:
    """An ``<item>`` pointing at a resource."""

    identifier: str
    identifierref: str
    parameters: Optional[str] = None
    organization: Optional[str] = None


@dataclass
class ManifestTables:
    """Intermediate tables produced by one streaming pass over a manifest."""

    resources: Dict[str, ResourceRecord] = field(default_factory=dict)
    items: List[ItemRef] = field(default_factory=list)
    default_organization: Optional[str] = None
    first_item_ref_in_default_org: Optional[str] = None
    first_item_ref_any: Optional[str] = None

    def add_resource(self, record: ResourceRecord) -> ResourceRecord:
        existing = self.resources.get(record.identifier)
        if existing is not None:
            record = merge_resource(existing, record)
        self.resources[record.identifier] = record
        return record

    def add_file(self, resource_id: str, href: str) -> None:
        record = self.resources.setdefault(resource_id, ResourceRecord(resource_id))
        record.files.append(href)


@dataclass(frozen=True)
class ScoEntry:
    """A launchable SCO: item identifier, resolved href and launch parameters."""

    identifier: str
    href: str
    parameters: Optional[str] = None

    def as_tuple(self) -> Tuple[str, str, Optional[str]]:
        return (self.identifier, self.href, self.parameters)


@dataclass(frozen=True)
class ParsedManifest:
    """Result of resolving a manifest: default launch path and SCO list."""

    default_launch: str
    scos: Tuple[ScoEntry, ...] = ()
    default_organization: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "defaultLaunch": self.default_launch,
            "defaultOrganization": self.default_organization,
            "scos": [
                {
                    "identifier": sco.identifier,
                    "href": sco.href,
                    "parameters": sco.parameters,
                }
                for sco in self.scos
            ],
        }
