"""Launch path resolution over parsed manifest tables.

Default launch, first rule that yields a value wins:

1. first item reference inside the default organization
2. first item reference anywhere
3. first resource (table order) with a usable href

A reference chosen by rule 1 or 2 whose resource has no usable href falls
straight through to rule 3.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from app.scorm.errors import UnresolvableLaunchError
from app.scorm.models import ManifestTables, ParsedManifest, ResourceRecord, ScoEntry

logger = logging.getLogger(__name__)


def resolve_launch_href(
    resources: Dict[str, ResourceRecord], identifierref: str
) -> Optional[str]:
    record = resources.get(identifierref)
    if record is None:
        return None
    return record.launch_href()


def first_resource_href(resources: Dict[str, ResourceRecord]) -> Optional[str]:
    for record in resources.values():
        href = record.launch_href()
        if href:
            return href
    return None


def resolve_default_launch(tables: ManifestTables) -> str:
    """Pick the package's default launch path.

    Raises:
        UnresolvableLaunchError: If no tier yields a usable href
    """
    candidate = tables.first_item_ref_in_default_org or tables.first_item_ref_any
    href = None
    if candidate is not None:
        href = resolve_launch_href(tables.resources, candidate)
        if href is None:
            logger.debug(
                "Item reference %r has no usable resource, using first resource",
                candidate,
            )
    if href is None:
        href = first_resource_href(tables.resources)
    if not href:
        raise UnresolvableLaunchError()
    return href


def enumerate_scos(tables: ManifestTables) -> List[ScoEntry]:
    """SCOs in source order; items with a missing or href-less resource are dropped."""
    scos = []
    for item in tables.items:
        href = resolve_launch_href(tables.resources, item.identifierref)
        if href is None:
            logger.debug(
                "Dropping item %r: resource %r not launchable",
                item.identifier,
                item.identifierref,
            )
            continue
        scos.append(ScoEntry(item.identifier, href, item.parameters))
    return scos


def resolve(tables: ManifestTables) -> ParsedManifest:
    return ParsedManifest(
        default_launch=resolve_default_launch(tables),
        scos=tuple(enumerate_scos(tables)),
        default_organization=tables.default_organization,
    )
