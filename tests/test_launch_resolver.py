"""
Launch resolution tests
Default launch fallback tiers and SCO enumeration
"""

import pytest

from conftest import manifest
from app.scorm.errors import UnresolvableLaunchError
from app.scorm.launch_resolver import (
    enumerate_scos,
    first_resource_href,
    resolve,
    resolve_default_launch,
)
from app.scorm.manifest_parser import parse_manifest
from app.scorm.models import ItemRef, ManifestTables, ResourceRecord


def _tables(resources=(), items=(), in_default=None, any_ref=None):
    return ManifestTables(
        resources={r.identifier: r for r in resources},
        items=list(items),
        first_item_ref_in_default_org=in_default,
        first_item_ref_any=any_ref,
    )


class TestDefaultLaunch:
    def test_explicit_default_organization(self):
        doc = manifest(
            organizations="""
  <organizations default="A">
    <organization identifier="B"><item identifier="IB" identifierref="RB"/></organization>
    <organization identifier="A"><item identifier="I1" identifierref="R1"/></organization>
  </organizations>
""",
            resources="""
    <resource identifier="RB" href="b.html"/>
    <resource identifier="R1" href="a.html"/>
""",
        )
        assert parse_manifest(doc).default_launch == "a.html"

    def test_first_organization_without_declared_default(self):
        doc = manifest(
            organizations="""
  <organizations>
    <organization identifier="FIRST"><item identifier="I1" identifierref="R1"/></organization>
    <organization identifier="SECOND"><item identifier="I2" identifierref="R2"/></organization>
  </organizations>
""",
            resources="""
    <resource identifier="R2" href="second.html"/>
    <resource identifier="R1" href="first.html"/>
""",
        )
        assert parse_manifest(doc).default_launch == "first.html"

    def test_default_org_without_items_uses_first_item_anywhere(self):
        doc = manifest(
            organizations="""
  <organizations default="EMPTY">
    <organization identifier="OTHER"><item identifier="I1" identifierref="R1"/></organization>
    <organization identifier="EMPTY"><title>Nothing here</title></organization>
  </organizations>
""",
            resources='<resource identifier="R1" href="other.html"/>',
        )
        assert parse_manifest(doc).default_launch == "other.html"

    def test_nested_file_used_when_resource_has_no_href(self):
        doc = manifest(
            organizations="""
  <organizations><organization identifier="O">
    <item identifier="I1" identifierref="R1"/>
  </organization></organizations>
""",
            resources="""
    <resource identifier="R1" type="webcontent">
      <file href="index.html"/>
      <file href="app.js"/>
    </resource>
""",
        )
        assert parse_manifest(doc).default_launch == "index.html"

    def test_no_items_falls_back_to_first_usable_resource(self):
        doc = manifest(
            resources="""
    <resource identifier="EMPTY" type="webcontent"/>
    <resource identifier="R2" href="launch.html"/>
"""
        )
        parsed = parse_manifest(doc)
        assert parsed.default_launch == "launch.html"
        assert parsed.scos == ()

    def test_unresolvable_candidate_skips_to_resource_tier(self):
        # first item anywhere (R-OK) is not consulted once the default-org
        # candidate fails to resolve
        tables = _tables(
            resources=[
                ResourceRecord("R-FIRST", href="first.html"),
                ResourceRecord("R-OK", href="ok.html"),
            ],
            in_default="MISSING",
            any_ref="R-OK",
        )
        assert resolve_default_launch(tables) == "first.html"

    def test_nothing_resolves(self):
        with pytest.raises(UnresolvableLaunchError):
            resolve_default_launch(_tables(resources=[ResourceRecord("R")]))

    def test_empty_tables(self):
        with pytest.raises(UnresolvableLaunchError):
            resolve(ManifestTables())


class TestFirstResourceHref:
    def test_skips_resources_without_href(self):
        resources = {
            "A": ResourceRecord("A"),
            "B": ResourceRecord("B", files=["b.html"]),
            "C": ResourceRecord("C", href="c.html"),
        }
        assert first_resource_href(resources) == "b.html"

    def test_none_when_empty(self):
        assert first_resource_href({}) is None


class TestScoEnumeration:
    def test_missing_resource_dropped_without_failing(self):
        doc = manifest(
            organizations="""
  <organizations default="O">
    <organization identifier="O">
      <item identifier="GHOST" identifierref="NOPE"/>
      <item identifier="REAL" identifierref="R1"/>
    </organization>
  </organizations>
""",
            resources='<resource identifier="R1" href="real.html"/>',
        )
        parsed = parse_manifest(doc)
        assert [s.identifier for s in parsed.scos] == ["REAL"]
        # candidate NOPE is unresolved, so the resource tier decides
        assert parsed.default_launch == "real.html"

    def test_source_order_across_organizations(self):
        tables = _tables(
            resources=[
                ResourceRecord("R1", href="1.html"),
                ResourceRecord("R2", files=["2.html"]),
                ResourceRecord("R3"),
            ],
            items=[
                ItemRef("I2", "R2", organization="B"),
                ItemRef("I3", "R3", organization="A"),
                ItemRef("I1", "R1", parameters="x=1", organization="A"),
            ],
        )
        scos = enumerate_scos(tables)
        assert [s.as_tuple() for s in scos] == [
            ("I2", "2.html", None),
            ("I1", "1.html", "x=1"),
        ]

    def test_items_outside_organizations_are_enumerated(self):
        doc = manifest(
            organizations='<item identifier="LOOSE" identifierref="R1"/>',
            resources='<resource identifier="R1" href="loose.html"/>',
        )
        parsed = parse_manifest(doc)
        assert parsed.default_launch == "loose.html"
        assert [s.identifier for s in parsed.scos] == ["LOOSE"]
