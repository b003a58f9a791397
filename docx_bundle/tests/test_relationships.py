"""Tests for relationship parsing, creation and serialization."""
import unittest
from xml.etree import ElementTree as ET

from docx_bundle.bundle.archive import ZipArchive
from docx_bundle.bundle.parts import BinaryFile
from docx_bundle.bundle.relationships import (
    PACKAGE_REL_NS,
    RELTYPE_HEADER,
    RELTYPE_HYPERLINK,
    RELTYPE_IMAGE,
    RELTYPE_STYLES,
    Relationship,
    Relationships,
)
from docx_bundle.bundle.styles import Styles
from docx_bundle.errors import DuplicateRelationshipError


doc_rels_xml = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header" Target="header1.xml"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
  <Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="media/image1.png"/>
  <Relationship Id="rId4" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer" Target="footer1.xml"/>
  <Relationship Id="rId5" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink" Target="https://example.com" TargetMode="External"/>
</Relationships>
"""

header_rels_xml = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="../word/media/image1.png"/>
</Relationships>
"""

styles_xml = """
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:style w:type="paragraph" w:styleId="Normal"><w:name w:val="Normal"/></w:style>
</w:styles>
"""


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> Styles:
        self.calls += 1
        return Styles("word/styles.xml")


class RelationshipsFromArchiveTest(unittest.TestCase):
    """Validate relationship parsing and target hydration."""

    def setUp(self) -> None:
        self.archive = ZipArchive(
            raw_parts={
                "word/_rels/document.xml.rels": doc_rels_xml.encode("utf-8"),
                "word/header1.xml": b"<hdr/>",
                "word/_rels/header1.xml.rels": header_rels_xml.encode("utf-8"),
                "word/styles.xml": styles_xml.encode("utf-8"),
                "word/media/image1.png": b"\x89PNG",
            }
        )

    def test_targets_are_resolved_against_source_directory(self) -> None:
        relationships = Relationships.from_archive(self.archive, "word/_rels/document.xml.rels")

        self.assertEqual(len(relationships), 5)
        self.assertEqual(relationships.source, "word/document.xml")
        self.assertEqual(relationships.find("rId1").target, "word/header1.xml")
        self.assertEqual(relationships.find("rId3").target, "word/media/image1.png")
        self.assertEqual(relationships.find("rId3").rel_type, RELTYPE_IMAGE)

    def test_known_types_are_hydrated(self) -> None:
        relationships = Relationships.from_archive(self.archive, "word/_rels/document.xml.rels")

        self.assertIsInstance(relationships.find("rId2").part, Styles)
        self.assertIn("Normal", relationships.find("rId2").part)
        header = relationships.find("rId1").part
        self.assertIsInstance(header, BinaryFile)
        self.assertEqual(header.data, b"<hdr/>")
        assert header.relationships is not None
        self.assertEqual(header.relationships.find("rId1").target, "word/media/image1.png")

    def test_external_and_dangling_targets(self) -> None:
        relationships = Relationships.from_archive(self.archive, "word/_rels/document.xml.rels")

        hyperlink = relationships.find("rId5")
        self.assertTrue(hyperlink.is_external)
        self.assertEqual(hyperlink.target, "https://example.com")
        self.assertIsNone(hyperlink.part)
        # footer1.xml is declared but absent from the package
        self.assertIsNone(relationships.find("rId4").part)

    def test_shared_targets_are_loaded_once(self) -> None:
        relationships = Relationships.from_archive(self.archive, "word/_rels/document.xml.rels")
        header = relationships.find("rId1").part
        self.assertIs(header.relationships.find("rId1").part, relationships.find("rId3").part)

    def test_missing_part_yields_empty_set(self) -> None:
        relationships = Relationships.from_archive(self.archive, "word/_rels/settings.xml.rels")
        self.assertEqual(len(relationships), 0)
        self.assertEqual(relationships.get_related(), [])


class RelationshipsMutationTest(unittest.TestCase):
    """Ensure, add and duplicate handling."""

    def setUp(self) -> None:
        self.relationships = Relationships("word/_rels/document.xml.rels")

    def test_ensure_relationship_calls_factory_once(self) -> None:
        factory = _Counter()
        parts = [self.relationships.ensure_relationship(RELTYPE_STYLES, factory) for _ in range(5)]

        self.assertEqual(factory.calls, 1)
        self.assertTrue(all(part is parts[0] for part in parts))
        self.assertEqual(len([rel for rel in self.relationships if rel.rel_type == RELTYPE_STYLES]), 1)

    def test_ensure_relationship_binds_dangling_relationship(self) -> None:
        self.relationships.add_relationship(Relationship("rId7", RELTYPE_STYLES, "word/styles.xml"))
        part = self.relationships.ensure_relationship(RELTYPE_STYLES, _Counter())

        self.assertEqual(len(self.relationships), 1)
        self.assertIs(self.relationships.find("rId7").part, part)

    def test_binding_external_relationship_makes_it_internal(self) -> None:
        self.relationships.add_relationship(
            Relationship("rId3", RELTYPE_STYLES, "https://example.com/styles.xml", is_external=True)
        )
        part = self.relationships.ensure_relationship(RELTYPE_STYLES, _Counter())

        relationship = self.relationships.find("rId3")
        self.assertFalse(relationship.is_external)
        self.assertEqual(relationship.target, "word/styles.xml")
        rel_el = self.relationships.to_node()[0]
        self.assertEqual(rel_el.get("Target"), "styles.xml")
        self.assertIsNone(rel_el.get("TargetMode"))
        self.assertIs(relationship.part, part)

    def test_add_relationship_rejects_duplicate_id(self) -> None:
        self.relationships.add_relationship(Relationship("rId1", RELTYPE_HEADER, "word/header1.xml"))
        with self.assertRaises(DuplicateRelationshipError):
            self.relationships.add_relationship(Relationship("rId1", RELTYPE_IMAGE, "word/media/image1.png"))
        self.assertEqual(self.relationships.find("rId1").rel_type, RELTYPE_HEADER)

    def test_add_picks_first_free_id(self) -> None:
        self.relationships.add_relationship(Relationship("rId2", RELTYPE_HEADER, "word/header1.xml"))
        self.assertEqual(self.relationships.add(RELTYPE_HYPERLINK, "https://example.com", is_external=True), "rId1")
        self.assertEqual(self.relationships.add(RELTYPE_STYLES, Styles()), "rId3")

    def test_get_related_guards_cycles(self) -> None:
        first = BinaryFile("word/a.xml", b"", relationships=Relationships("word/_rels/a.xml.rels"))
        second = BinaryFile("word/b.xml", b"", relationships=Relationships("word/_rels/b.xml.rels"))
        first.relationships.add(RELTYPE_HEADER, second)
        second.relationships.add(RELTYPE_HEADER, first)
        self.relationships.add(RELTYPE_HEADER, first)

        locations = [part.location for part in self.relationships.get_related()]
        self.assertEqual(
            locations,
            [
                "word/_rels/document.xml.rels",
                "word/a.xml",
                "word/_rels/a.xml.rels",
                "word/b.xml",
                "word/_rels/b.xml.rels",
            ],
        )

    def test_to_node_writes_relative_and_external_targets(self) -> None:
        self.relationships.add(RELTYPE_STYLES, Styles("word/styles.xml"))
        self.relationships.add(RELTYPE_HYPERLINK, "https://example.com", is_external=True)

        root = ET.fromstring(self.relationships.to_bytes())
        entries = root.findall(f"{{{PACKAGE_REL_NS}}}Relationship")
        self.assertEqual(root.tag, f"{{{PACKAGE_REL_NS}}}Relationships")
        self.assertEqual([entry.get("Target") for entry in entries], ["styles.xml", "https://example.com"])
        self.assertIsNone(entries[0].get("TargetMode"))
        self.assertEqual(entries[1].get("TargetMode"), "External")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
