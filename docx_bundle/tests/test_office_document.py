"""Tests for the main document part."""
import unittest
from xml.etree import ElementTree as ET

from docx_bundle.bundle.archive import ZipArchive
from docx_bundle.bundle.office_document import OfficeDocument
from docx_bundle.bundle.relationships import RELTYPE_STYLES, Relationships
from docx_bundle.bundle.styles import Styles
from docx_bundle.components.document import Document
from docx_bundle.components.paragraph import Paragraph
from docx_bundle.components.table import Cell, Row, Table
from docx_bundle.components.text import Text
from docx_bundle.errors import PartNotFoundError
from docx_bundle.utils.xml_utils import Namespaces, find_all, find_first, local_name, qualify

DOCUMENT_RELS = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
</Relationships>
"""

STYLES_XML = """
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:style w:type="paragraph" w:styleId="Heading1"><w:name w:val="heading 1"/></w:style>
</w:styles>
"""


def _archive(document_xml: str, **parts: str) -> ZipArchive:
    raw = {"word/document.xml": document_xml.encode("utf-8")}
    raw.update({name: xml.encode("utf-8") for name, xml in parts.items()})
    return ZipArchive(raw_parts=raw)


class OfficeDocumentFromArchiveTest(unittest.TestCase):
    """Test document parsing functionality."""

    def test_parse_basic_paragraph(self) -> None:
        xml = """
        <w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:body>
            <w:p>
              <w:r>
                <w:t>Hello World</w:t>
              </w:r>
            </w:p>
          </w:body>
        </w:document>
        """
        document = OfficeDocument.from_archive(_archive(xml), "word/document.xml")

        self.assertEqual(len(document.children), 1)
        paragraph = document.children[0]
        self.assertIsInstance(paragraph, Paragraph)
        self.assertEqual(len(paragraph.children), 1)
        self.assertEqual(paragraph.children[0].text, "Hello World")
        self.assertEqual(len(document.relationships), 0)
        self.assertEqual(document.relationships.location, "word/_rels/document.xml.rels")

    def test_parse_paragraph_with_formatting(self) -> None:
        xml = """
        <w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:body>
            <w:p>
              <w:pPr>
                <w:pStyle w:val="Heading1"/>
              </w:pPr>
              <w:r>
                <w:rPr>
                  <w:b/>
                  <w:i/>
                </w:rPr>
                <w:t>Formatted Text</w:t>
              </w:r>
            </w:p>
          </w:body>
        </w:document>
        """
        document = OfficeDocument.from_archive(_archive(xml), "word/document.xml")

        paragraph = document.children[0]
        self.assertEqual(paragraph.style, "Heading1")
        self.assertEqual(paragraph.children[0].text, "Formatted Text")
        self.assertTrue(paragraph.children[0].bold)
        self.assertTrue(paragraph.children[0].italic)

    def test_parse_mixed_content_and_skip_unknown(self) -> None:
        xml = """
        <w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:body>
            <w:p><w:r><w:t>First paragraph</w:t></w:r></w:p>
            <w:sdt><w:sdtContent><w:p/></w:sdtContent></w:sdt>
            <w:tbl>
              <w:tblPr><w:tblStyle w:val="TableGrid"/></w:tblPr>
              <w:tr><w:tc><w:p><w:r><w:t>Table content</w:t></w:r></w:p></w:tc></w:tr>
            </w:tbl>
            <w:p><w:r><w:t>Second paragraph</w:t></w:r></w:p>
            <w:sectPr/>
          </w:body>
        </w:document>
        """
        document = OfficeDocument.from_archive(_archive(xml), "word/document.xml")

        self.assertEqual([type(child) for child in document.children], [Paragraph, Table, Paragraph])
        self.assertEqual(document.children[0].text, "First paragraph")
        self.assertEqual(document.children[1].style, "TableGrid")
        self.assertEqual(len(document.children[1].rows), 1)
        self.assertEqual(document.children[2].text, "Second paragraph")

    def test_relationships_and_styles_are_loaded(self) -> None:
        xml = '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"><w:body/></w:document>'
        archive = _archive(xml, **{"word/_rels/document.xml.rels": DOCUMENT_RELS, "word/styles.xml": STYLES_XML})
        document = OfficeDocument.from_archive(archive, "word/document.xml")

        self.assertEqual(len(document.relationships), 1)
        self.assertIn("Heading1", document.styles)
        self.assertEqual(document.styles.get("Heading1").name, "heading 1")
        self.assertEqual(len(document.relationships), 1)

    def test_missing_document_part_is_fatal(self) -> None:
        with self.assertRaises(PartNotFoundError):
            OfficeDocument.from_archive(ZipArchive(), "word/document.xml")


class OfficeDocumentTest(unittest.TestCase):
    """Building documents in memory."""

    def test_default_relationships_location(self) -> None:
        document = OfficeDocument("word/document.xml")
        self.assertEqual(document.relationships.location, "word/_rels/document.xml.rels")

    def test_append_and_set(self) -> None:
        a, b, c, x = (Paragraph([Text(name)]) for name in "abcx")
        document = OfficeDocument("word/document.xml")
        children = document.children

        document.append([a, b])
        document.append(c)
        self.assertEqual(document.children, [a, b, c])

        document.set([x])
        self.assertEqual(document.children, [x])
        self.assertIs(document.children, children)

        document.set(a)
        self.assertIs(children[0], a)

    def test_styles_are_created_once(self) -> None:
        document = OfficeDocument("word/document.xml")
        first = document.styles
        second = document.styles

        self.assertIs(first, second)
        self.assertIsInstance(first, Styles)
        self.assertEqual(first.location, "word/styles.xml")
        styles_relationships = [rel for rel in document.relationships if rel.rel_type == RELTYPE_STYLES]
        self.assertEqual(len(styles_relationships), 1)
        self.assertIs(styles_relationships[0].part, first)

    def test_styles_reuse_existing_relationship(self) -> None:
        relationships = Relationships("word/_rels/document.xml.rels")
        existing = Styles("word/styles.xml")
        relationships.add(RELTYPE_STYLES, existing)
        document = OfficeDocument("word/document.xml", relationships)
        self.assertIs(document.styles, existing)

    def test_get_related(self) -> None:
        document = OfficeDocument("word/document.xml")
        self.assertEqual(document.get_related(), [document])

        styles = document.styles
        self.assertEqual(document.get_related(), [document, document.relationships, styles])

    def test_to_node_declares_namespaces_and_renders_children_in_order(self) -> None:
        document = OfficeDocument(
            "word/document.xml",
            children=[
                Paragraph([Text("one")]),
                Document([Paragraph([Text("two")]), Table([Row([Cell()])])]),
                Paragraph([Text("three")]),
            ],
        )
        data = document.to_bytes()
        self.assertTrue(data.startswith(b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'))
        for prefix in ("w", "r", "w14", "mc", "wp"):
            self.assertIn(f'xmlns:{prefix}="{Namespaces.ALL[prefix]}"'.encode("utf-8"), data)

        root = ET.fromstring(data)
        self.assertEqual(local_name(root.tag), "document")
        body = find_first(root, "w:body")
        self.assertEqual([local_name(child.tag) for child in body], ["p", "p", "tbl", "p"])

    def test_children_receive_document_in_ancestry(self) -> None:
        seen = []

        class Probe(Paragraph):
            def to_node(self, ancestry=()):
                seen.append(list(ancestry))
                return super().to_node(ancestry)

        document = OfficeDocument("word/document.xml", children=[Probe()])
        document.to_node()
        self.assertEqual(seen, [[document]])

    def test_round_trip_through_node(self) -> None:
        children = [
            Paragraph([Text("Title", bold=True)], style="Title", alignment="center"),
            Table(
                [
                    Row([Cell([Paragraph([Text("A")])], row_span=2), Cell([Paragraph([Text("B")])])]),
                    Row([Cell([Paragraph([Text("C")])])]),
                ],
                column_widths=[2000, 3000],
            ),
            Paragraph([Text("Closing\tline")]),
        ]
        document = OfficeDocument("word/document.xml", children=children)
        archive = ZipArchive()
        archive.write_xml("word/document.xml", document.to_node())

        rebuilt = OfficeDocument.from_archive(archive, "word/document.xml")
        self.assertEqual(rebuilt.children, children)
        self.assertEqual(len(find_all(document.to_node(), "w:body/w:tbl/w:tr")), 2)



class DocumentCompositeTest(unittest.TestCase):
    """Groups of body content without an element of their own."""

    def test_from_node_keeps_recognised_children(self) -> None:
        xml = """
        <w:body xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:p><w:r><w:t>Intro</w:t></w:r></w:p>
          <w:sdt><w:sdtContent><w:p/></w:sdtContent></w:sdt>
          <w:tbl><w:tr><w:tc><w:p><w:r><w:t>Cell</w:t></w:r></w:p></w:tc></w:tr></w:tbl>
          <w:bookmarkStart w:id="0" w:name="end"/>
          <w:sectPr/>
        </w:body>
        """
        group = Document.from_node(ET.fromstring(xml))

        self.assertEqual([type(child) for child in group.children], [Paragraph, Table])
        self.assertEqual(group.children[0].text, "Intro")
        self.assertEqual(group.children[1].rows[0].cells[0].children, [Paragraph([Text("Cell")])])

    def test_round_trip_through_container(self) -> None:
        group = Document(
            [
                Paragraph([Text("one")], style="Heading2"),
                Table([Row([Cell([Paragraph([Text("x")])], col_span=2)])], column_widths=[100, 200]),
                Paragraph([Text("two", italic=True)]),
            ]
        )
        container = ET.Element(qualify("w:body"))
        container.extend(group.to_node())

        self.assertEqual(len(container), 3)
        self.assertEqual(Document.from_node(container), group)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
