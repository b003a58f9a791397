"""Paragraphs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

from docx_bundle.components.base import Component
from docx_bundle.components.text import Text
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import find_first, get_int_val, get_val, local_name, qualify

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Paragraph(Component):
    """A block of text runs sharing paragraph-level formatting.

    ``numbering`` is a ``(num_id, level)`` pair referring to the numbering
    part; spacing values are in twips.
    """

    children: List[Text] = field(default_factory=list)
    style: Optional[str] = None
    alignment: Optional[str] = None
    spacing_before: Optional[int] = None
    spacing_after: Optional[int] = None
    numbering: Optional[Tuple[int, int]] = None

    @property
    def text(self) -> str:
        return "".join(child.text for child in self.children)

    def to_node(self, ancestry: Sequence[object] = ()) -> ET.Element:
        paragraph_el = ET.Element(qualify("w:p"))
        properties = self._properties_node()
        if properties is not None:
            paragraph_el.append(properties)
        child_ancestry = [*ancestry, self]
        for child in self.children:
            paragraph_el.append(child.to_node(child_ancestry))
        return paragraph_el

    @classmethod
    def from_node(cls, node: ET.Element) -> "Paragraph":
        ppr = find_first(node, "w:pPr")
        children: List[Text] = []
        for child in node:
            tag = local_name(child.tag)
            if tag == "r":
                children.append(Text.from_node(child))
            elif tag != "pPr":
                LOGGER.debug("Skipping paragraph child element: %s", tag)

        numbering = None
        num_id = get_int_val(ppr, "w:numPr/w:numId")
        level = get_int_val(ppr, "w:numPr/w:ilvl")
        if num_id is not None:
            numbering = (num_id, level or 0)

        return cls(
            children=children,
            style=get_val(ppr, "w:pStyle"),
            alignment=get_val(ppr, "w:jc"),
            spacing_before=get_int_val(ppr, "w:spacing", "w:before"),
            spacing_after=get_int_val(ppr, "w:spacing", "w:after"),
            numbering=numbering,
        )

    def _properties_node(self) -> Optional[ET.Element]:
        # Child order follows the CT_PPr sequence.
        ppr = ET.Element(qualify("w:pPr"))
        if self.style:
            ET.SubElement(ppr, qualify("w:pStyle"), {qualify("w:val"): self.style})
        if self.numbering is not None:
            num_id, level = self.numbering
            num_pr = ET.SubElement(ppr, qualify("w:numPr"))
            ET.SubElement(num_pr, qualify("w:ilvl"), {qualify("w:val"): str(level)})
            ET.SubElement(num_pr, qualify("w:numId"), {qualify("w:val"): str(num_id)})
        if self.spacing_before is not None or self.spacing_after is not None:
            spacing = ET.SubElement(ppr, qualify("w:spacing"))
            if self.spacing_before is not None:
                spacing.set(qualify("w:before"), str(self.spacing_before))
            if self.spacing_after is not None:
                spacing.set(qualify("w:after"), str(self.spacing_after))
        if self.alignment:
            ET.SubElement(ppr, qualify("w:jc"), {qualify("w:val"): self.alignment})
        return ppr if len(ppr) else None
