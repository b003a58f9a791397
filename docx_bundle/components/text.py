"""Text runs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence
from xml.etree import ElementTree as ET

from docx_bundle.components.base import Component, on_off
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import XML_SPACE, find_first, get_int_val, get_val, local_name, qualify

LOGGER = get_logger(__name__)

# Characters written as their own run content element instead of w:t text.
_SPECIAL_CHARACTERS = {"\t": "w:tab", "\n": "w:br", "\r": "w:cr"}
_CHARACTER_FOR_TAG = {"tab": "\t", "br": "\n", "cr": "\r"}


@dataclass(slots=True)
class Text(Component):
    """A contiguous run of text with associated inline formatting."""

    text: str = ""
    style: Optional[str] = None
    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: Optional[str] = None
    color: Optional[str] = None
    font_size: Optional[int] = None

    def to_node(self, ancestry: Sequence[object] = ()) -> ET.Element:
        run_el = ET.Element(qualify("w:r"))
        properties = self._properties_node()
        if properties is not None:
            run_el.append(properties)
        buffer: List[str] = []
        for character in self.text:
            if character not in _SPECIAL_CHARACTERS:
                buffer.append(character)
                continue
            self._flush(run_el, buffer)
            ET.SubElement(run_el, qualify(_SPECIAL_CHARACTERS[character]))
        self._flush(run_el, buffer)
        return run_el

    @classmethod
    def from_node(cls, node: ET.Element) -> "Text":
        rpr = find_first(node, "w:rPr")
        parts: List[str] = []
        for child in node:
            tag = local_name(child.tag)
            if tag == "t":
                parts.append(child.text or "")
            elif tag in _CHARACTER_FOR_TAG:
                parts.append(_CHARACTER_FOR_TAG[tag])
            elif tag != "rPr":
                LOGGER.debug("Skipping run child element: %s", tag)
        underline = get_val(rpr, "w:u")
        return cls(
            text="".join(parts),
            style=get_val(rpr, "w:rStyle"),
            bold=on_off(rpr, "w:b"),
            italic=on_off(rpr, "w:i"),
            strike=on_off(rpr, "w:strike"),
            underline=None if underline == "none" else underline,
            color=get_val(rpr, "w:color"),
            font_size=get_int_val(rpr, "w:sz"),
        )

    def _properties_node(self) -> Optional[ET.Element]:
        rpr = ET.Element(qualify("w:rPr"))
        if self.style:
            ET.SubElement(rpr, qualify("w:rStyle"), {qualify("w:val"): self.style})
        if self.bold:
            ET.SubElement(rpr, qualify("w:b"))
        if self.italic:
            ET.SubElement(rpr, qualify("w:i"))
        if self.strike:
            ET.SubElement(rpr, qualify("w:strike"))
        if self.color:
            ET.SubElement(rpr, qualify("w:color"), {qualify("w:val"): self.color})
        if self.font_size is not None:
            ET.SubElement(rpr, qualify("w:sz"), {qualify("w:val"): str(self.font_size)})
        if self.underline:
            ET.SubElement(rpr, qualify("w:u"), {qualify("w:val"): self.underline})
        return rpr if len(rpr) else None

    @staticmethod
    def _flush(run_el: ET.Element, buffer: List[str]) -> None:
        if not buffer:
            return
        text_el = ET.SubElement(run_el, qualify("w:t"), {XML_SPACE: "preserve"})
        text_el.text = "".join(buffer)
        buffer.clear()
