"""Styles part holding the style definitions shared by the document."""
from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional
from xml.etree import ElementTree as ET

from docx_bundle.bundle.content_types import STYLES
from docx_bundle.bundle.parts import XmlFile
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import find_all, find_first, get_val, qualify

LOGGER = get_logger(__name__)

# Property blocks copied verbatim between the style header and the model.
_PROPERTY_TAGS = ("w:pPr", "w:rPr", "w:tblPr", "w:trPr", "w:tcPr", "w:tblStylePr")


@dataclass(slots=True)
class StyleDefinition:
    """A single ``w:style`` entry."""

    style_id: str
    style_type: str = "paragraph"
    name: Optional[str] = None
    based_on: Optional[str] = None
    next_style: Optional[str] = None
    is_default: bool = False
    is_primary: bool = False
    properties: List[ET.Element] = field(default_factory=list, compare=False)

    def to_node(self) -> ET.Element:
        attrib = {qualify("w:type"): self.style_type, qualify("w:styleId"): self.style_id}
        if self.is_default:
            attrib[qualify("w:default")] = "1"
        style_el = ET.Element(qualify("w:style"), attrib)
        for tag, value in (("w:name", self.name), ("w:basedOn", self.based_on), ("w:next", self.next_style)):
            if value is not None:
                ET.SubElement(style_el, qualify(tag), {qualify("w:val"): value})
        if self.is_primary:
            ET.SubElement(style_el, qualify("w:qFormat"))
        style_el.extend(deepcopy(block) for block in self.properties)
        return style_el

    @classmethod
    def from_node(cls, style_el: ET.Element) -> Optional["StyleDefinition"]:
        style_id = style_el.attrib.get(qualify("w:styleId"))
        if not style_id:
            return None
        properties = [
            deepcopy(child) for child in style_el if child.tag in {qualify(tag) for tag in _PROPERTY_TAGS}
        ]
        return cls(
            style_id=style_id,
            style_type=style_el.attrib.get(qualify("w:type"), "paragraph"),
            name=get_val(style_el, "w:name"),
            based_on=get_val(style_el, "w:basedOn"),
            next_style=get_val(style_el, "w:next"),
            is_default=style_el.attrib.get(qualify("w:default")) in ("1", "true"),
            is_primary=find_first(style_el, "w:qFormat") is not None,
            properties=properties,
        )


class Styles(XmlFile):
    """The styles part. Created lazily by the document that relates to it."""

    content_type = STYLES.content_type

    def __init__(
        self,
        location: str = STYLES.location,
        styles: Optional[Iterable[StyleDefinition]] = None,
        defaults: Optional[ET.Element] = None,
        latent: Optional[ET.Element] = None,
    ) -> None:
        super().__init__(location)
        self._styles: Dict[str, StyleDefinition] = {}
        self.defaults = defaults
        self.latent = latent
        for style in styles or ():
            self.add(style)

    def __len__(self) -> int:
        return len(self._styles)

    def __iter__(self) -> Iterator[StyleDefinition]:
        return iter(list(self._styles.values()))

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def add(self, style: StyleDefinition) -> StyleDefinition:
        """Register a style, replacing any earlier definition with the same id."""
        if style.style_id in self._styles:
            LOGGER.debug("Replacing style definition %s", style.style_id)
        self._styles[style.style_id] = style
        return style

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def to_node(self) -> ET.Element:
        root = ET.Element(qualify("w:styles"))
        if self.defaults is not None:
            root.append(deepcopy(self.defaults))
        if self.latent is not None:
            root.append(deepcopy(self.latent))
        for style in self._styles.values():
            root.append(style.to_node())
        return root

    @classmethod
    def from_archive(cls, archive, location: str) -> "Styles":
        root = archive.read_xml(location)
        styles = [StyleDefinition.from_node(style_el) for style_el in find_all(root, "w:style")]
        return cls(
            location,
            [style for style in styles if style is not None],
            defaults=find_first(root, "w:docDefaults"),
            latent=find_first(root, "w:latentStyles"),
        )
