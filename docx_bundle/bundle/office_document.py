"""The main document part of a word-processing package."""
from __future__ import annotations

from typing import Iterable, List, Optional, Union
from xml.etree import ElementTree as ET

from docx_bundle.bundle.content_types import MAIN_DOCUMENT, STYLES
from docx_bundle.bundle.parts import XmlFile
from docx_bundle.bundle.relationships import RELTYPE_STYLES, Relationships
from docx_bundle.bundle.styles import Styles
from docx_bundle.components.base import Component, render_children
from docx_bundle.components.dispatch import components_from_nodes
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.paths import rels_path_for
from docx_bundle.utils.xml_utils import Namespaces, declare_namespaces, find_all, qualify

LOGGER = get_logger(__name__)


class OfficeDocument(XmlFile):
    """Root part owning the body content and the document's relationships.

    ``children`` is copied into a new list; later edits go through
    :meth:`append` and :meth:`set` or the ``children`` attribute.
    """

    content_type = MAIN_DOCUMENT.content_type

    def __init__(
        self,
        location: str = MAIN_DOCUMENT.location,
        relationships: Optional[Relationships] = None,
        children: Optional[Iterable[Component]] = None,
    ) -> None:
        super().__init__(location)
        self.relationships = relationships if relationships is not None else Relationships(rels_path_for(location))
        self.children: List[Component] = list(children or [])
        self._styles: Optional[Styles] = None

    @property
    def styles(self) -> Styles:
        """The styles part, linked to this document on first access.

        The result is cached; later changes made directly on
        ``relationships`` are not reflected here.
        """
        if self._styles is None:
            self._styles = self.relationships.ensure_relationship(RELTYPE_STYLES, lambda: Styles(STYLES.location))
        return self._styles

    def append(self, children: Union[Component, Iterable[Component]]) -> None:
        """Add content to the end of the document body."""
        if isinstance(children, Component):
            children = [children]
        self.children.extend(children)

    def set(self, children: Union[Component, Iterable[Component]]) -> None:
        """Replace the document body, keeping the same ``children`` list object."""
        self.children.clear()
        self.append(children)

    def to_node(self) -> ET.Element:
        document_el = ET.Element(qualify("w:document"))
        body = ET.SubElement(document_el, qualify("w:body"))
        body.extend(render_children(self.children, [self]))
        declare_namespaces(document_el, Namespaces.ALL)
        return document_el

    @classmethod
    def from_archive(cls, archive, location: str) -> "OfficeDocument":
        """Instantiate this class from the XML of an existing package."""
        relationships = Relationships.from_archive(archive, rels_path_for(location))
        root = archive.read_xml(location)
        children = components_from_nodes(find_all(root, "w:body/*"))
        LOGGER.debug("Read %d body elements from %s", len(children), location)
        return cls(location, relationships, children)
