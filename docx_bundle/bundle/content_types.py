"""Content types of the parts this library writes and the package manifest."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_bundle.utils.xml_utils import Namespaces, default_namespace_root, parse_xml

CONTENT_TYPES_PATH = "[Content_Types].xml"

CT_MAIN_DOCUMENT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
CT_STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"


@dataclass(frozen=True)
class PartRole:
    """Canonical package path and MIME type for a well-known part."""

    name: str
    location: str
    content_type: str


MAIN_DOCUMENT = PartRole("mainDocument", "word/document.xml", CT_MAIN_DOCUMENT)
STYLES = PartRole("styles", "word/styles.xml", CT_STYLES)
PACKAGE_RELATIONSHIPS = PartRole("relationships", "_rels/.rels", CT_RELATIONSHIPS)

ROLES: Dict[str, PartRole] = {role.name: role for role in (MAIN_DOCUMENT, STYLES, PACKAGE_RELATIONSHIPS)}

DEFAULT_EXTENSIONS: Dict[str, str] = {
    "rels": CT_RELATIONSHIPS,
    "xml": CT_XML,
}


@dataclass
class ContentTypes:
    """The ``[Content_Types].xml`` manifest: defaults by extension, overrides by part."""

    defaults: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EXTENSIONS))
    overrides: Dict[str, str] = field(default_factory=dict)

    def get_content_type(self, location: str) -> Optional[str]:
        """Return the declared content type of a part, override first."""
        part_name = "/" + location.lstrip("/")
        if part_name in self.overrides:
            return self.overrides[part_name]
        return self.defaults.get(_extension(location))

    def register(self, location: str, content_type: Optional[str]) -> None:
        """Declare ``content_type`` for ``location``, adding an override only when needed."""
        if not content_type:
            return
        if self.defaults.get(_extension(location)) == content_type:
            return
        self.overrides["/" + location.lstrip("/")] = content_type

    def to_node(self) -> ET.Element:
        root = default_namespace_root("Types", Namespaces.CONTENT_TYPES["ct"])
        for extension, content_type in sorted(self.defaults.items()):
            ET.SubElement(root, "Default", {"Extension": extension, "ContentType": content_type})
        for part_name, content_type in sorted(self.overrides.items()):
            ET.SubElement(root, "Override", {"PartName": part_name, "ContentType": content_type})
        return root

    @classmethod
    def from_xml(cls, data: bytes) -> "ContentTypes":
        """Parse ``[Content_Types].xml`` content."""
        root = parse_xml(data)
        manifest = cls(defaults={}, overrides={})
        for default in root.findall("ct:Default", Namespaces.CONTENT_TYPES):
            extension = default.get("Extension", "")
            content_type = default.get("ContentType", "")
            if extension and content_type:
                manifest.defaults[extension.lower()] = content_type
        for override in root.findall("ct:Override", Namespaces.CONTENT_TYPES):
            part_name = override.get("PartName", "")
            content_type = override.get("ContentType", "")
            if part_name and content_type:
                manifest.overrides[part_name] = content_type
        return manifest


def _extension(location: str) -> str:
    # "_rels/.rels" has the extension "rels".
    basename = posixpath.basename(location)
    if "." not in basename:
        return ""
    return basename.rpartition(".")[2].lower()
