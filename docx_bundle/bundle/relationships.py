"""Relationship sets: the ``.rels`` part owned by each package part."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, TypeVar, Union
from xml.etree import ElementTree as ET

from docx_bundle.bundle.content_types import CT_RELATIONSHIPS
from docx_bundle.bundle.parts import BinaryFile, File, XmlFile
from docx_bundle.errors import DuplicateRelationshipError
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.paths import relative_target, resolve_target, source_and_base_from_rels
from docx_bundle.utils.xml_utils import Namespaces, default_namespace_root

LOGGER = get_logger(__name__)

WORD_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

RELTYPE_OFFICE_DOCUMENT = f"{WORD_REL_NS}/officeDocument"
RELTYPE_STYLES = f"{WORD_REL_NS}/styles"
RELTYPE_NUMBERING = f"{WORD_REL_NS}/numbering"
RELTYPE_SETTINGS = f"{WORD_REL_NS}/settings"
RELTYPE_WEB_SETTINGS = f"{WORD_REL_NS}/webSettings"
RELTYPE_FONT_TABLE = f"{WORD_REL_NS}/fontTable"
RELTYPE_THEME = f"{WORD_REL_NS}/theme"
RELTYPE_HEADER = f"{WORD_REL_NS}/header"
RELTYPE_FOOTER = f"{WORD_REL_NS}/footer"
RELTYPE_IMAGE = f"{WORD_REL_NS}/image"
RELTYPE_HYPERLINK = f"{WORD_REL_NS}/hyperlink"
RELTYPE_EXTENDED_PROPERTIES = f"{WORD_REL_NS}/extended-properties"
RELTYPE_CORE_PROPERTIES = f"{PACKAGE_REL_NS}/metadata/core-properties"

PartT = TypeVar("PartT", bound=File)


@dataclass(frozen=True)
class Relationship:
    """Represents a single OPC relationship.

    ``target`` is a package path for internal relationships and a URL for
    external ones. ``part`` is the loaded or created part the target points at.
    """

    r_id: str
    rel_type: str
    target: str
    is_external: bool = False
    part: Optional[File] = field(default=None, compare=False, repr=False)


class Relationships(XmlFile):
    """Relationships of one source part, keyed by relationship id."""

    content_type = CT_RELATIONSHIPS

    def __init__(self, location: str, relationships: Optional[Iterable[Relationship]] = None) -> None:
        super().__init__(location)
        self.source, self._base_dir = source_and_base_from_rels(location)
        self._entries: Dict[str, Relationship] = {}
        for relationship in relationships or ():
            self.add_relationship(relationship)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Relationship]:
        return iter(list(self._entries.values()))

    def __contains__(self, r_id: object) -> bool:
        return r_id in self._entries

    def find(self, r_id: str) -> Optional[Relationship]:
        """Return a relationship by id if present."""
        return self._entries.get(r_id)

    def find_by_type(self, rel_type: str) -> Optional[Relationship]:
        """Return the first relationship of ``rel_type``, in registration order."""
        for relationship in self._entries.values():
            if relationship.rel_type == rel_type:
                return relationship
        return None

    def ensure_relationship(self, rel_type: str, factory: Callable[[], PartT]) -> PartT:
        """Return the part related through ``rel_type``, creating it with ``factory`` if needed."""
        existing = self.find_by_type(rel_type)
        if existing is not None and existing.part is not None:
            return existing.part  # type: ignore[return-value]
        part = factory()
        if existing is None:
            relationship = Relationship(self._next_id(), rel_type, part.location, part=part)
            self._entries[relationship.r_id] = relationship
            LOGGER.debug("Created %s relationship %s -> %s", self.location, relationship.r_id, part.location)
        else:
            # Bind the new part to the dangling relationship rather than adding a second one.
            self._entries[existing.r_id] = replace(existing, target=part.location, is_external=False, part=part)
        return part

    def add_relationship(self, relationship: Relationship) -> Relationship:
        """Register an explicit relationship; its id must not be taken."""
        if relationship.r_id in self._entries:
            raise DuplicateRelationshipError(relationship.r_id, self.location)
        self._entries[relationship.r_id] = relationship
        return relationship

    def add(self, rel_type: str, target: Union[File, str], is_external: bool = False) -> str:
        """Relate a part object or an external URL under a fresh id and return that id."""
        if isinstance(target, File):
            relationship = Relationship(self._next_id(), rel_type, target.location, part=target)
        else:
            relationship = Relationship(self._next_id(), rel_type, target, is_external=is_external)
        return self.add_relationship(relationship).r_id

    def get_related(self, visited: Optional[Set[str]] = None) -> List[File]:
        """Return this set and every part reachable through it.

        The set itself is only included when it holds relationships, since an
        empty ``.rels`` part is never written.
        """
        if visited is None:
            visited = set()
        if self.location in visited:
            return []
        visited.add(self.location)
        related: List[File] = [self] if self._entries else []
        for relationship in self._entries.values():
            if relationship.part is not None:
                related.extend(relationship.part.get_related(visited))
        return related

    def to_node(self) -> ET.Element:
        root = default_namespace_root("Relationships", PACKAGE_REL_NS)
        for relationship in self._entries.values():
            attrib = {"Id": relationship.r_id, "Type": relationship.rel_type}
            if relationship.is_external:
                attrib["Target"] = relationship.target
                attrib["TargetMode"] = "External"
            else:
                attrib["Target"] = relative_target(self._base_dir, relationship.target)
            ET.SubElement(root, "Relationship", attrib)
        return root

    @classmethod
    def from_archive(cls, archive, location: str) -> "Relationships":
        """Read the ``.rels`` part at ``location``; a missing part yields an empty set."""
        relationships = cls(location)
        if not archive.has_part(location):
            LOGGER.debug("No relationships part at %s", location)
            return relationships
        root = archive.read_xml(location)
        for rel_el in root.findall("rel:Relationship", Namespaces.RELS):
            r_id = rel_el.attrib["Id"]
            rel_type = rel_el.attrib.get("Type", "")
            target = rel_el.attrib.get("Target", "")
            if rel_el.attrib.get("TargetMode") == "External":
                relationships.add_relationship(Relationship(r_id, rel_type, target, is_external=True))
                continue
            resolved = resolve_target(relationships._base_dir, target)
            part = cls._hydrate(archive, rel_type, resolved)
            relationships.add_relationship(Relationship(r_id, rel_type, resolved, part=part))
        return relationships

    # ------------------------------------------------------------------
    # Internal helpers
    def _next_id(self) -> str:
        index = 1
        while f"rId{index}" in self._entries:
            index += 1
        return f"rId{index}"

    @staticmethod
    def _hydrate(archive, rel_type: str, location: str) -> Optional[File]:
        if not archive.has_part(location):
            LOGGER.warning("Relationship target missing from package: %s", location)
            return None
        from docx_bundle.bundle.office_document import OfficeDocument
        from docx_bundle.bundle.styles import Styles

        loaders = {
            RELTYPE_OFFICE_DOCUMENT: OfficeDocument.from_archive,
            RELTYPE_STYLES: Styles.from_archive,
        }
        return archive.hydrate(location, loaders.get(rel_type, BinaryFile.from_archive))
