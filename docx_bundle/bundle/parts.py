"""Base classes for the parts stored in a package."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Set
from xml.etree import ElementTree as ET

from docx_bundle.utils.paths import rels_path_for
from docx_bundle.utils.xml_utils import serialize_xml

if TYPE_CHECKING:
    from docx_bundle.bundle.relationships import Relationships


class File(ABC):
    """A part addressable by its package path."""

    content_type: Optional[str] = None
    relationships: Optional["Relationships"] = None

    def __init__(self, location: str) -> None:
        self.location = location

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Return the serialized content of this part."""

    def get_related(self, visited: Optional[Set[str]] = None) -> List["File"]:
        """Return this part followed by everything its own relationships reach.

        ``visited`` holds the package paths already collected, so shared and
        cyclic links are only followed once.
        """
        if visited is None:
            visited = set()
        if self.location in visited:
            return []
        visited.add(self.location)
        related: List[File] = [self]
        if self.relationships is not None:
            related.extend(self.relationships.get_related(visited))
        return related

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"


class XmlFile(File):
    """A part whose content is an XML document."""

    @abstractmethod
    def to_node(self) -> ET.Element:
        """Build the root element of this part."""

    def to_bytes(self) -> bytes:
        return serialize_xml(self.to_node())


class BinaryFile(File):
    """A part carried through a round trip without being interpreted."""

    def __init__(
        self,
        location: str,
        data: bytes,
        content_type: Optional[str] = None,
        relationships: Optional["Relationships"] = None,
    ) -> None:
        super().__init__(location)
        self.data = data
        self.content_type = content_type
        self.relationships = relationships

    def to_bytes(self) -> bytes:
        return self.data

    @classmethod
    def from_archive(cls, archive, location: str) -> "BinaryFile":
        """Copy a part verbatim, keeping whatever it relates to in turn."""
        from docx_bundle.bundle.relationships import Relationships

        rels_location = rels_path_for(location)
        relationships = None
        if archive.has_part(rels_location):
            relationships = Relationships.from_archive(archive, rels_location)
        return cls(
            location,
            archive.read_bytes(location),
            archive.content_types.get_content_type(location),
            relationships,
        )
