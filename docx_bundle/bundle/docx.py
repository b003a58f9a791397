"""Assemble and load a complete DOCX package."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from docx_bundle.bundle.archive import ZipArchive
from docx_bundle.bundle.content_types import CONTENT_TYPES_PATH, MAIN_DOCUMENT, ContentTypes
from docx_bundle.bundle.office_document import OfficeDocument
from docx_bundle.bundle.parts import File
from docx_bundle.bundle.relationships import RELTYPE_OFFICE_DOCUMENT, Relationships
from docx_bundle.errors import PartNotFoundError
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.paths import PACKAGE_RELS_PATH

LOGGER = get_logger(__name__)


class Docx:
    """The package root: links the main document and writes every part it reaches."""

    def __init__(self, document: Optional[OfficeDocument] = None, relationships: Optional[Relationships] = None) -> None:
        self.relationships = relationships if relationships is not None else Relationships(PACKAGE_RELS_PATH)
        if document is None:
            document = self.relationships.ensure_relationship(RELTYPE_OFFICE_DOCUMENT, OfficeDocument)
        elif self.relationships.find_by_type(RELTYPE_OFFICE_DOCUMENT) is None:
            self.relationships.add(RELTYPE_OFFICE_DOCUMENT, document)
        self._document = document

    @property
    def document(self) -> OfficeDocument:
        return self._document

    def get_related(self) -> List[File]:
        """Every part to be written, package relationships first."""
        return self.relationships.get_related()

    def to_archive(self) -> ZipArchive:
        """Serialize all related parts together with the content type manifest."""
        archive = ZipArchive()
        manifest = ContentTypes()
        for part in self.get_related():
            archive.write_bytes(part.location, part.to_bytes())
            manifest.register(part.location, part.content_type)
        archive.write_xml(CONTENT_TYPES_PATH, manifest.to_node())
        return archive

    def to_bytes(self) -> bytes:
        return self.to_archive().to_bytes()

    def save(self, path: Union[str, Path]) -> None:
        archive = self.to_archive()
        archive.save(path)
        LOGGER.info("Saved %d parts to %s", len(archive.list_parts()), path)

    @classmethod
    def from_archive(cls, archive: ZipArchive) -> "Docx":
        """Load the package by following its ``officeDocument`` relationship."""
        relationships = Relationships.from_archive(archive, PACKAGE_RELS_PATH)
        relationship = relationships.find_by_type(RELTYPE_OFFICE_DOCUMENT)
        if relationship is None:
            raise PartNotFoundError(MAIN_DOCUMENT.location)
        if relationship.part is None:
            raise PartNotFoundError(relationship.target)
        return cls(relationship.part, relationships)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Docx":
        LOGGER.info("Loading package %s", path)
        return cls.from_archive(ZipArchive.load(path))
