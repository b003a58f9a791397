"""Zip archive adapter holding the named parts of a DOCX package."""
from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, TypeVar, Union
from xml.etree import ElementTree as ET

from docx_bundle.bundle.content_types import CONTENT_TYPES_PATH, ContentTypes
from docx_bundle.errors import PartNotFoundError
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import parse_xml, serialize_xml

LOGGER = get_logger(__name__)

PartT = TypeVar("PartT")


@dataclass(slots=True)
class ZipArchive:
    """In-memory view of the parts stored in (or destined for) a zip container."""

    raw_parts: Dict[str, bytes] = field(default_factory=dict)
    xml_cache: Dict[str, ET.Element] = field(default_factory=dict)

    _content_types: Optional[ContentTypes] = field(default=None, init=False, repr=False)
    _hydrated: Dict[str, object] = field(default_factory=dict, init=False, repr=False)
    _hydrating: Set[str] = field(default_factory=set, init=False, repr=False)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ZipArchive":
        """Read every part of a zip file into memory."""
        path = Path(path)
        with zipfile.ZipFile(path) as docx_zip:
            parts = {name: docx_zip.read(name) for name in docx_zip.namelist()}
        LOGGER.debug("Loaded %d parts from %s", len(parts), path.name)
        return cls(raw_parts=parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ZipArchive":
        with zipfile.ZipFile(io.BytesIO(data)) as docx_zip:
            parts = {name: docx_zip.read(name) for name in docx_zip.namelist()}
        return cls(raw_parts=parts)

    # ------------------------------------------------------------------
    # Reading
    def has_part(self, location: str) -> bool:
        return location in self.raw_parts

    def list_parts(self) -> List[str]:
        return list(self.raw_parts)

    def read_bytes(self, location: str) -> bytes:
        try:
            return self.raw_parts[location]
        except KeyError:
            raise PartNotFoundError(location) from None

    def read_xml(self, location: str) -> ET.Element:
        """Return the parsed root element of an XML part."""
        if location in self.xml_cache:
            return self.xml_cache[location]
        root = parse_xml(self.read_bytes(location))
        self.xml_cache[location] = root
        return root

    @property
    def content_types(self) -> ContentTypes:
        """The parsed ``[Content_Types].xml`` manifest, empty when absent."""
        if self._content_types is None:
            data = self.raw_parts.get(CONTENT_TYPES_PATH)
            self._content_types = ContentTypes.from_xml(data) if data is not None else ContentTypes()
        return self._content_types

    def hydrate(self, location: str, loader: Callable[["ZipArchive", str], PartT]) -> Optional[PartT]:
        """Load the part object for ``location`` once per archive.

        Returns ``None`` when ``location`` is already being loaded further up the
        call stack, which happens when relationships form a cycle.
        """
        if location in self._hydrated:
            return self._hydrated[location]  # type: ignore[return-value]
        if location in self._hydrating:
            LOGGER.debug("Relationship cycle back to %s", location)
            return None
        self._hydrating.add(location)
        try:
            part = loader(self, location)
        finally:
            self._hydrating.discard(location)
        self._hydrated[location] = part
        return part

    # ------------------------------------------------------------------
    # Writing
    def write_bytes(self, location: str, data: bytes) -> None:
        self.raw_parts[location] = data
        self.xml_cache.pop(location, None)
        if location == CONTENT_TYPES_PATH:
            self._content_types = None

    def write_xml(self, location: str, root: ET.Element) -> None:
        self.write_bytes(location, serialize_xml(root))

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self._write_zip(buffer)
        return buffer.getvalue()

    def save(self, path: Union[str, Path]) -> None:
        """Write all parts into a zip file at ``path``."""
        path = Path(path)
        with path.open("wb") as handle:
            self._write_zip(handle)
        LOGGER.debug("Wrote %d parts to %s", len(self.raw_parts), path.name)

    def _write_zip(self, handle: io.IOBase) -> None:
        # The manifest goes first so streaming consumers can read it early.
        names = sorted(self.raw_parts, key=lambda name: name != CONTENT_TYPES_PATH)
        with zipfile.ZipFile(handle, "w", compression=zipfile.ZIP_DEFLATED) as docx_zip:
            for name in names:
                docx_zip.writestr(name, self.raw_parts[name])
