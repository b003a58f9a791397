"""Helper functions to work with XML namespaces, parsing and serialization."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
from xml.etree import ElementTree as ET


@dataclass(frozen=True)
class Namespaces:
    """Common OpenXML namespace prefixes used across the package."""

    WORD: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    CONTENT_TYPES: Dict[str, str] = None  # type: ignore[assignment]
    ALL: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.WORD = {  # type: ignore[attr-defined]
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}
Namespaces.CONTENT_TYPES = {  # type: ignore[attr-defined]
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
}
# Declared on the root of every main document part, whether used or not.
Namespaces.ALL = {  # type: ignore[attr-defined]
    "wpc": "http://schemas.microsoft.com/office/word/2010/wordprocessingCanvas",
    "cx": "http://schemas.microsoft.com/office/drawing/2014/chartex",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "o": "urn:schemas-microsoft-com:office:office",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "m": "http://schemas.openxmlformats.org/officeDocument/2006/math",
    "v": "urn:schemas-microsoft-com:vml",
    "wp14": "http://schemas.microsoft.com/office/word/2010/wordprocessingDrawing",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "w10": "urn:schemas-microsoft-com:office:word",
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
    "w15": "http://schemas.microsoft.com/office/word/2012/wordml",
    "w16se": "http://schemas.microsoft.com/office/word/2015/wordml/symex",
    "wpg": "http://schemas.microsoft.com/office/word/2010/wordprocessingGroup",
    "wpi": "http://schemas.microsoft.com/office/word/2010/wordprocessingInk",
    "wne": "http://schemas.microsoft.com/office/word/2006/wordml",
    "wps": "http://schemas.microsoft.com/office/word/2010/wordprocessingShape",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
}

for _prefix, _uri in Namespaces.ALL.items():
    ET.register_namespace(_prefix, _uri)

XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"


def qualify(name: str) -> str:
    """Expand a prefixed name such as ``w:p`` into ElementTree's ``{uri}p`` form."""
    prefix, local = name.split(":", 1)
    return f"{{{Namespaces.ALL[prefix]}}}{local}"


def local_name(tag: str) -> str:
    """Strip the namespace portion of an ElementTree tag."""
    return tag.split("}", 1)[-1]


def find_first(element: ET.Element, path: str) -> Optional[ET.Element]:
    """Return the first node matching a WordprocessingML path, if any."""
    return element.find(path, Namespaces.WORD)


def find_all(element: ET.Element, path: str) -> List[ET.Element]:
    """Return every node matching a WordprocessingML path, in document order."""
    return element.findall(path, Namespaces.WORD)


def get_val(element: Optional[ET.Element], path: Optional[str] = None, attr_name: str = "w:val") -> Optional[str]:
    """Read an attribute (``w:val`` by default) from an element or one of its children."""
    if element is None:
        return None
    target = element.find(path, Namespaces.WORD) if path else element
    if target is None:
        return None
    return target.attrib.get(qualify(attr_name))


def get_int_val(element: Optional[ET.Element], path: Optional[str] = None, attr_name: str = "w:val") -> Optional[int]:
    value = get_val(element, path, attr_name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_xml(data: bytes) -> ET.Element:
    """Parse XML from raw bytes with sane defaults."""
    return ET.fromstring(data)


def declare_namespaces(root: ET.Element, prefixes: Iterable[str]) -> None:
    """Add ``xmlns`` declarations for namespaces the tree does not already use.

    ElementTree only emits declarations for namespaces that occur on tags or
    attributes, so unused ones are added as literal attributes.
    """
    used = set()
    for node in root.iter():
        used.add(_namespace_of(node.tag))
        used.update(_namespace_of(attr) for attr in node.attrib)
    for prefix in prefixes:
        uri = Namespaces.ALL[prefix]
        if uri not in used:
            root.set(f"xmlns:{prefix}", uri)


def default_namespace_root(tag: str, uri: str) -> ET.Element:
    """Create a root element that puts unprefixed descendants in namespace ``uri``.

    Package manifests (relationships, content types) are written with a default
    namespace and unqualified attribute names, which ElementTree's
    ``default_namespace`` option cannot express.
    """
    return ET.Element(tag, {"xmlns": uri})


def serialize_xml(element: ET.Element) -> bytes:
    """Serialize an element as a standalone UTF-8 XML document."""
    body = ET.tostring(element, encoding="unicode")
    return b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n' + body.encode("utf-8")


def _namespace_of(name: str) -> Optional[str]:
    if name.startswith("{"):
        return name[1:].split("}", 1)[0]
    return None
