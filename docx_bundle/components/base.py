"""Shared behaviour of the elements that make up a document body."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Type, TypeVar, Union
from xml.etree import ElementTree as ET

from docx_bundle.utils.xml_utils import find_first, qualify

AncestorT = TypeVar("AncestorT")

Rendered = Union[ET.Element, List[ET.Element]]


class Component(ABC):
    """An element of the document tree.

    ``ancestry`` is the chain of containers from the office document down to
    the component's parent, for components that need context to render.
    """

    __slots__ = ()

    @abstractmethod
    def to_node(self, ancestry: Sequence[object] = ()) -> Rendered:
        """Render this component as one XML element, or several for composites."""

    @classmethod
    @abstractmethod
    def from_node(cls, node: ET.Element) -> Optional["Component"]:
        """Rebuild a component from its XML element."""


def render_children(children: Sequence[Component], ancestry: Sequence[object]) -> List[ET.Element]:
    """Render components in order, splicing in the nodes of composites."""
    nodes: List[ET.Element] = []
    for child in children:
        rendered = child.to_node(ancestry)
        if isinstance(rendered, list):
            nodes.extend(rendered)
        else:
            nodes.append(rendered)
    return nodes


def find_ancestor(ancestry: Sequence[object], kind: Type[AncestorT]) -> Optional[AncestorT]:
    """Return the nearest ancestor of the given type."""
    for ancestor in reversed(ancestry):
        if isinstance(ancestor, kind):
            return ancestor
    return None


def on_off(parent: Optional[ET.Element], path: str) -> bool:
    """Interpret a toggle property such as ``<w:b/>`` found at ``path`` under ``parent``."""
    element = find_first(parent, path) if parent is not None else None
    if element is None:
        return False
    return element.attrib.get(qualify("w:val"), "true").lower() not in ("0", "false", "off")
