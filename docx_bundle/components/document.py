"""Generic composite of body content."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence
from xml.etree import ElementTree as ET

from docx_bundle.components.base import Component, render_children
from docx_bundle.components.dispatch import components_from_nodes


@dataclass(slots=True)
class Document(Component):
    """A group of block-level components rendered in place of itself.

    Used to assemble reusable stretches of content. It has no XML element of
    its own, so rebuilding from a container node yields the group of that
    container's recognised children.
    """

    children: List[Component] = field(default_factory=list)

    def to_node(self, ancestry: Sequence[object] = ()) -> List[ET.Element]:
        return render_children(self.children, [*ancestry, self])

    @classmethod
    def from_node(cls, node: ET.Element) -> "Document":
        return cls(components_from_nodes(list(node)))
