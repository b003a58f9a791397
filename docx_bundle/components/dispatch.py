"""Tag-name dispatch from body XML to component classes."""
from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Optional
from xml.etree import ElementTree as ET

from docx_bundle.components.base import Component
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import local_name, qualify

LOGGER = get_logger(__name__)


@lru_cache(maxsize=None)
def _factories() -> Dict[str, Callable[[ET.Element], Optional[Component]]]:
    from docx_bundle.components.paragraph import Paragraph
    from docx_bundle.components.table import Table

    return {
        qualify("w:p"): Paragraph.from_node,
        qualify("w:tbl"): Table.from_node,
    }


def component_from_node(node: ET.Element) -> Optional[Component]:
    """Rebuild the component for a block-level node; unknown tags yield ``None``."""
    factory = _factories().get(node.tag)
    if factory is None:
        LOGGER.debug("Skipping unsupported element: %s", local_name(node.tag))
        return None
    return factory(node)


def components_from_nodes(nodes: Iterable[ET.Element]) -> List[Component]:
    components = (component_from_node(node) for node in nodes)
    return [component for component in components if component is not None]
