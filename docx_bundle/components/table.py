"""Tables, rows and cells, including column and row spans."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set
from xml.etree import ElementTree as ET

from docx_bundle.components.base import Component, find_ancestor, on_off, render_children
from docx_bundle.components.dispatch import components_from_nodes
from docx_bundle.utils.logger import get_logger
from docx_bundle.utils.xml_utils import find_all, find_first, get_int_val, get_val, qualify

LOGGER = get_logger(__name__)

MERGE_RESTART = "restart"
MERGE_CONTINUE = "continue"


@dataclass(slots=True)
class Cell(Component):
    """Single table cell container.

    A cell spanning several rows is a single object in its first row; the
    continuation cells below it exist only in the XML.
    """

    children: List[Component] = field(default_factory=list)
    col_span: int = 1
    row_span: int = 1
    vertical_alignment: Optional[str] = None

    def __post_init__(self) -> None:
        if self.col_span < 1 or self.row_span < 1:
            raise ValueError(f"Cell spans must be at least 1, got {self.col_span}x{self.row_span}")

    def to_node(self, ancestry: Sequence[object] = ()) -> ET.Element:
        width = None
        table = find_ancestor(ancestry, Table)
        row = find_ancestor(ancestry, Row)
        if table is not None and row is not None:
            width = table.width_of(row, self)

        cell_el = ET.Element(qualify("w:tc"))
        tc_pr = _cell_properties(
            width,
            self.col_span,
            MERGE_RESTART if self.row_span > 1 else None,
            self.vertical_alignment,
        )
        if len(tc_pr):
            cell_el.append(tc_pr)
        cell_el.extend(render_children(self.children, [*ancestry, self]))
        # A cell must end with a paragraph.
        if not len(cell_el) or cell_el[-1].tag != qualify("w:p"):
            ET.SubElement(cell_el, qualify("w:p"))
        return cell_el

    @classmethod
    def from_node(cls, node: ET.Element) -> Optional["Cell"]:
        """Rebuild a cell; continuation cells of a vertical merge yield ``None``.

        The row span of a standalone cell is always 1. Spans across rows are
        counted by :meth:`Table.from_node`.
        """
        if cls.vertical_merge_of(node) == MERGE_CONTINUE:
            return None
        return cls._from_node(node)

    @classmethod
    def _from_node(cls, node: ET.Element) -> "Cell":
        content = [child for child in node if child.tag != qualify("w:tcPr")]
        return cls(
            children=components_from_nodes(content),
            col_span=cls.col_span_of(node),
            vertical_alignment=get_val(node, "w:tcPr/w:vAlign"),
        )

    @staticmethod
    def col_span_of(node: ET.Element) -> int:
        return max(get_int_val(node, "w:tcPr/w:gridSpan") or 1, 1)

    @staticmethod
    def vertical_merge_of(node: ET.Element) -> Optional[str]:
        """Return ``restart``, ``continue`` or ``None`` for a ``w:tc`` node."""
        vmerge = find_first(node, "w:tcPr/w:vMerge")
        if vmerge is None:
            return None
        if get_val(vmerge) == MERGE_RESTART:
            return MERGE_RESTART
        return MERGE_CONTINUE


@dataclass(slots=True)
class Row(Component):
    """Row with a sequence of cells.

    ``grid_before`` is the number of grid columns left empty before the first
    cell.
    """

    cells: List[Cell] = field(default_factory=list)
    is_header: bool = False
    grid_before: int = 0

    def to_node(self, ancestry: Sequence[object] = ()) -> ET.Element:
        table = find_ancestor(ancestry, Table)
        slots = table.slots_for(self) if table is not None else _place_cells(self, {})
        child_ancestry = [*ancestry, self]

        row_el = ET.Element(qualify("w:tr"))
        tr_pr = ET.Element(qualify("w:trPr"))
        if self.grid_before:
            ET.SubElement(tr_pr, qualify("w:gridBefore"), {qualify("w:val"): str(self.grid_before)})
        if self.is_header:
            ET.SubElement(tr_pr, qualify("w:tblHeader"))
        if len(tr_pr):
            row_el.append(tr_pr)

        for slot in slots:
            if not slot.is_continuation:
                row_el.append(slot.cell.to_node(child_ancestry))
                continue
            width = table.width_at(slot.column, slot.cell.col_span) if table is not None else None
            continuation = ET.SubElement(row_el, qualify("w:tc"))
            continuation.append(_cell_properties(width, slot.cell.col_span, MERGE_CONTINUE, None))
            ET.SubElement(continuation, qualify("w:p"))
        return row_el

    @classmethod
    def from_node(cls, node: ET.Element) -> "Row":
        """Rebuild a row on its own, without spans continued from rows above."""
        row = cls._empty_from_node(node)
        row.cells = [cell for cell in (Cell.from_node(tc) for tc in find_all(node, "w:tc")) if cell is not None]
        return row

    @classmethod
    def _empty_from_node(cls, node: ET.Element) -> "Row":
        tr_pr = find_first(node, "w:trPr")
        return cls(
            is_header=on_off(tr_pr, "w:tblHeader"),
            grid_before=max(get_int_val(tr_pr, "w:gridBefore") or 0, 0),
        )


@dataclass(frozen=True)
class GridSlot:
    """A cell placed at a grid column within one row."""

    column: int
    cell: Cell
    is_continuation: bool = False


@dataclass(slots=True)
class Table(Component):
    """Tabular structure with optional grid column widths in twips."""

    rows: List[Row] = field(default_factory=list)
    style: Optional[str] = None
    column_widths: List[int] = field(default_factory=list)

    _row_slots: Dict[int, List[GridSlot]] = field(default_factory=dict, init=False, repr=False, compare=False)

    def grid(self) -> List[List[GridSlot]]:
        """Lay the rows out on the column grid, inserting merge continuations."""
        open_spans: Dict[int, List] = {}
        return [_place_cells(row, open_spans) for row in self.rows]

    def column_count(self) -> int:
        return _column_count(self.grid())

    def slots_for(self, row: Row) -> List[GridSlot]:
        if id(row) not in self._row_slots:
            self._row_slots = {id(row_): slots for row_, slots in zip(self.rows, self.grid())}
        return self._row_slots.get(id(row), [])

    def width_of(self, row: Row, cell: Cell) -> Optional[int]:
        """Return the width of a cell from the grid columns it covers."""
        for slot in self.slots_for(row):
            if slot.cell is cell and not slot.is_continuation:
                return self.width_at(slot.column, cell.col_span)
        return None

    def width_at(self, column: int, col_span: int) -> Optional[int]:
        widths = self.column_widths[column : column + col_span]
        if len(widths) < col_span:
            return None
        return sum(widths)

    def to_node(self, ancestry: Sequence[object] = ()) -> ET.Element:
        grid = self.grid()
        self._row_slots = {id(row): slots for row, slots in zip(self.rows, grid)}

        table_el = ET.Element(qualify("w:tbl"))
        tbl_pr = ET.SubElement(table_el, qualify("w:tblPr"))
        if self.style:
            ET.SubElement(tbl_pr, qualify("w:tblStyle"), {qualify("w:val"): self.style})
        ET.SubElement(tbl_pr, qualify("w:tblW"), {qualify("w:w"): "0", qualify("w:type"): "auto"})

        tbl_grid = ET.SubElement(table_el, qualify("w:tblGrid"))
        if self.column_widths:
            for width in self.column_widths:
                ET.SubElement(tbl_grid, qualify("w:gridCol"), {qualify("w:w"): str(width)})
        else:
            for _ in range(_column_count(grid)):
                ET.SubElement(tbl_grid, qualify("w:gridCol"))

        child_ancestry = [*ancestry, self]
        for row in self.rows:
            table_el.append(row.to_node(child_ancestry))
        return table_el

    @classmethod
    def from_node(cls, node: ET.Element) -> "Table":
        column_widths = [
            width
            for width in (get_int_val(col, None, "w:w") for col in find_all(node, "w:tblGrid/w:gridCol"))
            if width is not None
        ]
        # Origin cell of the vertical merge currently open in each grid column.
        owners: Dict[int, Cell] = {}
        rows: List[Row] = []
        for row_el in find_all(node, "w:tr"):
            row = Row._empty_from_node(row_el)
            column = row.grid_before
            touched: Set[int] = set()
            for cell_el in find_all(row_el, "w:tc"):
                col_span = Cell.col_span_of(cell_el)
                covered = range(column, column + col_span)
                touched.update(covered)
                merge = Cell.vertical_merge_of(cell_el)
                if merge == MERGE_CONTINUE and column in owners:
                    owners[column].row_span += 1
                else:
                    if merge == MERGE_CONTINUE:
                        LOGGER.debug("Vertical merge continuation without origin at column %d", column)
                    cell = Cell._from_node(cell_el)
                    row.cells.append(cell)
                    for index in covered:
                        if merge == MERGE_RESTART:
                            owners[index] = cell
                        else:
                            owners.pop(index, None)
                column += col_span
            for index in set(owners) - touched:
                del owners[index]
            rows.append(row)
        return cls(rows=rows, style=get_val(node, "w:tblPr/w:tblStyle"), column_widths=column_widths)


def _place_cells(row: Row, open_spans: Dict[int, List]) -> List[GridSlot]:
    """Assign grid columns to a row's cells.

    ``open_spans`` maps a grid column to ``[origin cell, rows still covered]``
    and is updated in place so consecutive rows share it. A span ends in any
    row that does not reach its column, such as one covered by a wider cell.
    """
    slots: List[GridSlot] = []
    pending = list(row.cells)
    column = row.grid_before
    visited: Set[int] = set()
    while True:
        span = open_spans.get(column)
        if span is not None:
            origin, remaining = span
            visited.add(column)
            slots.append(GridSlot(column, origin, is_continuation=True))
            if remaining > 1:
                span[1] = remaining - 1
            else:
                del open_spans[column]
            column += origin.col_span
            continue
        if pending:
            cell = pending.pop(0)
            slots.append(GridSlot(column, cell))
            if cell.row_span > 1:
                open_spans[column] = [cell, cell.row_span - 1]
                visited.add(column)
            column += cell.col_span
            continue
        later = [index for index in open_spans if index > column]
        if not later:
            break
        column = min(later)
    for index in set(open_spans) - visited:
        LOGGER.debug("Vertical merge at column %d ends: row does not continue it", index)
        del open_spans[index]
    return slots


def _column_count(grid: List[List[GridSlot]]) -> int:
    return max((slot.column + slot.cell.col_span for slots in grid for slot in slots), default=0)


def _cell_properties(
    width: Optional[int], col_span: int, vertical_merge: Optional[str], vertical_alignment: Optional[str]
) -> ET.Element:
    # Child order follows the CT_TcPr sequence.
    tc_pr = ET.Element(qualify("w:tcPr"))
    if width is not None:
        ET.SubElement(tc_pr, qualify("w:tcW"), {qualify("w:w"): str(width), qualify("w:type"): "dxa"})
    if col_span > 1:
        ET.SubElement(tc_pr, qualify("w:gridSpan"), {qualify("w:val"): str(col_span)})
    if vertical_merge == MERGE_RESTART:
        ET.SubElement(tc_pr, qualify("w:vMerge"), {qualify("w:val"): MERGE_RESTART})
    elif vertical_merge == MERGE_CONTINUE:
        ET.SubElement(tc_pr, qualify("w:vMerge"))
    if vertical_alignment:
        ET.SubElement(tc_pr, qualify("w:vAlign"), {qualify("w:val"): vertical_alignment})
    return tc_pr
