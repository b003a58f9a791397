"""Command line entry point: inspect or round-trip a DOCX package."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from docx_bundle.bundle.docx import Docx
from docx_bundle.bundle.office_document import OfficeDocument
from docx_bundle.components.paragraph import Paragraph
from docx_bundle.components.table import Table
from docx_bundle.utils.logger import get_logger

LOGGER = get_logger(__name__)


def summarize(document: OfficeDocument) -> List[str]:
    """Describe each body element on one line."""
    lines = []
    for index, child in enumerate(document.children):
        if isinstance(child, Paragraph):
            lines.append(f"{index}: paragraph {child.style or '-'} {child.text[:60]!r}")
        elif isinstance(child, Table):
            lines.append(f"{index}: table {len(child.rows)}x{child.column_count()}")
        else:
            lines.append(f"{index}: {type(child).__name__}")
    return lines


def main(docx_file: str, output: Optional[str] = None) -> Docx:
    """Load a package, print its body outline and optionally write it back out."""
    docx_path = Path(docx_file).resolve()
    if not docx_path.exists():
        raise FileNotFoundError(f"DOCX file not found: {docx_path}")

    docx = Docx.load(docx_path)
    for line in summarize(docx.document):
        print(line)
    if output is not None:
        docx.save(Path(output).resolve())
    return docx


def cli(argv: Optional[List[str]] = None) -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Read a DOCX package into a document tree and write it back")
    parser.add_argument("docx_file", help="Path to the input .docx file")
    parser.add_argument("--output", help="Write the round-tripped package to this path")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    main(args.docx_file, args.output)


if __name__ == "__main__":  # pragma: no cover
    cli()
