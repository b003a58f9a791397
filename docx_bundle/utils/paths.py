"""Package path conventions shared by parts and relationship sets."""
from __future__ import annotations

import posixpath
from typing import Tuple

PACKAGE_RELS_PATH = "_rels/.rels"


def rels_path_for(location: str) -> str:
    """Return the relationships part path for the part at ``location``.

    >>> rels_path_for("word/document.xml")
    'word/_rels/document.xml.rels'
    """
    directory, basename = posixpath.split(location)
    if not directory:
        return f"_rels/{basename}.rels"
    return f"{directory}/_rels/{basename}.rels"


def source_and_base_from_rels(rels_path: str) -> Tuple[str, str]:
    """Return the source part and the directory targets are relative to."""
    if rels_path == PACKAGE_RELS_PATH:
        return "", ""
    if "/_rels/" in rels_path:
        folder, suffix = rels_path.split("/_rels/", 1)
        return f"{folder}/{suffix[:-5]}", folder
    if rels_path.startswith("_rels/"):
        return rels_path[len("_rels/") : -5], ""
    return rels_path[:-5], posixpath.dirname(rels_path)


def resolve_target(base_dir: str, target: str) -> str:
    """Resolve a relationship target against the source part's directory."""
    if target.startswith("/"):
        return target.lstrip("/")
    return posixpath.normpath(posixpath.join(base_dir, target))


def relative_target(base_dir: str, location: str) -> str:
    """Express a package path relative to the source part's directory."""
    if not base_dir:
        return location
    return posixpath.relpath(location, base_dir)
