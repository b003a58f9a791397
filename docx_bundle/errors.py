"""Exceptions raised while reading or assembling a package."""
from __future__ import annotations


class BundleError(Exception):
    """Base class for package errors."""


class PartNotFoundError(BundleError, KeyError):
    """A part required by the caller is not present in the archive."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location

    def __str__(self) -> str:
        return f"Required part missing from package: {self.location}"


class DuplicateRelationshipError(BundleError, ValueError):
    """A relationship id is already registered on the owning part."""

    def __init__(self, r_id: str, rels_path: str) -> None:
        super().__init__(r_id, rels_path)
        self.r_id = r_id
        self.rels_path = rels_path

    def __str__(self) -> str:
        return f"Relationship id {self.r_id!r} already exists in {self.rels_path}"
