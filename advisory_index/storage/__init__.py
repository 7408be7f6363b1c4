"""
Storage layer for advisory documents.

This module provides the document store and the index built on top of it.

Components:
- DocumentStore: list/read/write_atomic over document files
- DirectoryStore / MemoryStore: on-disk and in-memory stores
- Index: loads documents, hands out Selections, mediates all writes
- SectionUpdater: pure transform applied by Index.update

Usage:
    from storage import DirectoryStore, Index, advisories_section_updater

    index = Index.load(DirectoryStore("advisories"))
    selection = index.select().where_name("curl")
    selection.update(advisories_section_updater(transform))
"""

from .document_store import DirectoryStore, DocumentStore, MemoryStore
from .errors import AlreadyExists, Conflict, MalformedDocument, NotFound, StoreError
from .index import Index, SectionUpdater, Selection, advisories_section_updater

__all__ = [
    "AlreadyExists",
    "Conflict",
    "DirectoryStore",
    "DocumentStore",
    "Index",
    "MalformedDocument",
    "MemoryStore",
    "NotFound",
    "SectionUpdater",
    "Selection",
    "StoreError",
    "advisories_section_updater",
]
