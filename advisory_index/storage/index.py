"""
Index of advisory documents under a storage root.

The Index owns every loaded Document. Reads go through Selections, which
are immutable snapshots that can be narrowed and queried any number of
times. Writes go through Index.create and Index.update, which re-read the
file, apply a pure transform, check invariants and persist atomically.

Key concepts:
- Selection: read-only view over (file name, Document) pairs
- SectionUpdater: pure function producing the new value of one section
  of a document ("advisories"), merged back by the index
- Every persisted write upgrades schema_version to the current version

Design decisions:
- Single-writer model: no locking, one process owns a storage root
- Update re-reads the on-disk content so a stale Selection never causes a
  lost update within the process
- All targeted documents are transformed and validated before the first
  file is written
"""
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from documents import (
    SCHEMA_VERSION,
    Document,
    DocumentFormatError,
    decode_document,
    encode_document,
    schema_version_key,
)
from .document_store import DocumentStore
from .errors import AlreadyExists, Conflict, MalformedDocument, NotFound


logger = logging.getLogger(__name__)

UPDATABLE_SECTIONS = {"advisories", "schema_version"}


@dataclass(frozen=True)
class SectionUpdater:
    """
    Produces a new value for one section of a document.

    ``func`` receives a copy of the current document and returns the new
    section value, or raises to abort the update. Errors raised by ``func``
    reach the caller of Index.update unchanged.
    """
    section: str
    func: Callable[[Document], Any]

    def __post_init__(self):
        if self.section not in UPDATABLE_SECTIONS:
            raise ValueError(f"Unknown document section: {self.section}")

    def apply(self, document: Document) -> Document:
        return replace(document, **{self.section: self.func(document)})


def advisories_section_updater(func: Callable[[Document], Any]) -> SectionUpdater:
    """Build an updater that replaces a document's advisories."""
    return SectionUpdater("advisories", func)


def upgraded_schema_version(current: str) -> str:
    """The schema version a write should persist; never a downgrade."""
    if schema_version_key(current) > schema_version_key(SCHEMA_VERSION):
        return current
    return SCHEMA_VERSION


class Selection:
    """Immutable snapshot of some of an index's documents."""

    def __init__(self, index: "Index", entries: Tuple[Tuple[str, Document], ...]):
        self._index = index
        self._entries = tuple(entries)

    def where_name(self, name: str) -> "Selection":
        """Narrow to documents whose package name is exactly ``name``."""
        return Selection(
            self._index,
            tuple((f, doc) for f, doc in self._entries if doc.package.name == name),
        )

    def where(self, predicate: Callable[[Document], bool]) -> "Selection":
        return Selection(
            self._index,
            tuple((f, doc) for f, doc in self._entries if predicate(doc)),
        )

    def len(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.configurations())

    def configurations(self) -> List[Document]:
        """Selected documents, ordered by file name."""
        return [doc for _, doc in self._entries]

    def entries(self) -> List[Tuple[str, Document]]:
        return list(self._entries)

    def file_names(self) -> List[str]:
        return [f for f, _ in self._entries]

    def update(self, updater: SectionUpdater) -> List[Document]:
        """Apply ``updater`` to every selected document (see Index.update)."""
        return self._index.update(self, updater)


class Index:
    """
    Addressable, queryable collection of all documents under a store.

    Usage:
        index = Index.load(DirectoryStore("advisories"))
        docs = index.select().where_name("curl")
        docs.update(advisories_section_updater(add_event))
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._documents: Dict[str, Document] = {}
        self.malformed: List[Tuple[str, str]] = []

    @classmethod
    def load(cls, store: DocumentStore, strict: bool = True) -> "Index":
        """
        Parse every document file in ``store``.

        A file that fails to parse is logged and skipped; the rest still
        load. With ``strict`` (the default) a MalformedDocument naming the
        first bad file is raised after the scan.

        Raises:
            MalformedDocument: If strict and any file was malformed
        """
        index = cls(store)

        for name in store.list_names():
            try:
                index._documents[name] = decode_document(store.read(name))
            except DocumentFormatError as e:
                logger.warning(f"Skipping malformed advisory document {name}: {e}")
                index.malformed.append((name, str(e)))

        logger.info(f"Loaded {len(index._documents)} advisory documents from {store!r}")

        if strict and index.malformed:
            first_name, first_reason = index.malformed[0]
            raise MalformedDocument(first_name, first_reason, failures=list(index.malformed))

        return index

    def select(self) -> Selection:
        return Selection(self, tuple(sorted(self._documents.items())))

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, file_name: str) -> Optional[Document]:
        return self._documents.get(file_name)

    def create(self, file_name: str, document: Document) -> Document:
        """
        Persist a new document and add it to the index.

        Raises:
            AlreadyExists: If the file name (or the package) is already present
            Conflict: If the document violates the store invariants
        """
        if file_name in self._documents or self.store.exists(file_name):
            raise AlreadyExists(f"advisory document {file_name} already exists")

        if len(self.select().where_name(document.package.name)) > 0:
            raise AlreadyExists(
                f"an advisory document for package {document.package.name} already exists"
            )

        document = replace(document, schema_version=upgraded_schema_version(document.schema_version))
        problems = document.validate()
        if problems:
            raise Conflict(file_name, problems)

        self.store.write_atomic(file_name, encode_document(document))
        self._documents[file_name] = document

        logger.info(f"Created advisory document {file_name}")
        return document

    def update(self, selection: Selection, updater: SectionUpdater) -> List[Document]:
        """
        Re-derive and persist every document in ``selection``.

        Each document is re-read from the store, transformed, upgraded to
        the current schema version and validated. Nothing is written unless
        every targeted document passes.

        Returns:
            The persisted documents, in selection order

        Raises:
            NotFound: If the selection is empty or a file has disappeared
            MalformedDocument: If the current file content no longer parses
            Conflict: If a transformed document violates the invariants
        """
        if len(selection) == 0:
            raise NotFound("no advisory documents selected for update")

        pending: List[Tuple[str, Document]] = []
        for file_name in selection.file_names():
            try:
                content = self.store.read(file_name)
            except FileNotFoundError:
                raise NotFound(f"advisory document {file_name} no longer exists") from None

            try:
                current = decode_document(content)
            except DocumentFormatError as e:
                raise MalformedDocument(file_name, str(e)) from e

            updated = updater.apply(current)
            updated = replace(updated, schema_version=upgraded_schema_version(updated.schema_version))

            problems = updated.validate()
            if updated.package != current.package:
                problems.append("package identity cannot change during an update")
            if problems:
                raise Conflict(file_name, problems)

            pending.append((file_name, updated))

        for file_name, updated in pending:
            self.store.write_atomic(file_name, encode_document(updated))
            self._documents[file_name] = updated
            logger.info(f"Updated advisory document {file_name}")

        return [doc for _, doc in pending]
