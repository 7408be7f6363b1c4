"""
Record a new advisory for a package.
"""
import logging

from documents import Advisory, Document, Package, SCHEMA_VERSION, file_name_for, sort_advisories
from storage import Index, advisories_section_updater
from .errors import AmbiguousPackage, DuplicateAdvisory
from .request import Request


logger = logging.getLogger(__name__)


def create(request: Request, index: Index) -> Document:
    """
    Create a new advisory from ``request``.

    If the package has no document yet, a new one is created holding just
    this advisory. Otherwise the advisory is added to the existing document
    and the advisory list is re-sorted by ID.

    Args:
        request: Package, vulnerability ID, aliases and initial event
        index: Index of advisory documents to write to

    Returns:
        The persisted document

    Raises:
        InvalidRequest: If the request fails validation
        DuplicateAdvisory: If the package already has this advisory
        AmbiguousPackage: If more than one document exists for the package
    """
    request.validate()

    documents = index.select().where_name(request.package)
    count = len(documents)

    if count == 0:
        return _create_document(index, request)

    if count > 1:
        raise AmbiguousPackage(request.package, count)

    def add_advisory(doc: Document):
        if doc.get(request.vulnerability_id) is not None:
            raise DuplicateAdvisory(request.package, request.vulnerability_id)

        return sort_advisories(doc.advisories + (_new_advisory(request),))

    [document] = documents.update(advisories_section_updater(add_advisory))
    logger.info(f"Created advisory {request.vulnerability_id} for {request.package}")
    return document


def _new_advisory(request: Request) -> Advisory:
    return Advisory(
        id=request.vulnerability_id,
        aliases=request.aliases,
        events=(request.event,),
    )


def _create_document(index: Index, request: Request) -> Document:
    document = Document(
        package=Package(name=request.package),
        advisories=(_new_advisory(request),),
        schema_version=SCHEMA_VERSION,
    )
    document = index.create(file_name_for(request.package), document)
    logger.info(
        f"Created advisory {request.vulnerability_id} in new document for {request.package}"
    )
    return document
