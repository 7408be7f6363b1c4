"""
Append an event to an existing advisory.
"""
import logging

from documents import Document, sort_advisories
from storage import Index, NotFound, advisories_section_updater
from .errors import AdvisoryNotFound, AmbiguousPackage
from .request import Request


logger = logging.getLogger(__name__)


def update(request: Request, index: Index) -> Document:
    """
    Add the request's event to the advisory it names.

    Existing events are kept as they are; the new event is appended to the
    end of the history. Submitting the same request twice records the
    event twice.

    Returns:
        The persisted document

    Raises:
        InvalidRequest: If the request fails validation
        NotFound: If the package has no document
        AmbiguousPackage: If more than one document exists for the package
        AdvisoryNotFound: If the package has no advisory with this ID
        Conflict: If the new event predates the advisory's latest event
    """
    request.validate()

    documents = index.select().where_name(request.package)
    count = len(documents)
    if count == 0:
        raise NotFound(f"no advisory document found for package {request.package!r}")
    if count > 1:
        raise AmbiguousPackage(request.package, count)

    def append_event(doc: Document):
        advisory = doc.get(request.vulnerability_id)
        if advisory is None:
            raise AdvisoryNotFound(request.package, request.vulnerability_id)

        updated = advisory.with_event(request.event)
        others = tuple(a for a in doc.advisories if a.id != advisory.id)
        return sort_advisories(others + (updated,))

    [document] = documents.update(advisories_section_updater(append_event))
    logger.info(
        f"Added {request.event.type.value} event to {request.vulnerability_id} for {request.package}"
    )
    return document
