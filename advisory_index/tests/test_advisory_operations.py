"""
Tests for the create and update advisory operations.

Covers the main write scenarios end to end against an in-memory store,
plus request validation and the error cases callers need to tell apart.
"""
import pytest

from advisory import (
    AdvisoryNotFound,
    AmbiguousPackage,
    DuplicateAdvisory,
    InvalidRequest,
    Request,
    create,
    update,
)
from decisioning import current_status
from decisioning.status import FALSE_POSITIVE, FIXED
from documents import Advisory, EventType, decode_document, encode_document
from storage import Conflict, Index, NotFound
from conftest import false_positive_event, fixed_event, make_document


class TestRequest:
    """Test request validation."""

    def test_valid(self):
        Request("curl", "CVE-2024-0001", fixed_event("8.4.0")).validate()

    def test_reports_every_problem(self):
        with pytest.raises(InvalidRequest) as exc_info:
            Request("", "not-an-id", None).validate()

        problems = exc_info.value.problems
        assert problems[0] == "package: required"
        assert any(p.startswith("vulnerability_id:") for p in problems)
        assert "event: required" in problems

    @pytest.mark.parametrize("package", ["../curl", "a/b", ".", ".."])
    def test_rejects_path_like_package(self, package):
        with pytest.raises(InvalidRequest, match="invalid name"):
            Request(package, "CVE-2024-0001", fixed_event("1")).validate()

    def test_alias_equal_to_id(self):
        request = Request("curl", "CVE-2024-0001", fixed_event("1"), aliases=["CVE-2024-0001"])
        assert request.problems() == ["aliases: 'CVE-2024-0001' repeats the vulnerability ID"]

    def test_ghsa_and_generic_ids(self):
        assert Request("curl", "GHSA-2222-3333-4444", fixed_event("1")).problems() == []
        assert Request("curl", "OSV-2024-12", fixed_event("1")).problems() == []


class TestCreate:
    """Test the create operation."""

    def test_create_on_empty_store(self, empty_index, memory_store):
        """Create on an empty store writes one new document for the package."""
        document = create(Request("curl", "CVE-2024-0001", fixed_event("8.4.0")), empty_index)

        assert list(memory_store.files) == ["curl.advisories.yaml"]
        on_disk = decode_document(memory_store.read("curl.advisories.yaml"))
        assert on_disk == document
        [adv] = on_disk.advisories
        assert adv.id == "CVE-2024-0001"
        assert [e.type for e in adv.events] == [EventType.FIXED]
        assert adv.events[0].fixed_version == "8.4.0"

    def test_create_adds_to_existing_document_sorted(self, empty_index):
        create(Request("curl", "CVE-2024-0005", fixed_event("8.5.0")), empty_index)
        create(Request("curl", "CVE-2024-0001", fixed_event("8.4.0")), empty_index)
        document = create(
            Request("curl", "CVE-2024-0003", false_positive_event(), aliases=["GHSA-2222-3333-4444"]),
            empty_index,
        )

        assert [a.id for a in document.advisories] == ["CVE-2024-0001", "CVE-2024-0003", "CVE-2024-0005"]
        assert document.get("CVE-2024-0003").aliases == ("GHSA-2222-3333-4444",)
        assert len(empty_index) == 1

    def test_duplicate(self, curl_index, memory_store):
        before = dict(memory_store.files)

        with pytest.raises(DuplicateAdvisory):
            create(Request("curl", "CVE-2024-0001", fixed_event("9.9.9", minutes=60)), curl_index)

        assert memory_store.files == before

    def test_invalid_request_touches_nothing(self, empty_index, memory_store):
        with pytest.raises(InvalidRequest):
            create(Request("curl", "CVE-2024-0001"), empty_index)
        assert memory_store.files == {}

    def test_ambiguous_package(self, memory_store, curl_document):
        memory_store.write_atomic("curl.advisories.yaml", encode_document(curl_document))
        memory_store.write_atomic("curl-copy.advisories.yaml", encode_document(curl_document))
        index = Index.load(memory_store)

        with pytest.raises(AmbiguousPackage) as exc_info:
            create(Request("curl", "CVE-2024-0009", fixed_event("1")), index)
        assert exc_info.value.count == 2

    def test_other_packages_untouched(self, empty_index, memory_store):
        create(Request("zlib", "CVE-2024-1000", fixed_event("1.3.1")), empty_index)
        zlib_bytes = memory_store.read("zlib.advisories.yaml")

        create(Request("curl", "CVE-2024-0001", fixed_event("8.4.0")), empty_index)

        assert memory_store.read("zlib.advisories.yaml") == zlib_bytes


class TestUpdate:
    """Test the update operation."""

    def test_false_positive_after_fix(self, empty_index):
        """A later false positive determination becomes the current status."""
        create(Request("curl", "CVE-2024-0001", fixed_event("8.4.0")), empty_index)

        document = update(Request("curl", "CVE-2024-0001", false_positive_event(minutes=30)), empty_index)

        adv = document.get("CVE-2024-0001")
        assert [e.type for e in adv.events] == [EventType.FIXED, EventType.FALSE_POSITIVE_DETERMINATION]
        assert current_status(adv).state == FALSE_POSITIVE

    def test_history_only_grows(self, curl_index, curl_document):
        original = curl_document.get("CVE-2024-0001").events

        document = update(Request("curl", "CVE-2024-0001", false_positive_event(minutes=1)), curl_index)

        events = document.get("CVE-2024-0001").events
        assert events[:len(original)] == original
        assert len(events) == len(original) + 1

    def test_repeat_update_records_twice(self, curl_index):
        request = Request("curl", "CVE-2024-0001", fixed_event("8.4.1", minutes=5))
        update(request, curl_index)
        document = update(request, curl_index)

        adv = document.get("CVE-2024-0001")
        assert len(adv.events) == 3
        assert current_status(adv).state == FIXED
        assert current_status(adv).fixed_version == "8.4.1"

    def test_other_advisories_untouched(self, curl_index, curl_document):
        document = update(Request("curl", "CVE-2024-0001", false_positive_event(minutes=1)), curl_index)
        assert document.get("CVE-2024-0002") == curl_document.get("CVE-2024-0002")

    def test_unknown_package(self, curl_index):
        with pytest.raises(NotFound):
            update(Request("wget", "CVE-2024-0001", fixed_event("1")), curl_index)

    def test_unknown_advisory(self, curl_index, memory_store):
        before = dict(memory_store.files)

        with pytest.raises(AdvisoryNotFound):
            update(Request("curl", "CVE-2024-0099", fixed_event("1")), curl_index)

        assert memory_store.files == before

    def test_backdated_event(self, curl_index, memory_store):
        before = dict(memory_store.files)

        with pytest.raises(Conflict):
            update(Request("curl", "CVE-2024-0001", false_positive_event(minutes=-60)), curl_index)

        assert memory_store.files == before

    def test_ambiguous_package(self, memory_store):
        doc = make_document("curl", Advisory(id="CVE-2024-0001", events=(fixed_event("1"),)))
        memory_store.write_atomic("curl.advisories.yaml", encode_document(doc))
        memory_store.write_atomic("curl-old.advisories.yaml", encode_document(doc))
        index = Index.load(memory_store)

        with pytest.raises(AmbiguousPackage):
            update(Request("curl", "CVE-2024-0001", fixed_event("2", minutes=1)), index)
