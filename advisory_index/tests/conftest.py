"""
Shared pytest fixtures for advisory index tests.

This module provides reusable fixtures that simplify test setup
and reduce code duplication across test modules.
"""
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from documents import (
    Advisory,
    Document,
    Event,
    EventType,
    FalsePositiveDetermination,
    Fixed,
    Package,
    encode_document,
)
from storage import DirectoryStore, Index, MemoryStore


BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def fixed_event(version: str, minutes: int = 0) -> Event:
    return Event(timestamp=at(minutes), type=EventType.FIXED, data=Fixed(fixed_version=version))


def false_positive_event(minutes: int = 0) -> Event:
    return Event(
        timestamp=at(minutes),
        type=EventType.FALSE_POSITIVE_DETERMINATION,
        data=FalsePositiveDetermination(
            type="vulnerable-code-not-included-in-package",
            note="Affected module is not built",
        ),
    )


def make_document(name: str, *advisories: Advisory) -> Document:
    return Document(package=Package(name=name), advisories=advisories)


@pytest.fixture
def memory_store():
    """Empty in-memory document store."""
    return MemoryStore()


@pytest.fixture
def temp_dir():
    """
    Temporary advisories directory.

    Yields:
        Path to an empty directory, removed after the test
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dir_store(temp_dir):
    return DirectoryStore(temp_dir)


@pytest.fixture
def empty_index(memory_store):
    return Index.load(memory_store)


@pytest.fixture
def curl_document():
    """curl with one fixed advisory and one false positive."""
    return make_document(
        "curl",
        Advisory(id="CVE-2024-0001", events=(fixed_event("8.4.0"),)),
        Advisory(
            id="CVE-2024-0002",
            aliases=("GHSA-2222-3333-4444",),
            events=(false_positive_event(),),
        ),
    )


@pytest.fixture
def curl_index(memory_store, curl_document):
    """Index over a store that already holds curl.advisories.yaml."""
    memory_store.write_atomic("curl.advisories.yaml", encode_document(curl_document))
    return Index.load(memory_store)
