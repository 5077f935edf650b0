"""Shared pytest fixtures for the NarrativeCheck test-suite."""

import pytest

from narrative_check.tests.helpers import NOW, make_document


@pytest.fixture
def now() -> float:
    return NOW


@pytest.fixture
def document_factory():
    return make_document
