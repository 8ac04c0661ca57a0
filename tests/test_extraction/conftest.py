"""Fixtures shared by extractor tests."""

from types import SimpleNamespace

import pytest


@pytest.fixture
def make_doc():
    """Factory for stand-ins of trafilatura's Document, every field empty by default."""

    def _make(**overrides) -> SimpleNamespace:
        fields = {
            "text": None,
            "title": None,
            "author": None,
            "date": None,
            "sitename": None,
            "hostname": None,
            "description": None,
            "image": None,
            "language": None,
            "tags": [],
            "categories": [],
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    return _make
