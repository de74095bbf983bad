"""Shared pytest fixtures for the event search test suite."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from src.services.classifier import PartyClassifier
from src.services.geo_date_filter import GeoDateFilter
from src.services.normalizer import EventNormalizer
from tests.factories import FIXED_NOW


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def classifier() -> PartyClassifier:
    return PartyClassifier()


@pytest.fixture
def normalizer(classifier: PartyClassifier) -> EventNormalizer:
    return EventNormalizer(classifier, provider="rapidapi", now=lambda: FIXED_NOW)


@pytest.fixture
def geo_filter() -> GeoDateFilter:
    return GeoDateFilter(now=lambda: FIXED_NOW)


@pytest.fixture
def mock_http_client() -> MagicMock:
    """An ``httpx.AsyncClient`` stand-in; tests set ``.get`` / ``.post``."""
    return MagicMock(spec=httpx.AsyncClient)
