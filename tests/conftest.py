"""Pytest configuration and fixtures for dex-access tests"""
from pathlib import Path

import pytest

from dex_access.api.pagination import NamedResource, PageResult

DATA_DIR = Path(__file__).parent / "data"


class FakeClock:
    """Manually advanced monotonic clock; sleep() advances it instantly"""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeListing:
    """In-memory paginated listing that records every batch request"""

    def __init__(self, names, fail_at_offsets=None, failure=None):
        self.resources = [NamedResource(name=name, id=i + 1) for i, name in enumerate(names)]
        self.calls = []
        self.fail_at_offsets = dict(fail_at_offsets or {})
        self.failure = failure or ConnectionError("listing unavailable")

    def __call__(self, offset, limit):
        self.calls.append((offset, limit))
        remaining = self.fail_at_offsets.get(offset, 0)
        if remaining:
            self.fail_at_offsets[offset] = remaining - 1
            raise self.failure
        items = self.resources[offset:offset + limit]
        return PageResult(items=tuple(items), has_next=offset + limit < len(self.resources))


@pytest.fixture
def fake_clock():
    """Fresh fake clock starting at t=0"""
    return FakeClock()


@pytest.fixture(scope="session")
def pokemon_names():
    """Generation 1-2 species names in listing order (index + 1 == national dex number)"""
    lines = (DATA_DIR / "pokemon.txt").read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


@pytest.fixture
def listing_factory():
    """Build FakeListing instances"""
    return FakeListing
