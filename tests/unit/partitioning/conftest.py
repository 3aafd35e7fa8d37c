"""Fixtures for partition engine tests."""

import pytest


def _ids(n: int, start: int = 1) -> list[str]:
    return [str(i) for i in range(start, start + n)]


@pytest.fixture
def make_ids():
    """Factory for consecutive decimal IDs: make_ids(3) -> ["1", "2", "3"]."""
    return _ids


@pytest.fixture
def ids_1000() -> list[str]:
    return _ids(1000)


@pytest.fixture
def ids_100() -> list[str]:
    return _ids(100)
