"""Shared test fixtures."""

import pytest

from pymdo.flavor.fallible import FallibleFlavor
from pymdo.flavor.optional import OptionalFlavor
from pymdo.flavor.sequence import SequenceFlavor


@pytest.fixture
def optional_flavor():
    return OptionalFlavor()


@pytest.fixture
def fallible_flavor():
    return FallibleFlavor()


@pytest.fixture
def sequence_flavor():
    return SequenceFlavor()
