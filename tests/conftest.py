"""
conftest.py - Shared pytest fixtures for black76 tests

Provides:
- A default precompile and engine
- An at-the-money reference quote
"""

import pytest

from black76 import Black76Engine, Black76Precompile
from tests.helpers import make_quote


@pytest.fixture
def precompile():
    return Black76Precompile()


@pytest.fixture
def engine():
    return Black76Engine()


@pytest.fixture
def atm_quote():
    """At-the-money, one year, 20% vol, no discounting, 18 decimals."""
    return make_quote()
