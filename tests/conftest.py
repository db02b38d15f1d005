"""Shared test fixtures."""

import logging

import pytest

from deinflector.config import load_bundled_rules
from deinflector.dictionary import Definition, Dictionary


@pytest.fixture
def bundled_rules():
    """The sample Japanese rule table shipped in deinflector/data."""
    return load_bundled_rules()


@pytest.fixture
def jp_dictionary() -> Dictionary:
    """A handful of Japanese headwords tagged with their conjugation class."""
    return Dictionary([
        Definition(term="食べる", reading="たべる", rules=frozenset({"v1"}), glosses=["to eat"]),
        Definition(term="書く", reading="かく", rules=frozenset({"v5"}), glosses=["to write"]),
        Definition(term="高い", reading="たかい", rules=frozenset({"adj-i"}), glosses=["high", "expensive"]),
        Definition(term="する", reading="する", rules=frozenset({"vs"}), glosses=["to do"]),
    ])


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way it was after setup_logging() runs."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
