"""Exceptions raised by the deinflection engine and its loaders."""

from __future__ import annotations


class DeinflectionError(Exception):
    """Base class for failures of a deinflect() call."""


class DepthLimitExceeded(DeinflectionError):
    """A rewrite chain went deeper than the configured max_depth.

    Usually means the rule table has variants that can re-apply to their
    own output without shrinking the term.
    """

    def __init__(self, term: str, depth: int):
        super().__init__(
            f"Deinflection of {term!r} exceeded max depth {depth} "
            f"(rule table may contain growing rewrites)"
        )
        self.term = term
        self.depth = depth


class DefinerError(DeinflectionError):
    """The definer raised while looking up a candidate term."""

    def __init__(self, term: str):
        super().__init__(f"Definer failed for {term!r}")
        self.term = term


class RuleTableError(ValueError):
    """Malformed rule table data."""


class NodeLimitExceeded(DeinflectionError):
    """A single search created more candidate nodes than max_nodes allows."""

    def __init__(self, term: str, limit: int):
        super().__init__(
            f"Deinflection of {term!r} exceeded {limit} candidate nodes "
            f"(rule table may contain growing rewrites)"
        )
        self.term = term
        self.limit = limit
