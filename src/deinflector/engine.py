"""
Deinflection engine: bounded search over a rule table with async validation.

Starting from a surface form, every admissible suffix rewrite spawns a child
candidate, each candidate is checked against a definer (term → definitions),
and the candidates that lead to at least one accepted definition are kept.
The surviving tree is flattened into one DeinflectionPath per leaf.

Usage:
    from deinflector.engine import Deinflector
    from deinflector.rules import RuleTable

    deinflector = Deinflector(RuleTable.from_file("data/deinflect.json"))
    paths = await deinflector.deinflect("食べた", dictionary.define)
    for p in paths:
        print(p.root, p.reasons)          # 食べる ['past']

    # or, outside an event loop:
    paths = deinflector.deinflect_sync("食べた", dictionary.define)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from deinflector.errors import (
    DeinflectionError, DefinerError, DepthLimitExceeded, NodeLimitExceeded,
)
from deinflector.logger import TRACE_LEVEL_NUM
from deinflector.rules import RuleTable

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_NODES = 10_000
ERROR_POLICIES = ("raise", "ignore")

# term -> definitions (each exposing a .rules iterable); may be sync or async
Definer = Callable[[str], "Awaitable[list[Any]] | list[Any]"]


@dataclass(slots=True)
class SearchOptions:
    """Knobs for a single search.

    max_depth:    longest rewrite chain before DepthLimitExceeded is raised
    max_nodes:    candidate nodes one call may create before
                  NodeLimitExceeded is raised
    error_policy: "raise" aborts the whole call on a definer failure,
                  "ignore" treats the failing term as having no definitions
    dedupe:       drop paths repeating an earlier (root, rules, reasons)
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES
    error_policy: str = "raise"
    dedupe: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.max_nodes < 1:
            raise ValueError(f"max_nodes must be positive, got {self.max_nodes}")
        if self.error_policy not in ERROR_POLICIES:
            raise ValueError(
                f"error_policy must be one of {ERROR_POLICIES}, got {self.error_policy!r}"
            )


@dataclass(slots=True)
class DeinflectionPath:
    """One full reduction of a surface form down to a dictionary root.

    `reasons` is deepest-first: reasons[0] produced `root`, the last
    entry was applied directly to the surface form.
    """

    root: str
    rules: frozenset[str]
    definitions: list[Any]
    reasons: list[str]
    source: str

    def reasons_applied(self) -> list[str]:
        """Reasons in the order the search applied them, surface form first."""
        return list(reversed(self.reasons))

    def key(self) -> tuple[str, frozenset[str], tuple[str, ...]]:
        return (self.root, self.rules, tuple(self.reasons))

    def describe(self) -> str:
        tags = ",".join(sorted(self.rules)) or "-"
        chain = " « ".join(self.reasons) if self.reasons else "(dictionary form)"
        return f"{self.root} [{tags}] ← {chain}"


class NodeBudget:
    """Candidate-node allowance shared by every node of one search.

    Siblings are explored concurrently, so the search widens level by level;
    the depth cap alone lets a branching table build k**max_depth nodes.
    """

    __slots__ = ("limit", "spent")

    def __init__(self, limit: int):
        self.limit = limit
        self.spent = 0

    def spend(self, term: str) -> None:
        self.spent += 1
        if self.spent > self.limit:
            raise NodeLimitExceeded(term, self.limit)


@dataclass(slots=True, eq=False)
class DeinflectionNode:
    """A candidate term in the search tree."""

    term: str
    rules: frozenset[str] = frozenset()
    reason: str = ""
    definitions: list[Any] = field(default_factory=list)
    children: list[DeinflectionNode] = field(default_factory=list)

    async def explore(
        self,
        definer: Definer,
        table: RuleTable,
        options: SearchOptions,
        entry: bool = False,
        depth: int = 0,
        budget: NodeBudget | None = None,
    ) -> bool:
        """Validate this node and expand every admissible rule below it.

        Returns True if the node is viable, i.e. it or some descendant
        accepted at least one definition.  A failure anywhere below
        cancels the rest of the subtree before propagating.
        """
        if budget is None:
            budget = NodeBudget(options.max_nodes)
        budget.spend(self.term)
        if depth > options.max_depth:
            raise DepthLimitExceeded(self.term, options.max_depth)

        candidates = []
        for reason, variant in table.items():
            if not variant.applies_to(self.term, self.rules, entry):
                continue
            term = variant.rewrite(self.term)
            if term is None:
                continue
            candidates.append(DeinflectionNode(term, variant.rules_out, reason))

        logger.log(TRACE_LEVEL_NUM, "%s%s %s: %d candidate(s)", "  " * depth,
                   self.term, sorted(self.rules), len(candidates))

        # Results are read back by index, so child order follows the rule
        # table no matter which lookup finishes first.
        try:
            async with asyncio.TaskGroup() as tg:
                validation = tg.create_task(self._validate(definer, options, entry))
                expansions = [
                    tg.create_task(c.explore(definer, table, options,
                                             depth=depth + 1, budget=budget))
                    for c in candidates
                ]
        except BaseExceptionGroup as group:
            raise _first_error(group)

        if validation.result():
            # stop here: this node is itself a dictionary form
            self.children.append(DeinflectionNode(self.term, self.rules))
        self.children.extend(c for c, task in zip(candidates, expansions) if task.result())
        return bool(self.children)

    async def _validate(self, definer: Definer, options: SearchOptions, entry: bool) -> bool:
        try:
            definitions = await _call_definer(definer, self.term)
        except Exception as exc:
            if options.error_policy == "raise":
                raise DefinerError(self.term) from exc
            logger.warning("Definer failed for %r, treating as no match: %s", self.term, exc)
            definitions = []

        if entry:
            self.definitions = list(definitions)
        else:
            self.definitions = [d for d in definitions if not self.rules.isdisjoint(d.rules)]
        return bool(self.definitions)

    def gather(self) -> list[DeinflectionPath]:
        """Flatten the (already explored) subtree into paths, one per leaf."""
        if not self.children:
            return [DeinflectionPath(
                root=self.term,
                rules=self.rules,
                definitions=list(self.definitions),
                reasons=[],
                source=self.term,
            )]

        paths = []
        for child in self.children:
            for path in child.gather():
                path.definitions.extend(self.definitions)
                if self.reason:
                    path.reasons.append(self.reason)
                path.source = self.term
                paths.append(path)
        return paths


class Deinflector:
    """Holds a rule table and runs searches against it.

    The rule table is only ever replaced wholesale via set_rules(); a search
    already in flight keeps using the table it started with.
    """

    def __init__(
        self,
        rules: RuleTable | Mapping[str, Any] | None = None,
        options: SearchOptions | None = None,
    ):
        self.rules = RuleTable()
        self.options = options or SearchOptions()
        if rules is not None:
            self.set_rules(rules)

    def set_rules(self, rules: RuleTable | Mapping[str, Any]) -> None:
        """Replace the rule table (raw mappings are parsed first)."""
        if not isinstance(rules, RuleTable):
            rules = RuleTable.from_dict(rules)
        self.rules = rules

    async def deinflect(self, term: str, definer: Definer) -> list[DeinflectionPath]:
        """All paths reducing `term` to a validated root; [] if none.

        Only the empty string is rejected up front; whitespace is a term
        like any other and goes to the definer unchanged.
        """
        if not term:
            return []

        table = self.rules
        root = DeinflectionNode(term)
        if not await root.explore(definer, table, self.options, entry=True):
            logger.debug("No deinflection found for %r", term)
            return []

        paths = root.gather()
        if self.options.dedupe:
            paths = dedupe_paths(paths)
        logger.debug("Deinflected %r into %d path(s)", term, len(paths))
        return paths

    def deinflect_sync(self, term: str, definer: Definer) -> list[DeinflectionPath]:
        """Blocking wrapper around deinflect() for callers without a loop."""
        return asyncio.run(self.deinflect(term, definer))

    def summary(self) -> str:
        lines = ["Deinflector:"]
        for sub_line in self.rules.summary().split("\n"):
            lines.append(f"  {sub_line}")
        lines.append(
            f"  Max depth:      {self.options.max_depth}\n"
            f"  Max nodes:      {self.options.max_nodes}\n"
            f"  Error policy:   {self.options.error_policy}\n"
            f"  Dedupe:         {'yes' if self.options.dedupe else 'no'}"
        )
        return "\n".join(lines)


def dedupe_paths(paths: list[DeinflectionPath]) -> list[DeinflectionPath]:
    """Keep the first path for each (root, rules, reasons), preserving order."""
    seen = set()
    result = []
    for path in paths:
        key = path.key()
        if key in seen:
            continue
        seen.add(key)
        result.append(path)
    return result


async def _call_definer(definer: Definer, term: str) -> list[Any]:
    result = definer(term)
    if inspect.isawaitable(result):
        result = await result
    return list(result or [])


def _first_error(group: BaseExceptionGroup) -> BaseException:
    """Unwrap a TaskGroup failure, preferring the engine's own errors."""
    errors = list(_flatten(group))
    for exc in errors:
        if isinstance(exc, DeinflectionError):
            return exc
    return errors[0]


def _flatten(group: BaseExceptionGroup):
    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            yield from _flatten(exc)
        else:
            yield exc
