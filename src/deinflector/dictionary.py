"""
In-memory headword dictionary usable as a definer for the deinflector.

Usage:
    from deinflector.dictionary import Dictionary

    dic = Dictionary.from_file("data/words.json")
    dic.lookup("食べる")                 # sync
    await dic.define("食べる")           # definer protocol

Accepted JSON shapes:
    [{"term": "食べる", "reading": "たべる", "rules": ["v1"], "glosses": ["to eat"]}, ...]
    {"食べる": [{"reading": "たべる", "rules": ["v1"], "glosses": ["to eat"]}], ...}
"""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class Definition:
    """A dictionary entry tagged with the rule ids it can be reached through."""

    term: str
    rules: frozenset[str] = frozenset()
    reading: str = ""
    glosses: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)  # passed through untouched

    def __repr__(self) -> str:
        tags = ",".join(sorted(self.rules)) or "-"
        return f"Definition({self.term!r} [{tags}] {'; '.join(self.glosses)})"


class Dictionary:
    """Headword → definitions index."""

    def __init__(self, definitions: Iterable[Definition] = ()):
        self.index: dict[str, list[Definition]] = {}
        for d in definitions:
            self.add(d)

    @classmethod
    def from_file(cls, path: str | Path) -> Dictionary:
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        return cls.from_dict(raw)

    @classmethod
    def from_files(cls, *paths: str | Path) -> Dictionary:
        """Load and merge several dictionary files."""
        dic = cls()
        for p in paths:
            dic.merge(cls.from_file(p))
        return dic

    @classmethod
    def from_dict(cls, raw: list | dict) -> Dictionary:
        """Load from an already-parsed JSON list or mapping."""
        dic = cls()
        if isinstance(raw, dict):
            for term, entries in raw.items():
                for entry in entries:
                    dic.add(_parse_entry({**entry, "term": term}))
        elif isinstance(raw, list):
            for entry in raw:
                dic.add(_parse_entry(entry))
        else:
            raise ValueError(f"Unsupported dictionary data: {type(raw).__name__}")
        return dic

    def add(self, definition: Definition) -> None:
        self.index.setdefault(definition.term, []).append(definition)

    def merge(self, other: Dictionary) -> None:
        for entries in other.index.values():
            for d in entries:
                self.add(d)

    # ── Lookup ───────────────────────────────────────────────────────────

    def lookup(self, term: str) -> list[Definition]:
        """All definitions for an exact headword; empty list if unknown."""
        return list(self.index.get(term, []))

    async def define(self, term: str) -> list[Definition]:
        """Definer protocol for Deinflector.deinflect()."""
        return self.lookup(term)

    def __contains__(self, term: object) -> bool:
        return term in self.index

    def __len__(self) -> int:
        return sum(len(v) for v in self.index.values())

    def summary(self) -> str:
        rule_counts = Counter(r for entries in self.index.values()
                              for d in entries for r in d.rules)
        lines = [
            f"Headwords:      {len(self.index)}",
            f"Definitions:    {len(self)}",
        ]
        if rule_counts:
            lines.append("")
            lines.append("Rule breakdown:")
            for rule, count in rule_counts.most_common():
                lines.append(f"  {rule:12s} {count:7d}")
        return "\n".join(lines)


def _parse_entry(raw: dict) -> Definition:
    if "term" not in raw:
        raise ValueError(f"Dictionary entry without 'term': {raw!r}")
    rules = raw.get("rules", [])
    if isinstance(rules, str):
        rules = rules.split()
    glosses = raw.get("glosses", [])
    if isinstance(glosses, str):
        glosses = [glosses]
    known = {"term", "reading", "rules", "glosses"}
    return Definition(
        term=raw["term"],
        rules=frozenset(rules),
        reading=raw.get("reading", ""),
        glosses=list(glosses),
        extra={k: v for k, v in raw.items() if k not in known},
    )
