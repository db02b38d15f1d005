"""
Rule table for the deinflector: reasons mapped to suffix-rewrite variants.

A reason (e.g. "past", "polite") is a named class of inflection; each reason
has one or more variants, the concrete suffix rewrites implementing it.

Usage:
    from deinflector.rules import RuleTable

    table = RuleTable.from_file("data/deinflect.json")
    for reason, variant in table.items():
        print(reason, variant.suffix_in, "->", variant.suffix_out)

Both the browser-extension format (kanaIn/kanaOut) and a neutral
suffixIn/suffixOut spelling are accepted:

    {"past": [{"kanaIn": "た", "kanaOut": "る", "rulesIn": [], "rulesOut": ["v1"]}]}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from deinflector.errors import RuleTableError

logger = logging.getLogger(__name__)

# (canonical key, accepted spellings)
_SUFFIX_IN_KEYS = ("suffixIn", "kanaIn")
_SUFFIX_OUT_KEYS = ("suffixOut", "kanaOut")


@dataclass(frozen=True, slots=True)
class Variant:
    """One reversible suffix rewrite."""

    suffix_in: str
    suffix_out: str
    rules_in: frozenset[str] = frozenset()
    rules_out: frozenset[str] = frozenset()

    def applies_to(self, term: str, rules: frozenset[str], entry: bool = False) -> bool:
        """Whether this variant may rewrite `term` carrying `rules`.

        At the entry point (the untouched surface form) rule tags are not
        checked, only the suffix.
        """
        if not entry and self.rules_in.isdisjoint(rules):
            return False
        return term.endswith(self.suffix_in)

    def rewrite(self, term: str) -> str | None:
        """Swap suffix_in for suffix_out; None if that leaves nothing."""
        stem = term[: len(term) - len(self.suffix_in)]
        result = stem + self.suffix_out
        return result or None

    def can_grow(self) -> bool:
        """True if the variant can feed itself without shortening the term."""
        return (
            len(self.suffix_out) >= len(self.suffix_in)
            and not self.rules_out.isdisjoint(self.rules_in)
        )


class RuleTable:
    """
    Ordered reason → variants mapping.

    Iteration order (reasons, then variants within a reason) is insertion
    order and only serves as a deterministic tie-break for result ordering.
    """

    def __init__(self, reasons: Mapping[str, Iterable[Variant]] | None = None):
        self.reasons: dict[str, tuple[Variant, ...]] = {}
        for reason, variants in (reasons or {}).items():
            self.reasons[reason] = tuple(variants)

    @classmethod
    def from_file(cls, path: str | Path) -> RuleTable:
        """Load from a JSON rule file."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        table = cls.from_dict(raw)
        logger.info("Loaded %d reasons (%d variants) from %s",
                    len(table), table.num_variants, path)
        return table

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RuleTable:
        """Build from already-parsed JSON."""
        if not isinstance(raw, Mapping):
            raise RuleTableError(f"Rule table must be an object, got {type(raw).__name__}")

        table = cls()
        for reason, variants_raw in raw.items():
            if not isinstance(variants_raw, list):
                raise RuleTableError(f"Reason {reason!r}: expected a list of variants")
            table.reasons[str(reason)] = tuple(
                _parse_variant(reason, i, v) for i, v in enumerate(variants_raw)
            )

        for reason, variant in table.growing_variants():
            logger.warning(
                "Reason %r: variant %r -> %r can re-apply without shrinking the term",
                reason, variant.suffix_in, variant.suffix_out,
            )
        return table

    # ── Access ───────────────────────────────────────────────────────────

    def items(self) -> Iterator[tuple[str, Variant]]:
        """(reason, variant) pairs in table order."""
        for reason, variants in self.reasons.items():
            for variant in variants:
                yield reason, variant

    def __len__(self) -> int:
        return len(self.reasons)

    def __contains__(self, reason: object) -> bool:
        return reason in self.reasons

    def __getitem__(self, reason: str) -> tuple[Variant, ...]:
        return self.reasons[reason]

    @property
    def num_variants(self) -> int:
        return sum(len(v) for v in self.reasons.values())

    def rule_ids(self) -> set[str]:
        """Every rule identifier mentioned by any variant."""
        ids: set[str] = set()
        for _reason, variant in self.items():
            ids |= variant.rules_in
            ids |= variant.rules_out
        return ids

    def growing_variants(self) -> list[tuple[str, Variant]]:
        return [(r, v) for r, v in self.items() if v.can_grow()]

    def summary(self) -> str:
        lines = [
            f"Reasons:        {len(self)}",
            f"Variants:       {self.num_variants}",
            f"Rule ids:       {len(self.rule_ids())}",
        ]
        growing = self.growing_variants()
        if growing:
            lines.append(f"Growing:        {len(growing)} (bounded by max_depth)")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"RuleTable({len(self)} reasons, {self.num_variants} variants)"


# ── Parsing helpers ──────────────────────────────────────────────────────

def _parse_variant(reason: str, index: int, raw: Any) -> Variant:
    where = f"Reason {reason!r} variant {index}"
    if not isinstance(raw, Mapping):
        raise RuleTableError(f"{where}: expected an object")
    return Variant(
        suffix_in=_first_key(raw, _SUFFIX_IN_KEYS, where),
        suffix_out=_first_key(raw, _SUFFIX_OUT_KEYS, where),
        rules_in=_rule_set(raw.get("rulesIn", []), where),
        rules_out=_rule_set(raw.get("rulesOut", []), where),
    )


def _first_key(raw: Mapping[str, Any], keys: tuple[str, ...], where: str) -> str:
    for key in keys:
        if key in raw:
            value = raw[key]
            if not isinstance(value, str):
                raise RuleTableError(f"{where}: {key} must be a string")
            return value
    raise RuleTableError(f"{where}: missing {' / '.join(keys)}")


def _rule_set(raw: Any, where: str) -> frozenset[str]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not all(isinstance(r, str) for r in raw):
        raise RuleTableError(f"{where}: rule ids must be a list of strings")
    return frozenset(r for r in raw)
