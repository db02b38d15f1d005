"""deinflector: rule-table driven deinflection of agglutinative word forms."""

from deinflector.rules import RuleTable, Variant
from deinflector.dictionary import Dictionary, Definition
from deinflector.engine import (
    Deinflector, DeinflectionNode, DeinflectionPath, SearchOptions,
)
from deinflector.errors import (
    DeinflectionError, DepthLimitExceeded, NodeLimitExceeded, DefinerError,
    RuleTableError,
)

__version__ = "0.1.0"

__all__ = [
    "RuleTable", "Variant",
    "Dictionary", "Definition",
    "Deinflector", "DeinflectionNode", "DeinflectionPath", "SearchOptions",
    "DeinflectionError", "DepthLimitExceeded", "NodeLimitExceeded", "DefinerError",
    "RuleTableError",
]
