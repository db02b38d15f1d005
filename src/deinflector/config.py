"""
TOML configuration for the deinflector.

Example deinflector.toml:

    [rules]
    path = "data/deinflect.json"

    [dictionary]
    paths = ["data/dict/*.json"]

    [search]
    max_depth = 32
    max_nodes = 10000
    error_policy = "raise"     # or "ignore"
    dedupe = false

    [logging]
    level = "INFO"

Paths are resolved relative to the config file's directory and glob
patterns are expanded.  Without a [rules] path the bundled sample
Japanese rule table is used.
"""

from __future__ import annotations

import glob
import logging
import tomllib
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from deinflector.dictionary import Dictionary
from deinflector.engine import (
    DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES, Deinflector, SearchOptions,
)
from deinflector.rules import RuleTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "deinflector.toml"


@dataclass(slots=True)
class Settings:
    rules_path: Path | None = None
    dictionary_paths: list[Path] = field(default_factory=list)
    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES
    error_policy: str = "raise"
    dedupe: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: str | Path) -> Settings:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")

        with config_path.open("rb") as f:
            cfg = tomllib.load(f)

        logger.info("Loaded settings from %s", config_path)
        return cls.from_dict(cfg, base_dir=config_path.parent)

    @classmethod
    def from_dict(cls, cfg: dict[str, Any], base_dir: Path | None = None) -> Settings:
        base_dir = base_dir or Path(".")
        settings = cls()

        rules_path = cfg.get("rules", {}).get("path")
        if rules_path:
            settings.rules_path = _resolve(rules_path, base_dir)

        dict_paths = cfg.get("dictionary", {}).get("paths", [])
        if isinstance(dict_paths, str):
            dict_paths = [dict_paths]
        settings.dictionary_paths = _resolve_config_paths(dict_paths, base_dir)

        search = cfg.get("search", {})
        settings.max_depth = int(search.get("max_depth", DEFAULT_MAX_DEPTH))
        settings.max_nodes = int(search.get("max_nodes", DEFAULT_MAX_NODES))
        settings.error_policy = str(search.get("error_policy", "raise"))
        settings.dedupe = bool(search.get("dedupe", False))

        settings.log_level = str(cfg.get("logging", {}).get("level", "INFO"))

        # fail early on bad search values
        settings.search_options()
        return settings

    def search_options(self) -> SearchOptions:
        return SearchOptions(
            max_depth=self.max_depth,
            max_nodes=self.max_nodes,
            error_policy=self.error_policy,
            dedupe=self.dedupe,
        )


def find_default_config() -> Path | None:
    """Look for deinflector.toml in the working directory."""
    candidate = Path(DEFAULT_CONFIG_NAME)
    if candidate.exists():
        return candidate
    return None


def load_rules(settings: Settings) -> RuleTable:
    if settings.rules_path is not None:
        return RuleTable.from_file(settings.rules_path)
    return load_bundled_rules()


def load_bundled_rules() -> RuleTable:
    """The sample Japanese rule table shipped with the package."""
    source = resources.files("deinflector") / "data" / "deinflect.json"
    with resources.as_file(source) as path:
        return RuleTable.from_file(path)


def build_deinflector(settings: Settings) -> Deinflector:
    return Deinflector(load_rules(settings), settings.search_options())


def load_dictionary(settings: Settings) -> Dictionary:
    if not settings.dictionary_paths:
        logger.warning("No dictionary configured; every lookup will miss")
        return Dictionary()
    return Dictionary.from_files(*settings.dictionary_paths)


# ── Path helpers ─────────────────────────────────────────────────────────

def _resolve(p: str, base_dir: Path) -> Path:
    return Path(p) if Path(p).is_absolute() else base_dir / p


def _resolve_config_paths(raw_paths: list[str], base_dir: Path) -> list[Path]:
    """Resolve config paths relative to base_dir, expanding globs."""
    result = []
    for p in raw_paths:
        full = _resolve(p, base_dir)
        full_str = str(full)
        if "*" in full_str or "?" in full_str:
            result.extend(Path(m) for m in sorted(glob.glob(full_str)))
        else:
            result.append(full)
    return result
