#!/usr/bin/env python3
"""
Deinflector CLI.

Loads settings from deinflector.toml by default, or override with flags:

    python -m deinflector.cli 食べなかった --dictionary data/words.json
    python -m deinflector.cli 書きました --config deinflector.toml
    python -m deinflector.cli WORD --rules data/deinflect.json --max-depth 16
"""

import argparse
import asyncio
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reduce inflected word forms to dictionary headwords"
    )
    parser.add_argument(
        "words",
        nargs="*",
        help="Surface forms to deinflect",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Path to TOML config file (default: auto-detect deinflector.toml)",
    )
    parser.add_argument(
        "--rules",
        metavar="FILE",
        help="Rule table JSON (overrides config; default: bundled sample table)",
    )
    parser.add_argument(
        "--dictionary",
        nargs="+",
        metavar="FILE",
        help="Dictionary JSON file(s) used to validate roots (overrides config)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        help="Longest rewrite chain before the search is aborted",
    )
    parser.add_argument(
        "--max-nodes",
        type=int,
        help="Most candidate terms one search may try before it is aborted",
    )
    parser.add_argument(
        "--error-policy",
        choices=["raise", "ignore"],
        help="What to do when a dictionary lookup fails",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Drop paths with identical root, rules and reasons",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="More logging (-v debug, -vv trace)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    from deinflector.config import (
        Settings, build_deinflector, find_default_config, load_dictionary,
    )
    from deinflector.errors import DeinflectionError
    from deinflector.logger import setup_logging

    # ── Settings ─────────────────────────────────────────────────────────

    config_path = Path(args.config) if args.config else find_default_config()
    try:
        settings = Settings.from_file(config_path) if config_path else Settings()
        if args.rules:
            settings.rules_path = Path(args.rules)
        if args.dictionary:
            settings.dictionary_paths = [Path(p) for p in args.dictionary]
        if args.max_depth is not None:
            settings.max_depth = args.max_depth
        if args.max_nodes is not None:
            settings.max_nodes = args.max_nodes
        if args.error_policy:
            settings.error_policy = args.error_policy
        if args.dedupe:
            settings.dedupe = True
        settings.search_options()
    except (OSError, ValueError) as e:
        parser.error(str(e))

    if args.verbose >= 2:
        setup_logging("TRACE")
    elif args.verbose == 1:
        setup_logging("DEBUG")
    else:
        setup_logging(settings.log_level)

    # ── Build ────────────────────────────────────────────────────────────

    try:
        deinflector = build_deinflector(settings)
        dictionary = load_dictionary(settings)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(deinflector.summary())
    print(f"Dictionary: {len(dictionary.index)} headwords")
    print()

    # ── Deinflect ────────────────────────────────────────────────────────

    async def run() -> int:
        status = 0
        for word in args.words:
            try:
                paths = await deinflector.deinflect(word, dictionary.define)
            except DeinflectionError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                status = 1
                continue

            if not paths:
                print(f"'{word}' not deinflected")
                print()
                continue

            print(f"═══ Deinflection of '{word}' ═══")
            for p in paths:
                print(f"  {p.describe()}  (definitions: {len(p.definitions)})")
                for d in p.definitions:
                    print(f"      {d!r}")
            print()
        return status

    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
