"""Tests for TOML settings and engine construction (config.py)."""

import json

import pytest

from deinflector.config import (
    Settings, build_deinflector, load_dictionary, load_rules,
)
from deinflector.engine import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES


def _write_config(tmp_path, text: str):
    p = tmp_path / "deinflector.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_missing_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Settings.from_file(tmp_path / "nope.toml")


def test_defaults():
    s = Settings.from_dict({})
    assert s.rules_path is None
    assert s.dictionary_paths == []
    assert s.max_depth == DEFAULT_MAX_DEPTH
    assert s.max_nodes == DEFAULT_MAX_NODES
    assert s.error_policy == "raise"
    assert s.dedupe is False
    assert s.log_level == "INFO"


def test_from_file_resolves_relative_paths(tmp_path):
    (tmp_path / "dict").mkdir()
    (tmp_path / "dict" / "b.json").write_text("[]", encoding="utf-8")
    (tmp_path / "dict" / "a.json").write_text("[]", encoding="utf-8")
    cfg = _write_config(tmp_path, """
[rules]
path = "rules.json"

[dictionary]
paths = ["dict/*.json"]

[search]
max_depth = 12
max_nodes = 500
error_policy = "ignore"
dedupe = true

[logging]
level = "DEBUG"
""")
    s = Settings.from_file(cfg)
    assert s.rules_path == tmp_path / "rules.json"
    assert [p.name for p in s.dictionary_paths] == ["a.json", "b.json"]
    assert s.max_depth == 12
    assert s.max_nodes == 500
    assert s.error_policy == "ignore"
    assert s.dedupe is True
    assert s.log_level == "DEBUG"


def test_bad_error_policy_rejected():
    with pytest.raises(ValueError):
        Settings.from_dict({"search": {"error_policy": "retry"}})


def test_bad_max_depth_rejected():
    with pytest.raises(ValueError):
        Settings.from_dict({"search": {"max_depth": 0}})


def test_search_options():
    opts = Settings(max_depth=9, error_policy="ignore", dedupe=True).search_options()
    assert (opts.max_depth, opts.error_policy, opts.dedupe) == (9, "ignore", True)


def test_load_rules_falls_back_to_bundled():
    table = load_rules(Settings())
    assert "past" in table


def test_load_rules_from_path(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text(json.dumps({"only": [{"suffixIn": "a", "suffixOut": "b"}]}), encoding="utf-8")
    table = load_rules(Settings(rules_path=p))
    assert list(table.reasons) == ["only"]


def test_build_deinflector_end_to_end(tmp_path):
    words = tmp_path / "words.json"
    words.write_text(json.dumps([{"term": "食べる", "rules": ["v1"]}], ensure_ascii=False),
                     encoding="utf-8")
    cfg = _write_config(tmp_path, '[dictionary]\npaths = ["words.json"]\n[search]\nmax_depth = 10\n')
    settings = Settings.from_file(cfg)

    deinflector = build_deinflector(settings)
    dictionary = load_dictionary(settings)
    assert deinflector.options.max_depth == 10

    paths = deinflector.deinflect_sync("食べた", dictionary.define)
    assert [p.root for p in paths] == ["食べる"]


def test_load_dictionary_without_paths_is_empty(caplog):
    with caplog.at_level("WARNING", logger="deinflector.config"):
        dic = load_dictionary(Settings())
    assert len(dic) == 0
    assert "No dictionary" in caplog.text


def test_bad_max_nodes_rejected():
    with pytest.raises(ValueError):
        Settings.from_dict({"search": {"max_nodes": -1}})


def test_search_options_carry_node_limit():
    assert Settings(max_nodes=42).search_options().max_nodes == 42
