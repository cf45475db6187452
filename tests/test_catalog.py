# tests/test_catalog.py
"""
Tests for catalog JSON loading and player snapshots.
"""

import json
import logging

import pytest

from scriptcost.catalog import (
    PlayerSnapshot, catalog_from_mapping, load_catalog, parse_cost_value,
    parse_source_file_flag, player_from_flags,
)
from scriptcost.costs import DEFAULT_CONSTANTS, DEFAULT_NAMESPACE_PRIORITY, Dynamic, Fixed
from scriptcost.errors import CatalogError


class TestParseCostValue:

    def test_number(self):
        assert parse_cost_value(0.5) == Fixed(0.5)

    def test_sf4(self):
        value = parse_cost_value({"sf4": 2})
        assert isinstance(value, Dynamic)
        assert value(PlayerSnapshot(bitnode=4)) == 2

    @pytest.mark.parametrize("raw", ["1", True, None, [1], {"sf4": "x"}, {"other": 1}])
    def test_malformed(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="scriptcost"):
            assert parse_cost_value(raw, "default.x") is None
        assert "default.x" in caplog.text


class TestCatalogFromMapping:

    def test_full_document(self):
        catalog, constants = catalog_from_mapping({
            "default": {"hack": 0.1},
            "namespaces": {"gang": {"recruitMember": 2}},
            "priority": ["gang"],
            "constants": {"base": 2},
        })
        assert catalog.lookup("hack") == ("hack", Fixed(0.1))
        assert catalog.lookup("recruitMember") == ("gang.recruitMember", Fixed(2))
        assert catalog.priority == ("gang",)
        assert constants.base == 2
        assert constants.dom == DEFAULT_CONSTANTS.dom

    def test_defaults(self):
        catalog, constants = catalog_from_mapping({})
        assert catalog.priority == DEFAULT_NAMESPACE_PRIORITY
        assert constants == DEFAULT_CONSTANTS

    def test_malformed_value_priced_later(self):
        catalog, _ = catalog_from_mapping({"default": {"bad": "x"}})
        assert catalog.lookup("bad") == ("bad", None)

    @pytest.mark.parametrize("doc", [
        [],
        {"default": []},
        {"namespaces": {"gang": 3}},
        {"namespaces": []},
        {"priority": "gang"},
        {"priority": [1]},
        {"constants": {"nope": 1}},
        {"constants": {"base": "x"}},
        {"constants": []},
    ])
    def test_structural_errors(self, doc):
        with pytest.raises(CatalogError):
            catalog_from_mapping(doc)


class TestLoadCatalog:

    def test_load(self, catalog_file):
        catalog, constants = load_catalog(catalog_file)
        assert catalog.lookup("buy") == ("stock.buy", Fixed(2.5))
        assert isinstance(catalog.lookup("getOwnedAugs")[1], Dynamic)
        assert constants == DEFAULT_CONSTANTS

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"default": {', encoding="utf-8")
        with pytest.raises(CatalogError) as info:
            load_catalog(path)
        assert info.value.span.file == str(path)
        assert info.value.span.line == 1

    def test_roundtrip_through_json(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"default": {"x": 3}}), encoding="utf-8")
        catalog, _ = load_catalog(str(path))
        assert catalog.lookup("x") == ("x", Fixed(3))


class TestPlayer:

    def test_source_file_level(self):
        player = PlayerSnapshot(bitnode=2, source_files={4: 3})
        assert player.source_file_level(4) == 3
        assert player.source_file_level(1) == 0

    def test_snapshot_is_read_only(self):
        player = PlayerSnapshot(source_files={4: 1})
        with pytest.raises(TypeError):
            player.source_files[4] = 3

    def test_flag_parsing(self):
        assert parse_source_file_flag("4=2") == (4, 2)
        with pytest.raises(ValueError):
            parse_source_file_flag("4")

    def test_player_from_flags(self):
        player = player_from_flags(None, ["4=2", "1=3"])
        assert player.bitnode == 1
        assert player.source_file_level(4) == 2
        assert player.source_file_level(1) == 3
