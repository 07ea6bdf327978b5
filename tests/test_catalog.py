"""
Test grocery catalog and matcher
"""

import pytest
from unittest.mock import Mock

from voice_shopper.modules.catalog.base import CatalogEntry
from voice_shopper.modules.catalog.matcher import FuzzyCatalogMatcher, capitalize_first
from voice_shopper.modules.catalog.static import StaticCatalog, load_catalog, load_default_catalog


@pytest.fixture
def catalog():
    return StaticCatalog.from_dict({
        'dairy': ['milk', {'name': 'yogurt', 'aliases': ['yoghurt']}],
        'produce': ['apples', 'broccoli', {'name': 'tomatoes', 'aliases': ['tomato']}, 'strawberries'],
        'pantry': ['peanut butter'],
    })


class TestStaticCatalog:
    """Test exact, plural and fuzzy lookups"""

    def test_entries(self, catalog):
        assert len(catalog) == 7
        milk = catalog.find_exact("milk")
        assert milk == CatalogEntry("milk", "dairy")

    def test_exact_case_insensitive(self, catalog):
        assert catalog.find_exact("MILK").canonical_name == "milk"
        assert catalog.find_exact(" Peanut Butter ").canonical_name == "peanut butter"

    def test_alias(self, catalog):
        assert catalog.find_exact("yoghurt").canonical_name == "yogurt"

    def test_plural_fallback(self, catalog):
        assert catalog.find_best_match("apple").canonical_name == "apples"
        assert catalog.find_best_match("strawberry").canonical_name == "strawberries"
        assert catalog.find_best_match("tomatos").canonical_name == "tomatoes"

    def test_fuzzy_misspelling(self, catalog):
        assert catalog.find_best_match("brocoli").canonical_name == "broccoli"

    def test_no_match(self, catalog):
        assert catalog.find_best_match("motor oil") is None
        assert catalog.find_best_match("") is None

    def test_cutoff(self):
        strict = StaticCatalog.from_dict({'produce': ['broccoli']}, score_cutoff=99)
        assert strict.find_best_match("brocoli") is None

    def test_is_valid_item(self, catalog):
        assert catalog.is_valid_item("Milk") is True
        assert catalog.is_valid_item("apple") is True
        assert catalog.is_valid_item("unobtainium") is False

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("frozen:\n  - ice cream\n  - name: peas\n    aliases: [frozen peas]\n", encoding='utf-8')

        loaded = load_catalog(path)

        assert loaded.find_exact("frozen peas").canonical_name == "peas"
        assert loaded.find_exact("ice cream").category == "frozen"

    def test_default_catalog(self):
        bundled = load_default_catalog()

        assert len(bundled) > 50
        assert bundled.find_exact("chicken breast") is not None
        assert bundled.find_exact("peanut butter").category == "pantry"


class TestFuzzyCatalogMatcher:
    """Test display-name normalization"""

    def test_capitalize_first(self):
        assert capitalize_first("peanut butter") == "Peanut butter"
        assert capitalize_first("") == ""

    def test_no_catalog(self):
        assert FuzzyCatalogMatcher().match("  green   apples ") == "Green apples"

    def test_canonical_name(self, catalog):
        matcher = FuzzyCatalogMatcher(catalog)
        assert matcher.match("tomato") == "Tomatoes"
        assert matcher.match("brocoli") == "Broccoli"

    def test_unknown_kept(self, catalog):
        assert FuzzyCatalogMatcher(catalog).match("dragon fruit") == "Dragon fruit"

    def test_failing_catalog(self):
        catalog = Mock()
        catalog.find_exact.side_effect = RuntimeError("offline")
        assert FuzzyCatalogMatcher(catalog).match("milk") == "Milk"
