"""Grocery catalog and name matching"""
from voice_shopper.modules.catalog.base import CatalogEntry, GroceryCatalog
from voice_shopper.modules.catalog.static import StaticCatalog, load_catalog, load_default_catalog
from voice_shopper.modules.catalog.matcher import FuzzyCatalogMatcher, capitalize_first

__all__ = [
    'CatalogEntry',
    'GroceryCatalog',
    'StaticCatalog',
    'load_catalog',
    'load_default_catalog',
    'FuzzyCatalogMatcher',
    'capitalize_first'
]
