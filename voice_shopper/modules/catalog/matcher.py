"""
Fuzzy Catalog Matcher

Maps a cleaned item name to its canonical catalog spelling. Never
rejects an item: with no catalog, no match, or a failing catalog the
name is used as-is. The result is always capitalized at the first letter
only.
"""

from typing import Optional

from voice_shopper.modules.catalog.base import CatalogEntry, GroceryCatalog
from voice_shopper.utils.logger import get_logger

logger = get_logger('catalog.matcher')


def capitalize_first(text: str) -> str:
    """'peanut butter' -> 'Peanut butter' (rest of the string untouched)"""
    if not text:
        return text
    return text[0].upper() + text[1:]


class FuzzyCatalogMatcher:
    """Display-name normalizer backed by an optional catalog"""
    
    def __init__(self, catalog: Optional[GroceryCatalog] = None):
        self.catalog = catalog
    
    def lookup(self, name: str) -> Optional[CatalogEntry]:
        """Exact match first, then the catalog's fuzzy lookup"""
        if self.catalog is None or not name:
            return None
        try:
            return self.catalog.find_exact(name) or self.catalog.find_best_match(name)
        except Exception as e:
            logger.warning(f"Catalog lookup failed for '{name}': {e}")
            return None
    
    def match(self, name: str) -> str:
        """
        Resolve a display name.
        
        Args:
            name: cleaned item name (quantity already removed)
            
        Returns:
            Canonical name if found, else the name itself; first letter
            capitalized either way
        """
        cleaned = " ".join((name or "").split())
        if not cleaned:
            return cleaned
        
        entry = self.lookup(cleaned)
        display = entry.canonical_name if entry is not None else cleaned
        return capitalize_first(display)
