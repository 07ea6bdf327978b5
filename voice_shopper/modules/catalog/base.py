"""
Grocery Catalog - Base Interface

Read-only reference data used to normalize item spelling. The catalog is
never a gate by default: it only decides how a name is displayed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class CatalogEntry:
    """One canonical grocery item"""
    canonical_name: str
    category: str = "other"
    aliases: FrozenSet[str] = field(default_factory=frozenset)
    
    def names(self) -> List[str]:
        """Canonical name followed by aliases"""
        return [self.canonical_name, *sorted(self.aliases)]


class GroceryCatalog(ABC):
    """
    Base interface for catalog lookups.
    
    Implementations provide exact and best-effort lookups; membership
    is derived from them.
    """
    
    @abstractmethod
    def entries(self) -> Iterable[CatalogEntry]:
        """All entries"""
        pass
    
    @abstractmethod
    def find_exact(self, name: str) -> Optional[CatalogEntry]:
        """Case-insensitive match on canonical name or alias"""
        pass
    
    @abstractmethod
    def find_best_match(self, name: str) -> Optional[CatalogEntry]:
        """Fuzzy lookup (spelling, plural, alias); None if nothing is close"""
        pass
    
    def is_valid_item(self, name: str) -> bool:
        """Membership check used by catalog-required filtering"""
        return self.find_exact(name) is not None or self.find_best_match(name) is not None
    
    def __len__(self) -> int:
        return sum(1 for _ in self.entries())
