"""
Static Catalog

In-memory catalog loaded from YAML. Fuzzy lookup uses rapidfuzz edit
distance over canonical names and aliases, with a singular/plural
fallback for near misses like "tomatos".

YAML format:

    dairy:
      - milk
      - name: yogurt
        aliases: [yoghurt]
"""

from importlib import resources
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml
from rapidfuzz import fuzz, process, utils

from voice_shopper.modules.catalog.base import CatalogEntry, GroceryCatalog
from voice_shopper.utils.logger import get_logger

logger = get_logger('catalog.static')

DEFAULT_SCORE_CUTOFF = 85


def _plural_variants(name: str) -> List[str]:
    """Cheap singular/plural forms of a name"""
    variants = []
    if name.endswith('ies') and len(name) > 4:
        variants.append(name[:-3] + 'y')
    if name.endswith('es'):
        variants.append(name[:-2])
    if name.endswith('s') and not name.endswith('ss'):
        variants.append(name[:-1])
    else:
        variants.append(name + 's')
        if name.endswith('y') and len(name) > 2:
            variants.append(name[:-1] + 'ies')
        if name.endswith('o'):
            variants.append(name + 'es')
    return variants


class StaticCatalog(GroceryCatalog):
    """Catalog over a fixed list of entries"""
    
    def __init__(self, entries: Iterable[CatalogEntry], score_cutoff: float = DEFAULT_SCORE_CUTOFF):
        self._entries: List[CatalogEntry] = list(entries)
        self.score_cutoff = score_cutoff
        
        # lowercase name or alias -> entry (first entry wins)
        self._index: Dict[str, CatalogEntry] = {}
        for entry in self._entries:
            for name in entry.names():
                self._index.setdefault(name.lower().strip(), entry)
        self._choices = list(self._index.keys())
        
        logger.debug(f"Catalog loaded ({len(self._entries)} entries, {len(self._choices)} names)")
    
    @classmethod
    def from_dict(cls, data: Dict, score_cutoff: float = DEFAULT_SCORE_CUTOFF) -> "StaticCatalog":
        """Build from {category: [name | {name, aliases}]}"""
        entries = []
        for category, items in (data or {}).items():
            for item in items or []:
                if isinstance(item, dict):
                    name = str(item.get('name', '')).strip()
                    aliases = frozenset(str(a).strip().lower() for a in item.get('aliases', []) or [])
                else:
                    name = str(item).strip()
                    aliases = frozenset()
                if name:
                    entries.append(CatalogEntry(canonical_name=name, category=str(category), aliases=aliases))
        return cls(entries, score_cutoff=score_cutoff)
    
    @classmethod
    def from_yaml(cls, path: Union[str, Path], score_cutoff: float = DEFAULT_SCORE_CUTOFF) -> "StaticCatalog":
        """Load a catalog file"""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loading catalog from {path}")
        return cls.from_dict(data, score_cutoff=score_cutoff)
    
    def entries(self) -> Iterable[CatalogEntry]:
        return list(self._entries)
    
    def find_exact(self, name: str) -> Optional[CatalogEntry]:
        if not name:
            return None
        return self._index.get(name.lower().strip())
    
    def find_best_match(self, name: str) -> Optional[CatalogEntry]:
        key = (name or "").lower().strip()
        if not key or not self._choices:
            return None
        
        exact = self._index.get(key)
        if exact is not None:
            return exact
        
        for variant in _plural_variants(key):
            if variant in self._index:
                return self._index[variant]
        
        match = process.extractOne(
            key,
            self._choices,
            scorer=fuzz.ratio,
            processor=utils.default_process,
            score_cutoff=self.score_cutoff
        )
        if match is None:
            return None
        
        choice, score, _ = match
        logger.debug(f"Fuzzy match '{name}' -> '{choice}' ({score:.0f})")
        return self._index[choice]


def load_default_catalog(score_cutoff: float = DEFAULT_SCORE_CUTOFF) -> StaticCatalog:
    """Catalog bundled with the package"""
    text = resources.files('voice_shopper.data').joinpath('catalog.yaml').read_text(encoding='utf-8')
    return StaticCatalog.from_dict(yaml.safe_load(text) or {}, score_cutoff=score_cutoff)


def load_catalog(path: Optional[Union[str, Path]] = None, score_cutoff: float = DEFAULT_SCORE_CUTOFF) -> StaticCatalog:
    """Load a catalog file, or the bundled catalog when path is None"""
    if path is None:
        return load_default_catalog(score_cutoff)
    return StaticCatalog.from_yaml(path, score_cutoff)
