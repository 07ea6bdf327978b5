"""
Item Filter

Cleans raw segments and drops the ones that are not items: function
words, fillers, closing phrases, bare quantity or unit words and anything
under two characters.
Optionally checks survivors against a grocery catalog.
"""

import re
from typing import Iterable, List, Optional

from voice_shopper.modules.catalog.base import GroceryCatalog
from voice_shopper.modules.parsing.vocabulary import DEFAULT_VOCABULARY, ParsingVocabulary
from voice_shopper.utils.logger import get_logger

logger = get_logger('parsing.item_filter')

_TRAILING_PUNCTUATION = re.compile(r'[.,!?]+$')
_APOSTROPHES = re.compile(r"[’'`]")
MIN_ITEM_LENGTH = 2


class ItemFilter:
    """
    Segment cleaner and non-item filter.

    Args:
        vocabulary: word tables
        catalog: reference catalog for catalog-required mode
        require_catalog_match: drop items the catalog does not know
    """

    def __init__(
        self,
        vocabulary: Optional[ParsingVocabulary] = None,
        catalog: Optional[GroceryCatalog] = None,
        require_catalog_match: bool = False
    ):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self.catalog = catalog
        self.require_catalog_match = require_catalog_match

        articles = "|".join(re.escape(a) for a in self.vocabulary.articles)
        self._leading_article = re.compile(rf'^(?:{articles})\s+', re.IGNORECASE)

        quantity_words = sorted(
            list(self.vocabulary.number_words) + list(self.vocabulary.special_quantities),
            key=len,
            reverse=True
        )
        self._quantity_start = re.compile(
            r'^(?:\d|(?:' + "|".join(re.escape(w) for w in quantity_words) + r')\b)',
            re.IGNORECASE
        )
        # "one", "a dozen" or "lbs" on their own carry no item name
        self._non_items = frozenset(
            _APOSTROPHES.sub('', w) for w in self.vocabulary.non_item_words
        ) | frozenset(quantity_words) | self.vocabulary.unit_words

    def clean(self, segment: str) -> str:
        """Trim, drop a leading article and trailing punctuation"""
        cleaned = (segment or "").strip()

        # "a dozen eggs" keeps its article
        if not self._quantity_start.match(cleaned):
            cleaned = self._leading_article.sub('', cleaned)

        cleaned = _TRAILING_PUNCTUATION.sub('', cleaned)
        cleaned = re.sub(r'\s+', ' ', cleaned).strip()
        return cleaned

    def is_item(self, cleaned: str) -> bool:
        if not cleaned or len(cleaned) < MIN_ITEM_LENGTH:
            return False
        return self.normalize_key(cleaned) not in self._non_items

    def normalize_key(self, text: str) -> str:
        return _APOSTROPHES.sub('', text.lower())

    def filter(self, segments: Iterable[str]) -> List[str]:
        """Clean every segment and keep the survivors, in order"""
        survivors = []
        for segment in segments:
            cleaned = self.clean(segment)
            if self.is_item(cleaned):
                survivors.append(cleaned)
            else:
                logger.debug(f"Discarded segment '{segment}'")
        return survivors

    def passes_catalog(self, name: str) -> bool:
        """
        Catalog membership check for an item name (quantity removed).

        Always passes when no catalog match is required.
        """
        if not self.require_catalog_match:
            return True
        if self.catalog is None:
            logger.warning("Catalog match required but no catalog configured")
            return True
        try:
            return self.catalog.is_valid_item(name)
        except Exception as e:
            logger.error(f"Catalog validation failed for '{name}': {e}")
            return False
