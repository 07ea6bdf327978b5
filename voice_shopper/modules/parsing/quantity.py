"""
Quantity Extraction

Parses a leading quantity (and optional unit) off an item phrase.
Patterns are tried in priority order, first match wins:
1. numeric:  "2 apples", "1.5lb chicken", "3 cans of beans"
2. word:     "two pounds of chicken breast"
3. special:  "a dozen eggs", "a pair of socks", "a few limes"
4. none:     the whole phrase is the name
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from voice_shopper.modules.parsing.vocabulary import DEFAULT_VOCABULARY, ParsingVocabulary

_NUMERIC = re.compile(r'^(\d+(?:\.\d+)?)\s?([a-z]+)?(?:\s+(.+))?$', re.IGNORECASE)


@dataclass(frozen=True)
class QuantityResult:
    """Item name with the quantity prefix removed"""
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None

    @property
    def has_quantity(self) -> bool:
        return self.quantity is not None


class QuantityExtractor:
    """Leading quantity/unit parser"""

    def __init__(self, vocabulary: Optional[ParsingVocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY

        words = "|".join(re.escape(w) for w in sorted(self.vocabulary.number_words, key=len, reverse=True))
        self._word_pattern = re.compile(rf'^({words})\s+(.+)$', re.IGNORECASE)

        specials = "|".join(
            r'\s+'.join(re.escape(part) for part in phrase.split())
            for phrase in sorted(self.vocabulary.special_quantities, key=len, reverse=True)
        )
        self._special_pattern = re.compile(rf'^({specials})\s+(.+)$', re.IGNORECASE)

    def extract(self, phrase: str) -> QuantityResult:
        """
        Split a phrase into quantity, unit and name.

        A phrase without a recognizable quantity comes back unchanged, so
        extracting from an already-extracted name is a no-op.
        """
        text = (phrase or "").strip()
        if not text:
            return QuantityResult(name=text)

        return (
            self._extract_numeric(text)
            or self._extract_word(text)
            or self._extract_special(text)
            or QuantityResult(name=text)
        )

    def _extract_numeric(self, text: str) -> Optional[QuantityResult]:
        match = _NUMERIC.match(text)
        if not match:
            return None

        number, letters, rest = match.groups()
        if not letters:
            # A bare number is not an item
            if not rest:
                return None
            return self._build(float(number), None, rest)

        if rest and letters.lower() in self.vocabulary.unit_words:
            return self._build(float(number), letters.lower(), rest)

        # "2 apples", "2 green apples": the letters belong to the name
        name = letters if not rest else f"{letters} {rest}"
        return self._build(float(number), None, name)

    def _extract_word(self, text: str) -> Optional[QuantityResult]:
        match = self._word_pattern.match(text)
        if not match:
            return None
        quantity = self.vocabulary.number_words[match.group(1).lower()]
        unit, rest = self._split_unit(match.group(2))
        return self._build(quantity, unit, rest)

    def _extract_special(self, text: str) -> Optional[QuantityResult]:
        match = self._special_pattern.match(text)
        if not match:
            return None
        key = " ".join(match.group(1).lower().split())
        quantity = self.vocabulary.special_quantities[key]
        return self._build(quantity, None, match.group(2))

    def _split_unit(self, rest: str) -> Tuple[Optional[str], str]:
        """'pounds of chicken' -> ('pounds', 'chicken'); never empties the name"""
        words = rest.split()
        if len(words) > 1 and words[0].lower() in self.vocabulary.unit_words:
            return words[0].lower(), " ".join(words[1:])
        return None, rest

    def _build(self, quantity: float, unit: Optional[str], name: str) -> QuantityResult:
        name = _strip_of(name.strip())
        if quantity is not None and quantity <= 0:
            quantity = None
            unit = None
        elif isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        return QuantityResult(name=name, quantity=quantity, unit=unit)


def _strip_of(name: str) -> str:
    """'of beans' -> 'beans' (keeps a lone 'of')"""
    parts = name.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == 'of':
        return parts[1]
    return name
