"""
Utterance Segmenter

Splits one utterance into candidate item phrases:
1. lowercase and trim
2. strip filler phrases ("i need", "get me", ...)
3. apply separator patterns in order to every fragment
4. if a single multi-word fragment remains, fall back to word-level
   tokens, keeping known compounds ("peanut butter") and quantity
   prefixes ("2 lb", "a dozen") attached to their item
"""

import re
from typing import List, Optional

from voice_shopper.modules.parsing.vocabulary import DEFAULT_VOCABULARY, ParsingVocabulary
from voice_shopper.utils.logger import get_logger

logger = get_logger('parsing.segmenter')

_NUMERIC_TOKEN = re.compile(r'^\d+(?:\.\d+)?[a-z]*$')


class UtteranceSegmenter:
    """Turns an utterance into an ordered list of raw segments"""

    def __init__(self, vocabulary: Optional[ParsingVocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY

        self._filler_patterns = []
        for filler in self.vocabulary.filler_phrases:
            escaped = re.escape(filler)
            self._filler_patterns.append((
                re.compile(rf'^{escaped}\s+', re.IGNORECASE),
                re.compile(rf'\s+{escaped}\s+', re.IGNORECASE),
            ))

        self._separators = [re.compile(p, re.IGNORECASE) for p in self.vocabulary.separator_patterns]

    def segment(self, utterance: str) -> List[str]:
        """
        Split an utterance into raw segments (not yet filtered).

        Args:
            utterance: accumulated transcript or typed text

        Returns:
            Ordered segments; empty list for blank input
        """
        normalized = self.strip_fillers(self.normalize(utterance))
        if not normalized:
            return []

        fragments = self.split_separators(normalized)

        if len(fragments) == 1 and ' ' in fragments[0].strip():
            fragments = self.split_words(fragments[0])

        logger.debug(f"Segmented '{utterance}' -> {fragments}")
        return fragments

    def normalize(self, utterance: str) -> str:
        if not utterance:
            return ""
        return str(utterance).lower().strip()

    def strip_fillers(self, text: str) -> str:
        for leading, embedded in self._filler_patterns:
            text = leading.sub('', text)
            text = embedded.sub(' ', text)
        return text.strip()

    def split_separators(self, text: str) -> List[str]:
        fragments = [text]
        for separator in self._separators:
            next_fragments = []
            for fragment in fragments:
                next_fragments.extend(
                    part for part in separator.split(fragment) if part and part.strip()
                )
            fragments = next_fragments
        return fragments

    def split_words(self, fragment: str) -> List[str]:
        """
        Word-level fallback for a fragment no separator could split.

        Scans left to right: a quantity (number, number word or special
        quantity phrase) absorbs an optional unit and "of" plus the item
        word after it; two adjacent words found in the compound table
        stay together.
        """
        words = fragment.split()
        segments: List[str] = []
        i = 0

        while i < len(words):
            quantity_len = self._quantity_prefix_length(words, i)
            if quantity_len:
                j = i + quantity_len
                item_len = self._compound_length(words, j)
                if j < len(words):
                    segments.append(' '.join(words[i:j + item_len]))
                    i = j + item_len
                    continue
                # Quantity with nothing after it
                segments.append(' '.join(words[i:j]))
                i = j
                continue

            item_len = self._compound_length(words, i)
            segments.append(' '.join(words[i:i + item_len]))
            i += item_len

        return segments

    def _compound_length(self, words: List[str], i: int) -> int:
        if i + 1 < len(words) and f"{words[i]} {words[i + 1]}" in self.vocabulary.compound_phrases:
            return 2
        return 1

    def _quantity_prefix_length(self, words: List[str], i: int) -> int:
        """Number of words making up a quantity prefix at position i (0 if none)"""
        vocab = self.vocabulary
        length = 0

        if i + 1 < len(words) and f"{words[i]} {words[i + 1]}" in vocab.special_quantities:
            length = 2
        elif _NUMERIC_TOKEN.match(words[i]) or words[i] in vocab.number_words:
            length = 1
        else:
            return 0

        # Optional unit, then optional "of", but never swallow the last word
        j = i + length
        if j + 1 < len(words) and words[j] in vocab.unit_words:
            length += 1
            j += 1
        if j + 1 < len(words) and words[j] == 'of':
            length += 1

        return length
