"""Utterance parsing: segmentation, filtering, quantity extraction"""
from voice_shopper.modules.parsing.vocabulary import DEFAULT_VOCABULARY, ParsingVocabulary
from voice_shopper.modules.parsing.segmenter import UtteranceSegmenter
from voice_shopper.modules.parsing.item_filter import ItemFilter
from voice_shopper.modules.parsing.quantity import QuantityExtractor, QuantityResult

__all__ = [
    'DEFAULT_VOCABULARY',
    'ParsingVocabulary',
    'UtteranceSegmenter',
    'ItemFilter',
    'QuantityExtractor',
    'QuantityResult'
]
