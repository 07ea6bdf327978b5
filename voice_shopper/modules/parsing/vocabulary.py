"""
Parsing Vocabulary

Immutable word tables used by the segmenter, filter and quantity
extractor. Kept apart from the algorithms so a locale can swap tables
without touching parsing code.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple
from types import MappingProxyType

FILLER_PHRASES: Tuple[str, ...] = (
    'i need', 'i want', 'get me', 'buy', 'purchase', 'pick up',
    'we need', 'let me get', 'can you add', 'add to the list',
    'put on the list', 'write down', 'remember to get',
)

# Applied in order, each one to every fragment produced so far
SEPARATOR_PATTERNS: Tuple[str, ...] = (
    r'\s+and\s+',
    r'\s+also\s+',
    r'\s+plus\s+',
    r'\s+as well as\s+',
    r'\s+along with\s+',
    r'\s+then\s+',
    r'\s+next\s+',
    r'\s+after that\s+',
    r'\s+some\s+',
    r'\s+a few\s+',
    r'\s+couple of\s+',
    r',\s*',
    r';\s*',
    r'\s+(?=\d+(?:\.\d+)?\s*[a-z])',
    r'\.{2,}',
    r'\s{3,}',
)

COMPOUND_PHRASES: FrozenSet[str] = frozenset({
    'ice cream', 'olive oil', 'peanut butter', 'orange juice', 'apple juice',
    'ground beef', 'chicken breast', 'hot dogs', 'potato chips', 'corn flakes',
    'green beans', 'sweet potato', 'bell pepper', 'black beans', 'brown rice',
    'whole wheat', 'greek yogurt', 'coconut milk', 'almond milk', 'soy sauce',
    'maple syrup', 'baking soda', 'vanilla extract', 'cream cheese', 'cottage cheese',
    'hand soap', 'toilet paper', 'paper towels',
})

NON_ITEM_WORDS: FrozenSet[str] = frozenset({
    # articles, determiners, conjunctions
    'a', 'an', 'the', 'this', 'that', 'these', 'those', 'my', 'your', 'our',
    'and', 'or', 'but', 'so', 'yet', 'for', 'nor',
    # prepositions
    'of', 'to', 'in', 'on', 'at', 'by', 'with', 'without', 'from',
    'up', 'down', 'over', 'under', 'above', 'below', 'between', 'through',
    # auxiliary and speech verbs
    'was', 'were', 'is', 'are', 'am', 'be', 'been', 'being', 'have', 'has',
    'had', 'do', 'does', 'did', 'will', 'would', 'could', 'should', 'might',
    'can', 'get', 'getting', 'got', 'need', 'needed', 'want', 'wanted',
    'buy', 'buying', 'bought', 'pick', 'picking', 'picked', 'take', 'taking',
    'took', 'put', 'putting', 'add', 'adding', 'added', 'go', 'going', 'went',
    # fillers and interjections
    'um', 'uh', 'er', 'ah', 'oh', 'hmm', 'well', 'like', 'you know', 'i mean',
    'actually', 'basically', 'literally', 'really', 'very', 'quite', 'pretty',
    'sort of', 'kind of', 'thinking', 'thought', 'think', 'about', 'maybe', 'perhaps',
    # pronouns
    'i', 'you', 'he', 'she', 'it', 'we', 'they', 'me', 'him', 'her', 'us', 'them',
    # standalone quantity words
    'also', 'too', 'rather', 'more', 'most', 'less', 'least', 'much', 'many',
    'few', 'little', 'enough', 'too much', 'some', 'any', 'all', 'every', 'each',
    'both', 'either', 'neither', 'several', 'a few', 'a couple', 'couple',
    # temporal and sequence words
    'now', 'then', 'next', 'first', 'second', 'last', 'finally', 'after',
    'before', 'during', 'while', 'when', 'where', 'why', 'how',
    # closing phrases (compared with apostrophes removed)
    'lets see', 'let me see', 'what else', 'thats it', 'that is it', 'im done',
    'i am done', 'thats all', 'that is all', 'nothing else', 'no more',
    'stop', 'finish', 'finished', 'end', 'complete', 'done', 'okay', 'ok',
    'alright', 'right',
})

NUMBER_WORDS: Mapping[str, int] = MappingProxyType({
    'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5,
    'six': 6, 'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10,
})

SPECIAL_QUANTITIES: Mapping[str, int] = MappingProxyType({
    'a dozen': 12, 'a pair': 2, 'a few': 3,
})

UNIT_WORDS: FrozenSet[str] = frozenset({
    'lb', 'lbs', 'pound', 'pounds', 'oz', 'ounce', 'ounces',
    'kg', 'kgs', 'kilo', 'kilos', 'kilogram', 'kilograms',
    'g', 'gram', 'grams', 'mg',
    'l', 'liter', 'liters', 'litre', 'litres', 'ml', 'milliliter', 'milliliters',
    'gal', 'gallon', 'gallons', 'quart', 'quarts', 'pint', 'pints',
    'cup', 'cups', 'tbsp', 'tablespoon', 'tablespoons', 'tsp', 'teaspoon', 'teaspoons',
    'pkg', 'package', 'packages', 'pack', 'packs', 'pcs', 'piece', 'pieces',
    'dozen', 'bag', 'bags', 'box', 'boxes', 'can', 'cans', 'jar', 'jars',
    'bottle', 'bottles', 'carton', 'cartons', 'loaf', 'loaves',
    'bunch', 'bunches', 'head', 'heads', 'clove', 'cloves', 'stick', 'sticks',
    'slice', 'slices', 'container', 'containers',
})

STOP_PHRASES: Tuple[str, ...] = (
    "that's it", "that is it", "that's all", "that is all",
    "i'm done", "i am done", "done", "finished", "stop", "stop listening",
)


@dataclass(frozen=True)
class ParsingVocabulary:
    """All tables one locale needs for utterance parsing"""
    filler_phrases: Tuple[str, ...] = FILLER_PHRASES
    separator_patterns: Tuple[str, ...] = SEPARATOR_PATTERNS
    compound_phrases: FrozenSet[str] = COMPOUND_PHRASES
    non_item_words: FrozenSet[str] = NON_ITEM_WORDS
    number_words: Mapping[str, int] = field(default_factory=lambda: NUMBER_WORDS)
    special_quantities: Mapping[str, int] = field(default_factory=lambda: SPECIAL_QUANTITIES)
    unit_words: FrozenSet[str] = UNIT_WORDS
    articles: Tuple[str, ...] = ('a', 'an', 'the')
    stop_phrases: Tuple[str, ...] = STOP_PHRASES

    @classmethod
    def from_dict(
        cls,
        overrides: Optional[Dict[str, Any]],
        base: Optional["ParsingVocabulary"] = None
    ) -> "ParsingVocabulary":
        """
        Build a vocabulary from config overrides.

        Unknown keys are ignored; lists become tuples or frozensets to
        match the table they replace.
        """
        base = base or DEFAULT_VOCABULARY
        if not overrides:
            return base

        known = {f.name for f in fields(cls)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known or value is None:
                continue
            current = getattr(base, key)
            if isinstance(current, frozenset):
                changes[key] = frozenset(str(v).lower() for v in value)
            elif isinstance(current, tuple):
                # Separator patterns are regexes: keep their case
                if key == 'separator_patterns':
                    changes[key] = tuple(str(v) for v in value)
                else:
                    changes[key] = tuple(str(v).lower() for v in value)
            else:
                changes[key] = MappingProxyType({str(k).lower(): int(v) for k, v in dict(value).items()})

        return replace(base, **changes)


DEFAULT_VOCABULARY = ParsingVocabulary()
