"""
Item Pipeline

Turns one utterance into new shopping items:
segment -> filter -> extract quantity -> match catalog -> deduplicate.

Parsing never raises for malformed input; the worst case is an outcome
with zero items, reported structurally.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from voice_shopper.modules.catalog.base import GroceryCatalog
from voice_shopper.modules.catalog.matcher import FuzzyCatalogMatcher
from voice_shopper.modules.parsing.item_filter import ItemFilter
from voice_shopper.modules.parsing.quantity import QuantityExtractor
from voice_shopper.modules.parsing.segmenter import UtteranceSegmenter
from voice_shopper.modules.parsing.vocabulary import ParsingVocabulary
from voice_shopper.modules.shopping.models import ShoppingItem, generate_id
from voice_shopper.utils.logger import get_logger, log_list_activity

logger = get_logger('pipeline')


class PipelineStage(Enum):
    """Stages in the item pipeline"""
    SEGMENT = "segment"
    FILTER = "filter"
    QUANTITY = "quantity"
    MATCH = "match"
    DEDUPLICATE = "deduplicate"
    COMPLETE = "complete"


class PipelineOutcome(Enum):
    """What an utterance amounted to"""
    ADDED = "added"
    NONE_RECOGNIZED = "none_recognized"
    ALL_DUPLICATES = "all_duplicates"


@dataclass
class PipelineContext:
    """
    Context object passed through pipeline stages.
    Contains all data accumulated during processing.
    """
    utterance: str = ""
    segments: List[str] = field(default_factory=list)
    survivors: List[str] = field(default_factory=list)
    candidates: List[ShoppingItem] = field(default_factory=list)
    added: List[ShoppingItem] = field(default_factory=list)
    duplicates: List[ShoppingItem] = field(default_factory=list)

    start_time: float = field(default_factory=time.time)
    current_stage: PipelineStage = PipelineStage.SEGMENT
    stage_timings: Dict[str, float] = field(default_factory=dict)

    def mark_stage_complete(self, stage: PipelineStage, duration_ms: float):
        """Mark a stage as complete with timing"""
        self.stage_timings[stage.value] = duration_ms
        self.current_stage = stage

    def get_total_time(self) -> float:
        """Get total processing time in milliseconds"""
        return (time.time() - self.start_time) * 1000

    def to_dict(self) -> dict:
        """Convert to dictionary for logging"""
        return {
            'utterance': self.utterance,
            'segments': self.segments,
            'survivors': self.survivors,
            'added': [item.describe() for item in self.added],
            'duplicates': [item.name for item in self.duplicates],
            'current_stage': self.current_stage.value,
            'total_time_ms': self.get_total_time(),
            'stage_timings': self.stage_timings
        }


@dataclass
class PipelineResult:
    """Items to add plus what to tell the user"""
    added_items: List[ShoppingItem]
    recognized_none: bool
    duplicates: List[ShoppingItem] = field(default_factory=list)
    utterance: str = ""

    @property
    def outcome(self) -> PipelineOutcome:
        if self.added_items:
            return PipelineOutcome.ADDED
        if self.recognized_none:
            return PipelineOutcome.NONE_RECOGNIZED
        return PipelineOutcome.ALL_DUPLICATES

    @property
    def added_count(self) -> int:
        return len(self.added_items)

    @property
    def nothing_added(self) -> bool:
        return not self.added_items

    def summary(self) -> str:
        """Notification title"""
        if self.outcome is PipelineOutcome.ADDED:
            plural = "s" if self.added_count > 1 else ""
            return f"Added {self.added_count} item{plural}"
        if self.outcome is PipelineOutcome.NONE_RECOGNIZED:
            return "No items recognized"
        return "Already on your list"

    def description(self) -> str:
        """Notification body"""
        if self.outcome is PipelineOutcome.ADDED:
            return ", ".join(item.describe() for item in self.added_items)
        if self.outcome is PipelineOutcome.NONE_RECOGNIZED:
            return "Try saying items like \"milk, eggs and bread\"."
        return ", ".join(item.name for item in self.duplicates)


class ItemPipeline:
    """
    Utterance-to-items processing.

    Stages are injectable; defaults share one vocabulary and catalog.
    """

    def __init__(
        self,
        vocabulary: Optional[ParsingVocabulary] = None,
        catalog: Optional[GroceryCatalog] = None,
        require_catalog_match: bool = False,
        segmenter: Optional[UtteranceSegmenter] = None,
        item_filter: Optional[ItemFilter] = None,
        extractor: Optional[QuantityExtractor] = None,
        matcher: Optional[FuzzyCatalogMatcher] = None,
        id_factory: Callable[[], str] = generate_id
    ):
        self.segmenter = segmenter or UtteranceSegmenter(vocabulary)
        self.item_filter = item_filter or ItemFilter(
            vocabulary, catalog=catalog, require_catalog_match=require_catalog_match
        )
        self.extractor = extractor or QuantityExtractor(vocabulary)
        self.matcher = matcher or FuzzyCatalogMatcher(catalog)
        self.id_factory = id_factory

    def parse(self, utterance: str) -> PipelineContext:
        """Run every stage except deduplication"""
        context = PipelineContext(utterance=utterance or "")

        stage_start = time.time()
        context.segments = self.segmenter.segment(context.utterance)
        context.mark_stage_complete(PipelineStage.SEGMENT, (time.time() - stage_start) * 1000)

        stage_start = time.time()
        context.survivors = self.item_filter.filter(context.segments)
        context.mark_stage_complete(PipelineStage.FILTER, (time.time() - stage_start) * 1000)

        stage_start = time.time()
        extracted = []
        for survivor in context.survivors:
            result = self.extractor.extract(survivor)
            name = result.name or survivor
            if not self.item_filter.is_item(name) or not self.item_filter.passes_catalog(name):
                logger.debug(f"Dropped '{survivor}' after quantity extraction")
                continue
            extracted.append((name, result.quantity, result.unit))
        context.mark_stage_complete(PipelineStage.QUANTITY, (time.time() - stage_start) * 1000)

        stage_start = time.time()
        for name, quantity, unit in extracted:
            context.candidates.append(ShoppingItem(
                id=self.id_factory(),
                name=self.matcher.match(name),
                quantity=quantity,
                unit=unit
            ))
        context.mark_stage_complete(PipelineStage.MATCH, (time.time() - stage_start) * 1000)

        return context

    def process(self, utterance: str, existing: Sequence[ShoppingItem] = ()) -> PipelineResult:
        """
        Parse an utterance and keep only items not already listed.

        Args:
            utterance: raw utterance text
            existing: the live list, for case-insensitive deduplication

        Returns:
            PipelineResult with added_items and recognized_none
        """
        try:
            context = self.parse(utterance)
        except Exception as e:
            logger.error(f"Failed to parse '{utterance}': {e}")
            return PipelineResult(added_items=[], recognized_none=True, utterance=utterance or "")

        stage_start = time.time()
        seen = {item.name.lower() for item in existing}
        for candidate in context.candidates:
            key = candidate.name.lower()
            if key in seen:
                context.duplicates.append(candidate)
                continue
            seen.add(key)
            context.added.append(candidate)
        context.mark_stage_complete(PipelineStage.DEDUPLICATE, (time.time() - stage_start) * 1000)
        context.current_stage = PipelineStage.COMPLETE

        logger.debug(f"Pipeline: {context.to_dict()}")

        result = PipelineResult(
            added_items=context.added,
            recognized_none=not context.candidates,
            duplicates=context.duplicates,
            utterance=context.utterance
        )
        if result.recognized_none:
            logger.info(f"No items recognized in '{utterance}'")
        else:
            logger.info(f"{result.summary()} from '{utterance}'")

        try:
            log_list_activity(context.utterance, [item.describe() for item in result.added_items])
        except Exception as e:
            logger.warning(f"Activity log failed: {e}")

        return result
