"""
Test ItemPipeline

End-to-end utterance parsing and deduplication.
"""

import pytest
from unittest.mock import patch

from voice_shopper.core.pipeline import ItemPipeline, PipelineOutcome, PipelineStage
from voice_shopper.modules.catalog.static import StaticCatalog, load_default_catalog
from voice_shopper.modules.shopping.models import ShoppingItem


def names(result):
    return [item.name for item in result.added_items]


def described(result):
    return [item.describe() for item in result.added_items]


@pytest.fixture
def pipeline():
    return ItemPipeline()


@pytest.fixture
def catalog_pipeline():
    return ItemPipeline(catalog=load_default_catalog())


class TestItemPipeline:
    """Test utterances becoming items"""

    def test_simple_list(self, pipeline):
        result = pipeline.process("apples and bananas")

        assert names(result) == ["Apples", "Bananas"]
        assert result.outcome is PipelineOutcome.ADDED
        assert result.summary() == "Added 2 items"

    def test_quantities_and_compounds(self, pipeline):
        result = pipeline.process("2 apples, a dozen eggs and peanut butter")

        assert described(result) == ["2x Apples", "12x Eggs", "Peanut butter"]

    def test_filler_and_non_items(self, pipeline):
        result = pipeline.process("i need some milk")

        assert names(result) == ["Milk"]
        assert result.summary() == "Added 1 item"

    def test_units(self, catalog_pipeline):
        result = catalog_pipeline.process("two pounds of chicken breast")

        item = result.added_items[0]
        assert (item.name, item.quantity, item.unit) == ("Chicken breast", 2, "pounds")
        assert item.describe() == "2 pounds Chicken breast"

    def test_long_utterance(self, catalog_pipeline):
        result = catalog_pipeline.process(
            "I need two pounds of chicken breast and also some milk, oh and a dozen eggs"
        )

        assert names(result) == ["Chicken breast", "Milk", "Eggs"]
        assert result.added_items[2].quantity == 12

    def test_nothing_recognized(self, pipeline):
        result = pipeline.process("um, that's it")

        assert result.added_items == []
        assert result.recognized_none is True
        assert result.outcome is PipelineOutcome.NONE_RECOGNIZED

    @pytest.mark.parametrize("utterance", ["one", "two lbs", "2 lbs", "a dozen"])
    def test_quantity_without_item(self, pipeline, utterance):
        result = pipeline.process(utterance)

        assert result.added_items == []
        assert result.outcome is PipelineOutcome.NONE_RECOGNIZED

    def test_quantity_without_item_skipped_in_list(self, pipeline):
        result = pipeline.process("milk and 2 lbs")

        assert names(result) == ["Milk"]

    @pytest.mark.parametrize("utterance", ["", "   ", None, "...", "and and and"])
    def test_degenerate_input(self, pipeline, utterance):
        result = pipeline.process(utterance)

        assert result.added_items == []
        assert result.recognized_none is True

    def test_catalog_spelling(self, catalog_pipeline):
        result = catalog_pipeline.process("tomato and brocoli")

        assert names(result) == ["Tomatoes", "Broccoli"]

    def test_catalog_required(self):
        catalog = StaticCatalog.from_dict({'dairy': ['milk']})
        pipeline = ItemPipeline(catalog=catalog, require_catalog_match=True)

        result = pipeline.process("milk and motor oil")

        assert names(result) == ["Milk"]

    def test_ids_unique(self, pipeline):
        result = pipeline.process("milk, eggs, bread")

        ids = [item.id for item in result.added_items]
        assert len(set(ids)) == 3
        assert all(not item.completed for item in result.added_items)

    def test_id_factory(self):
        counter = iter(range(100))
        pipeline = ItemPipeline(id_factory=lambda: f"id-{next(counter)}")

        result = pipeline.process("milk and eggs")

        assert [item.id for item in result.added_items] == ["id-0", "id-1"]

    def test_stage_timings(self, pipeline):
        context = pipeline.parse("milk and eggs")

        assert set(context.stage_timings) == {
            PipelineStage.SEGMENT.value,
            PipelineStage.FILTER.value,
            PipelineStage.QUANTITY.value,
            PipelineStage.MATCH.value,
        }
        assert context.to_dict()['survivors'] == ["milk", "eggs"]

    def test_parse_failure_contained(self, pipeline):
        with patch.object(pipeline.segmenter, 'segment', side_effect=RuntimeError("boom")):
            result = pipeline.process("milk")

        assert result.recognized_none is True

    def test_activity_logged(self, pipeline):
        with patch('voice_shopper.core.pipeline.log_list_activity') as mock_log:
            pipeline.process("milk")

        mock_log.assert_called_once_with("milk", ["Milk"])


class TestDeduplication:
    """Test case-insensitive deduplication"""

    def test_against_existing(self, pipeline):
        existing = [ShoppingItem.create("Milk")]

        result = pipeline.process("milk and eggs", existing)

        assert names(result) == ["Eggs"]
        assert [item.name for item in result.duplicates] == ["Milk"]

    def test_all_duplicates(self, pipeline):
        existing = [ShoppingItem.create("Milk")]

        result = pipeline.process("MILK", existing)

        assert result.added_items == []
        assert result.recognized_none is False
        assert result.outcome is PipelineOutcome.ALL_DUPLICATES
        assert result.description() == "Milk"

    def test_within_batch(self, pipeline):
        result = pipeline.process("milk, eggs and milk")

        assert names(result) == ["Milk", "Eggs"]

    def test_existing_untouched(self, pipeline):
        existing = [ShoppingItem.create("Milk")]

        pipeline.process("milk and eggs", existing)

        assert [item.name for item in existing] == ["Milk"]
