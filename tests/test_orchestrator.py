"""
Test VoiceListOrchestrator

Voice and typed paths into one list, with a fake recognition engine.
"""

import asyncio

import pytest
from unittest.mock import Mock

from voice_shopper.core.orchestrator import ListMode, Notification, VoiceListOrchestrator
from voice_shopper.modules.stt.base import RecognitionSessionConfig
from voice_shopper.modules.stt.session import SessionState
from voice_shopper.utils.config import ConfigManager

SESSION_CONFIG = RecognitionSessionConfig(
    inactivity_timeout_ms=0,
    auto_stop_ms=0,
    restart_delay_ms=10,
    stop_schedule_ms=(0, 10, 20)
)


@pytest.fixture
def notify():
    return Mock()


@pytest.fixture
def orchestrator(engine, notify):
    return VoiceListOrchestrator(engine, session_config=SESSION_CONFIG, debounce_ms=30, notify=notify)


def list_names(orchestrator):
    return [item.name for item in orchestrator.shopping_list]


def titles(notify):
    return [c.args[0].title for c in notify.call_args_list]


class TestTypedInput:
    """Test typed utterances"""

    def test_items_added(self, orchestrator, notify):
        result = orchestrator.submit_text("milk and 2 apples")

        assert list_names(orchestrator) == ["Milk", "Apples"]
        assert result.added_count == 2
        notify.assert_called_once_with(Notification("Added 2 items", "Milk, 2x Apples", "default"))

    def test_nothing_recognized(self, orchestrator, notify):
        orchestrator.submit_text("um, okay")

        assert list_names(orchestrator) == []
        notification = notify.call_args.args[0]
        assert notification.title == "No items recognized"
        assert notification.variant == "destructive"

    def test_duplicates(self, orchestrator, notify):
        orchestrator.submit_text("milk")
        orchestrator.submit_text("Milk")

        assert list_names(orchestrator) == ["Milk"]
        assert titles(notify) == ["Added 1 item", "Already on your list"]

    def test_failing_notify_contained(self, engine):
        orchestrator = VoiceListOrchestrator(engine, notify=Mock(side_effect=RuntimeError("ui gone")))

        orchestrator.submit_text("milk")

        assert list_names(orchestrator) == ["Milk"]


class TestVoiceInput:
    """Test the session -> accumulator -> pipeline path"""

    @pytest.mark.asyncio
    async def test_fragments_become_items(self, orchestrator, engine):
        assert orchestrator.start_listening() is True

        engine.say("milk and")
        engine.say("eggs")
        await asyncio.sleep(0.08)

        assert list_names(orchestrator) == ["Milk", "Eggs"]
        assert orchestrator.is_listening

    @pytest.mark.asyncio
    async def test_stop_phrase(self, orchestrator, engine, notify):
        orchestrator.start_listening()

        engine.say("bread that's it")

        assert list_names(orchestrator) == ["Bread"]
        assert orchestrator.session.state is SessionState.STOPPING
        assert "Stopped listening" in titles(notify)

        await asyncio.sleep(0.05)
        assert orchestrator.session.state is SessionState.IDLE
        assert engine.count('start') == 1

    @pytest.mark.asyncio
    async def test_stop_listening_keeps_pending_text(self, orchestrator, engine):
        orchestrator.start_listening()
        engine.say("butter")

        orchestrator.stop_listening()

        assert list_names(orchestrator) == ["Butter"]

    @pytest.mark.asyncio
    async def test_error_notifies(self, orchestrator, engine, notify):
        orchestrator.start_listening()

        engine.emit_error("not-allowed")

        notification = notify.call_args.args[0]
        assert notification.title == "Voice input error"
        assert notification.description == "Microphone access was denied."
        assert notification.variant == "destructive"
        assert not orchestrator.is_listening

    @pytest.mark.asyncio
    async def test_timeout_flushes(self, engine, notify):
        config = RecognitionSessionConfig(inactivity_timeout_ms=30, auto_stop_ms=0, stop_schedule_ms=(0, 10))
        orchestrator = VoiceListOrchestrator(engine, session_config=config, debounce_ms=1000, notify=notify)
        orchestrator.start_listening()

        engine.say("cheese")
        await asyncio.sleep(0.1)

        assert list_names(orchestrator) == ["Cheese"]
        assert orchestrator.session.state is SessionState.IDLE
        assert notify.call_args_list[-1].args[0] == Notification(
            "Stopped listening", "No speech detected for a while."
        )

    @pytest.mark.asyncio
    async def test_time_limit_while_talking(self, engine, notify):
        config = RecognitionSessionConfig(inactivity_timeout_ms=0, auto_stop_ms=40, stop_schedule_ms=(0, 10))
        orchestrator = VoiceListOrchestrator(engine, session_config=config, debounce_ms=1000, notify=notify)
        orchestrator.start_listening()

        engine.say("cheese")
        await asyncio.sleep(0.02)
        engine.say("milk")
        await asyncio.sleep(0.08)

        assert list_names(orchestrator) == ["Cheese", "Milk"]
        descriptions = [c.args[0].description for c in notify.call_args_list]
        assert "Listening time limit reached. Start again to add more." in descriptions
        assert "No speech detected for a while." not in descriptions

    @pytest.mark.asyncio
    async def test_unsupported(self, unsupported_engine, notify):
        orchestrator = VoiceListOrchestrator(unsupported_engine, notify=notify)

        assert orchestrator.start_listening() is False
        assert notify.call_args.args[0].description == "Speech recognition is not supported here."


class TestModes:
    """Test adding/shopping mode switching"""

    @pytest.mark.asyncio
    async def test_switch_stops_session_first(self, orchestrator, engine):
        orchestrator.start_listening()
        engine.say("milk")

        await orchestrator.switch_mode(ListMode.SHOPPING)

        assert orchestrator.mode is ListMode.SHOPPING
        assert orchestrator.session.state is SessionState.IDLE
        assert list_names(orchestrator) == ["Milk"]

    @pytest.mark.asyncio
    async def test_no_voice_while_shopping(self, orchestrator, engine):
        await orchestrator.switch_mode(ListMode.SHOPPING)

        assert orchestrator.start_listening() is False
        assert engine.count('start') == 0

    @pytest.mark.asyncio
    async def test_switch_back(self, orchestrator):
        await orchestrator.switch_mode(ListMode.SHOPPING)
        await orchestrator.switch_mode(ListMode.ADDING)

        assert orchestrator.start_listening() is True

    @pytest.mark.asyncio
    async def test_close(self, orchestrator):
        orchestrator.start_listening()

        await orchestrator.close()

        assert orchestrator.session.state is SessionState.IDLE
        assert orchestrator.start_listening() is False


class TestFromConfig:
    """Test building from settings"""

    @pytest.mark.asyncio
    async def test_from_config(self, tmp_path, engine):
        (tmp_path / "settings.yaml").write_text(
            "recognition:\n  inactivity_timeout_ms: 1234\naccumulator:\n  debounce_ms: 250\n",
            encoding='utf-8'
        )
        config = ConfigManager(str(tmp_path))
        config.load_global_config()

        orchestrator = VoiceListOrchestrator.from_config(config, engine=engine)

        assert orchestrator.session.config.inactivity_timeout_ms == 1234
        assert orchestrator.accumulator.debounce_ms == 250
        assert orchestrator.submit_text("tomato").added_items[0].name == "Tomatoes"

    def test_custom_catalog(self, tmp_path, engine):
        catalog_path = tmp_path / "catalog.yaml"
        catalog_path.write_text("pantry:\n  - name: chickpeas\n    aliases: [garbanzos]\n", encoding='utf-8')
        config = ConfigManager(str(tmp_path))

        orchestrator = VoiceListOrchestrator.from_config(config, engine=engine, catalog_path=str(catalog_path))

        assert orchestrator.submit_text("garbanzos").added_items[0].name == "Chickpeas"
