"""
Main Orchestrator

Wires the voice path and the typed path to one shopping list:

    RecognitionSession -> TranscriptAccumulator -> ItemPipeline -> ShoppingList
    typed text ----------------------------------> ItemPipeline -> ShoppingList

Every outcome is reported through a notify callback as a Notification.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from voice_shopper.core.pipeline import ItemPipeline, PipelineOutcome, PipelineResult
from voice_shopper.modules.catalog.static import load_catalog
from voice_shopper.modules.parsing.vocabulary import ParsingVocabulary
from voice_shopper.modules.shopping.shopping_list import ShoppingList
from voice_shopper.modules.stt.accumulator import TranscriptAccumulator
from voice_shopper.modules.stt.base import (
    RecognitionEngine,
    RecognitionErrorKind,
    RecognitionSessionConfig,
    TranscriptFragment,
)
from voice_shopper.modules.stt.session import RecognitionSession, SessionState, TimeoutReason
from voice_shopper.utils.config import ConfigManager, get_config_manager
from voice_shopper.utils.logger import get_logger

logger = get_logger('orchestrator')

_ERROR_MESSAGES = {
    RecognitionErrorKind.NOT_ALLOWED: "Microphone access was denied.",
    RecognitionErrorKind.NOT_SUPPORTED: "Speech recognition is not supported here.",
    RecognitionErrorKind.NETWORK: "Speech service is unreachable. Check your connection.",
    RecognitionErrorKind.START_FAILED: "Could not start listening.",
}

_TIMEOUT_MESSAGES = {
    TimeoutReason.INACTIVITY: "No speech detected for a while.",
    TimeoutReason.AUTO_STOP: "Listening time limit reached. Start again to add more.",
}


@dataclass
class Notification:
    """Short message for the user (toast, console line)"""
    title: str
    description: str = ""
    variant: str = "default"  # 'default' or 'destructive'


class ListMode(Enum):
    """What the user is doing with the list"""
    ADDING = "adding"      # voice input available
    SHOPPING = "shopping"  # ticking items off, microphone off


class VoiceListOrchestrator:
    """
    Main coordinator for voice and typed list input.

    One session and one accumulator per orchestrator; switching modes
    drives the session to Idle before the mode changes.
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        pipeline: Optional[ItemPipeline] = None,
        shopping_list: Optional[ShoppingList] = None,
        session_config: Optional[RecognitionSessionConfig] = None,
        debounce_ms: int = 500,
        stop_phrases: Optional[Iterable[str]] = None,
        notify: Optional[Callable[[Notification], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self.pipeline = pipeline or ItemPipeline()
        self.shopping_list = shopping_list or ShoppingList(matcher=self.pipeline.matcher)
        self.notify = notify
        self.mode = ListMode.ADDING

        self.session = RecognitionSession(
            engine,
            config=session_config,
            on_result=self._on_transcript,
            on_timeout=self._on_session_timeout,
            on_error=self._on_session_error,
            on_end=self._on_session_end,
            loop=loop
        )
        self.accumulator = TranscriptAccumulator(
            on_flush=self.process_utterance,
            on_stop_phrase=self._on_stop_phrase,
            debounce_ms=debounce_ms,
            stop_phrases=stop_phrases,
            loop=loop
        )

        logger.info(f"Orchestrator ready (engine={engine.__class__.__name__})")

    @classmethod
    def from_config(
        cls,
        config: Optional[ConfigManager] = None,
        engine: Optional[RecognitionEngine] = None,
        catalog_path: Optional[str] = None,
        notify: Optional[Callable[[Notification], None]] = None
    ) -> "VoiceListOrchestrator":
        """Build every collaborator from settings"""
        config = config or get_config_manager()

        recognition = config.section('recognition')
        catalog_config = config.section('catalog')
        accumulator_config = config.section('accumulator')

        vocabulary = ParsingVocabulary.from_dict(config.section('parsing'))
        catalog = load_catalog(
            catalog_path or catalog_config.get('path'),
            score_cutoff=catalog_config.get('score_cutoff', 85)
        )
        logger.info(f"Catalog loaded ({len(catalog)} entries)")

        pipeline = ItemPipeline(
            vocabulary=vocabulary,
            catalog=catalog,
            require_catalog_match=bool(catalog_config.get('require_match', False))
        )

        if engine is None:
            from voice_shopper.modules.stt.google import GoogleRecognitionEngine
            engine = GoogleRecognitionEngine(recognition)

        return cls(
            engine,
            pipeline=pipeline,
            session_config=RecognitionSessionConfig.from_dict(recognition),
            debounce_ms=int(accumulator_config.get('debounce_ms', 500)),
            stop_phrases=accumulator_config.get('stop_phrases') or vocabulary.stop_phrases,
            notify=notify
        )

    # ============================================
    # STATE
    # ============================================

    @property
    def is_listening(self) -> bool:
        return self.session.is_listening

    @property
    def is_supported(self) -> bool:
        return self.session.is_supported

    # ============================================
    # COMMANDS
    # ============================================

    def start_listening(self) -> bool:
        """Start a voice session (adding mode only)"""
        if self.mode is not ListMode.ADDING:
            logger.warning("Voice input is only available in adding mode")
            return False
        self.accumulator.reset()
        return self.session.start()

    def stop_listening(self):
        """Caller stop: release whatever was already heard, then stop"""
        self.accumulator.flush()
        self.session.stop()

    async def switch_mode(self, mode: ListMode):
        """Change mode; an active session reaches Idle first"""
        if mode is self.mode:
            return
        if self.session.state is not SessionState.IDLE:
            self.accumulator.flush()
            await self.session.stop_and_wait()
        logger.info(f"Mode {self.mode.value} -> {mode.value}")
        self.mode = mode

    def submit_text(self, text: str) -> PipelineResult:
        """Typed utterance through the same pipeline as speech"""
        return self.process_utterance(text)

    def process_utterance(self, utterance: str) -> PipelineResult:
        """Parse an utterance, add new items and report the outcome"""
        result = self.pipeline.process(utterance, self.shopping_list.items)
        if result.added_items:
            added, skipped = self.shopping_list.add_items(result.added_items)
            result.added_items = added
            result.duplicates.extend(skipped)

        variant = "destructive" if result.outcome is PipelineOutcome.NONE_RECOGNIZED else "default"
        self._send(Notification(result.summary(), result.description(), variant))
        return result

    async def close(self):
        """Stop listening and release the session"""
        self.accumulator.flush()
        await self.session.stop_and_wait()
        self.accumulator.reset()
        self.session.close()
        logger.info("Orchestrator closed")

    # ============================================
    # SESSION CALLBACKS
    # ============================================

    def _on_transcript(self, fragment: TranscriptFragment):
        self.accumulator.accept(fragment)

    def _on_stop_phrase(self, phrase: str):
        logger.info(f"Stopping on '{phrase}'")
        self.session.stop()
        self._send(Notification("Stopped listening", f'Heard "{phrase}".'))

    def _on_session_timeout(self, reason: TimeoutReason):
        self.accumulator.flush()
        self._send(Notification("Stopped listening", _TIMEOUT_MESSAGES[reason]))

    def _on_session_end(self):
        self.accumulator.flush()

    def _on_session_error(self, kind: RecognitionErrorKind):
        self.accumulator.flush()
        message = _ERROR_MESSAGES.get(kind, f"Speech recognition failed ({kind.value}).")
        self._send(Notification("Voice input error", message, "destructive"))

    def _send(self, notification: Notification):
        logger.debug(f"Notify: {notification.title} - {notification.description}")
        if self.notify is None:
            return
        try:
            self.notify(notification)
        except Exception as e:
            logger.error(f"Notify callback failed: {e}")
