"""
Transcript Accumulator

Buffers final transcript fragments and releases them as one utterance
after a quiet period, so word-by-word engine output becomes multi-item
bursts. Stop phrases ("that's it", "done", ...) flush immediately and
ask the owner to stop listening.
"""

import asyncio
import re
from typing import Callable, Iterable, List, Optional

from voice_shopper.modules.parsing.vocabulary import DEFAULT_VOCABULARY
from voice_shopper.modules.stt.base import TranscriptFragment
from voice_shopper.utils.logger import get_logger

logger = get_logger('stt.accumulator')

_APOSTROPHES = "’'`"


def _phrase_regex(phrase: str) -> str:
    """Words joined by any whitespace; apostrophes optional"""
    words = []
    for word in phrase.split():
        parts = [re.escape(c) if c not in _APOSTROPHES else f"[{_APOSTROPHES}]?" for c in word]
        words.append("".join(parts))
    return r"\s+".join(words)


def _stop_phrase_pattern(phrases: Iterable[str]) -> Optional[re.Pattern]:
    # Longest first so "i'm done" wins over "done"
    unique = sorted({p.lower().strip() for p in phrases if p.strip()}, key=len, reverse=True)
    if not unique:
        return None
    alternatives = "|".join(_phrase_regex(p) for p in unique)
    return re.compile(r"(?<!\w)(?:" + alternatives + r")(?!\w)", re.IGNORECASE)


class TranscriptAccumulator:
    """
    Debounces final fragments into utterances.

    Args:
        on_flush: receives each released utterance
        on_stop_phrase: called (with the matched phrase) when a stop
            phrase is heard, after any buffered text was flushed
        debounce_ms: quiet period before the buffer is released
        stop_phrases: phrases that end the session
    """

    def __init__(
        self,
        on_flush: Callable[[str], None],
        on_stop_phrase: Optional[Callable[[str], None]] = None,
        debounce_ms: int = 500,
        stop_phrases: Optional[Iterable[str]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        if debounce_ms < 0:
            raise ValueError("debounce_ms must be non-negative")

        self.on_flush = on_flush
        self.on_stop_phrase = on_stop_phrase
        self.debounce_ms = debounce_ms
        if stop_phrases is None:
            stop_phrases = DEFAULT_VOCABULARY.stop_phrases
        self.stop_phrases = tuple(stop_phrases)
        self._stop_pattern = _stop_phrase_pattern(self.stop_phrases)

        self._loop = loop
        self._buffer: List[str] = []
        self._debounce_handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending_text(self) -> str:
        return " ".join(self._buffer)

    @property
    def has_pending(self) -> bool:
        return bool(self._buffer)

    def accept(self, fragment: TranscriptFragment) -> bool:
        """Feed a fragment emitted by a RecognitionSession"""
        return self.feed(fragment.text, fragment.is_final)

    def feed(self, text: str, is_final: bool) -> bool:
        """
        Feed one transcript fragment.

        Returns:
            True if a stop phrase was detected
        """
        if not text or not text.strip():
            return False

        match = self._find_stop_phrase(text)
        if match is not None:
            phrase, prefix = match
            logger.info(f"Stop phrase heard: '{phrase}'")
            # Text spoken before the stop phrase still counts
            self._append(prefix)
            self.flush()
            if self.on_stop_phrase is not None:
                self.on_stop_phrase(phrase)
            return True

        if is_final:
            self._append(text)
            self._schedule_flush()

        return False

    def flush(self):
        """Release the buffer now (no-op when empty)"""
        self._cancel_debounce()
        utterance = self.pending_text
        self._buffer = []
        if utterance:
            logger.debug(f"Releasing utterance: '{utterance}'")
            self.on_flush(utterance)

    def reset(self):
        """Drop the buffer without releasing it"""
        self._cancel_debounce()
        self._buffer = []

    def _find_stop_phrase(self, text: str):
        if self._stop_pattern is None:
            return None
        match = self._stop_pattern.search(text)
        if match is None:
            return None
        return match.group(0).lower(), text[:match.start()]

    def _append(self, text: str):
        cleaned = " ".join(text.split())
        if cleaned:
            self._buffer.append(cleaned)

    def _schedule_flush(self):
        self._cancel_debounce()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._debounce_handle = self._loop.call_later(self.debounce_ms / 1000, self._on_quiet)

    def _on_quiet(self):
        self._debounce_handle = None
        self.flush()

    def _cancel_debounce(self):
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
