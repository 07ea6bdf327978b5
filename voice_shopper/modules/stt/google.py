"""
Google Speech Recognition Engine

Continuous recognition with SpeechRecognition's background listener:
the microphone is sampled on a worker thread, each phrase is sent to
Google's recognizer and delivered as one final result.
"""

import asyncio
import threading
from typing import Callable, Optional

import speech_recognition as sr

from voice_shopper.modules.stt.base import (
    RecognitionAlternative,
    RecognitionEngine,
    RecognitionErrorKind,
)
from voice_shopper.utils.logger import get_logger

logger = get_logger('stt.google')


class GoogleRecognitionEngine(RecognitionEngine):
    """Google Speech Recognition implementation"""

    def __init__(self, config: dict):
        super().__init__(config.get('language', 'en-US'))

        self.phrase_time_limit = config.get('phrase_time_limit', 10.0)
        self.ambient_noise_duration = float(config.get('ambient_noise_duration', 1.0))

        self.recognizer = sr.Recognizer()
        self.recognizer.pause_threshold = config.get('pause_threshold', 0.8)
        self.recognizer.energy_threshold = config.get('energy_threshold', 300)

        # Dynamic energy adjustment
        if config.get('dynamic_energy', True):
            self.recognizer.dynamic_energy_threshold = True

        self._stopper: Optional[Callable] = None
        self._accepting = False
        # Bumped per start(); worker threads of older listeners are stale
        self._listen_generation = 0
        self._supported: Optional[bool] = None
        self._lock = threading.Lock()

        logger.info(f"Google recognition engine initialized (language={self.language}, max_phrase={self.phrase_time_limit}s)")

    @property
    def is_supported(self) -> bool:
        """A microphone must be enumerable"""
        if self._supported is None:
            try:
                self._supported = bool(sr.Microphone.list_microphone_names())
            except Exception as e:
                logger.warning(f"Microphone not available: {e}")
                self._supported = False
        return self._supported

    @property
    def is_running(self) -> bool:
        return self._stopper is not None

    def start(self):
        """Open the microphone and begin background listening"""
        if self._stopper is not None:
            raise RuntimeError("Recognition already started")

        try:
            self.bind_loop(asyncio.get_running_loop())
        except RuntimeError:
            self.bind_loop(None)

        with self._lock:
            self._listen_generation += 1
            generation = self._listen_generation

        def on_phrase(recognizer: sr.Recognizer, audio: sr.AudioData):
            self._on_audio(recognizer, audio, generation)

        try:
            source = sr.Microphone()
            self._accepting = True
            self._stopper = self.recognizer.listen_in_background(
                source,
                on_phrase,
                phrase_time_limit=self.phrase_time_limit
            )
        except (OSError, AttributeError) as e:
            # PyAudio missing or microphone access refused
            logger.error(f"Microphone unavailable: {e}")
            self._accepting = False
            self._stopper = None
            self.emit_error(RecognitionErrorKind.NOT_ALLOWED.value)
            self.emit_end()
            return

        logger.debug("Background listening started")

    def stop(self):
        """Stop listening; a phrase already being transcribed is still delivered"""
        self._shutdown(discard=False)

    def abort(self):
        """Stop listening and discard anything in flight"""
        self._shutdown(discard=True)

    def _shutdown(self, discard: bool):
        with self._lock:
            stopper = self._stopper
            self._stopper = None
            if discard:
                self._accepting = False

        if stopper is None:
            return

        try:
            stopper(wait_for_stop=False)
        except Exception as e:
            logger.warning(f"Background listener did not stop cleanly: {e}")

        logger.debug(f"Background listening {'aborted' if discard else 'stopped'}")
        self.emit_audioend()
        self.emit_end()

    # ============================================
    # WORKER THREAD
    # ============================================

    def _is_current(self, generation: int) -> bool:
        return self._accepting and generation == self._listen_generation

    def _on_audio(self, recognizer: sr.Recognizer, audio: sr.AudioData, generation: int):
        """Called by the background listener for each captured phrase"""
        if not self._is_current(generation):
            return

        try:
            text = recognizer.recognize_google(audio, language=self.language)
        except sr.UnknownValueError:
            logger.debug("Could not understand audio")
            self.emit_error(RecognitionErrorKind.NO_SPEECH.value)
            return
        except sr.RequestError as e:
            logger.error(f"Speech recognition error: {e}")
            self.emit_error(RecognitionErrorKind.NETWORK.value)
            return

        # Recognition can outlive an abort() and a later start()
        if not self._is_current(generation) or not text:
            logger.debug("Dropping phrase from a stopped listener")
            return

        logger.debug(f"Recognized: '{text}'")
        self.emit_result([RecognitionAlternative(transcript=text, is_final=True)])

    def calibrate(self):
        """Sample background noise to set the energy threshold"""
        if self.ambient_noise_duration <= 0 or self.is_running:
            return

        logger.info(f"Calibrating microphone for {self.ambient_noise_duration}s of ambient noise")
        try:
            with sr.Microphone() as source:
                self.recognizer.adjust_for_ambient_noise(source, duration=self.ambient_noise_duration)
        except (OSError, AttributeError) as e:
            logger.warning(f"Microphone calibration skipped: {e}")
            return

        logger.info(f"Energy threshold now {self.recognizer.energy_threshold:.0f}")
