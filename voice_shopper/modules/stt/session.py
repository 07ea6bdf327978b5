"""
Recognition Session - State Machine

Wraps a RecognitionEngine in an explicit Idle -> Listening -> Stopping
-> Idle lifecycle.

Key guarantees:
- No restart ever happens after stop() has been called
- stop() is idempotent and always reaches Idle within the stop window;
  abort attempts run out the whole window even after an early end event
- Only fatal engine errors reach the caller, exactly once per session

Every timer and engine-event handler re-checks the session generation,
state and manual-stop flag at the moment it acts, not when it was
scheduled.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional, Sequence

from voice_shopper.modules.stt.base import (
    RecognitionAlternative,
    RecognitionEngine,
    RecognitionErrorKind,
    RecognitionListener,
    RecognitionSessionConfig,
    TranscriptFragment,
)
from voice_shopper.utils.logger import get_logger

logger = get_logger('stt.session')


class SessionState(Enum):
    """Lifecycle states of a recognition session"""
    IDLE = "idle"
    LISTENING = "listening"
    STOPPING = "stopping"


class TimeoutReason(Enum):
    """Which timer ended the session"""
    INACTIVITY = "inactivity"   # no results for inactivity_timeout_ms
    AUTO_STOP = "auto-stop"     # auto_stop_ms ceiling since start()


class RecognitionSession(RecognitionListener):
    """
    One listening session over a recognition engine.

    All methods must be called from the event loop thread. Timers are
    owned by the session; sessions never share timer or flag state.

    Callbacks:
        on_result(fragment): TranscriptFragment with text from the engine
        on_timeout(reason): session was force-terminated by a timer
        on_error(kind): fatal error, session is now Idle
        on_end(): session ended without a caller-initiated stop
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        config: Optional[RecognitionSessionConfig] = None,
        on_result: Optional[Callable[[TranscriptFragment], None]] = None,
        on_timeout: Optional[Callable[[TimeoutReason], None]] = None,
        on_error: Optional[Callable[[RecognitionErrorKind], None]] = None,
        on_end: Optional[Callable[[], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self.engine = engine
        self.config = config or RecognitionSessionConfig()

        self._on_result = on_result
        self._on_timeout = on_timeout
        self._on_error = on_error
        self._on_end = on_end

        self._loop = loop
        self._state = SessionState.IDLE
        self._manual_stop = False
        self._generation = 0
        self._terminating = False
        self._closed = False

        self._transcript = ""
        self._final_transcript = ""

        self._inactivity_handle: Optional[asyncio.TimerHandle] = None
        self._ceiling_handle: Optional[asyncio.TimerHandle] = None
        self._restart_handle: Optional[asyncio.TimerHandle] = None
        self._termination_handles: List[asyncio.TimerHandle] = []

        self._idle_event = asyncio.Event()
        self._idle_event.set()

        self.engine.attach(self)
        logger.debug(
            f"Session created (continuous={self.config.continuous}, "
            f"inactivity={self.config.inactivity_timeout_ms}ms, "
            f"ceiling={self.config.auto_stop_ms}ms)"
        )

    # ============================================
    # READABLE STATE
    # ============================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state is SessionState.LISTENING

    @property
    def is_supported(self) -> bool:
        return self.engine.is_supported

    @property
    def transcript(self) -> str:
        """Latest interim transcript"""
        return self._transcript

    @property
    def final_transcript(self) -> str:
        """All final text received since start()"""
        return self._final_transcript

    def reset_transcript(self):
        self._transcript = ""
        self._final_transcript = ""

    # ============================================
    # COMMANDS
    # ============================================

    def start(self) -> bool:
        """
        Start listening. Valid only from Idle.

        Returns:
            True if the engine was started
        """
        if self._closed:
            logger.warning("start() called on a closed session")
            return False

        if not self.engine.is_supported:
            logger.error("Speech recognition is not supported on this platform")
            self._notify(self._on_error, RecognitionErrorKind.NOT_SUPPORTED)
            return False

        if self._state is not SessionState.IDLE:
            logger.warning(f"start() ignored, session is {self._state.value}")
            return False

        self._get_loop()
        self._cancel_termination()
        self._generation += 1
        self._manual_stop = False
        self.reset_transcript()
        self._set_state(SessionState.LISTENING)

        try:
            self.engine.start()
        except Exception as e:
            logger.error(f"Failed to start speech recognition: {e}")
            self._enter_idle()
            self._notify(self._on_error, RecognitionErrorKind.START_FAILED)
            return False

        self._arm_ceiling()
        logger.info(f"Listening started (session #{self._generation})")
        return True

    def stop(self):
        """
        Caller-initiated stop. Idempotent.

        Sets the manual-stop flag, moves to Stopping and aborts the engine
        repeatedly across the stop window; Idle is guaranteed once the
        window has elapsed.
        """
        if self._state is SessionState.IDLE:
            logger.debug("stop() on idle session")
            return

        self._manual_stop = True

        if self._terminating:
            logger.debug("stop() while already terminating")
            return

        logger.info("Stopping session")
        self._set_state(SessionState.STOPPING)
        self._clear_timers()
        self._begin_termination()

    async def stop_and_wait(self):
        """Stop and return once the session is Idle"""
        self.stop()
        if self._state is not SessionState.IDLE:
            await self._idle_event.wait()

    async def wait_idle(self):
        """Wait until the session reaches Idle"""
        await self._idle_event.wait()

    def close(self):
        """Tear the session down: stop, cancel every timer, detach"""
        if self._closed:
            return

        if self._state is not SessionState.IDLE:
            self._manual_stop = True
            self._abort_engine()
            self._enter_idle()

        self._clear_timers()
        self._cancel_termination()
        self.engine.attach(None)
        self._closed = True
        logger.debug("Session closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop_and_wait()
        self.close()

    # ============================================
    # ENGINE EVENTS
    # ============================================

    def on_engine_result(self, alternatives: Sequence[RecognitionAlternative]):
        if self._state is not SessionState.LISTENING or self._manual_stop:
            logger.debug(f"Dropping result while {self._state.value}")
            return

        self._arm_inactivity()

        final_text = "".join(a.transcript for a in alternatives if a.is_final)
        interim_text = "".join(a.transcript for a in alternatives if not a.is_final)

        if final_text:
            self._final_transcript += final_text
            self._notify(self._on_result, TranscriptFragment(final_text, True))

        # The final callback may have stopped us
        if interim_text and self.config.interim_results and self.is_listening:
            self._transcript = interim_text
            self._notify(self._on_result, TranscriptFragment(interim_text, False))

    def on_engine_error(self, kind: str):
        error_kind = RecognitionErrorKind.from_value(kind)

        if not error_kind.is_fatal:
            logger.debug(f"Ignoring non-fatal recognition error: {error_kind.value}")
            return

        if self._state is SessionState.IDLE:
            logger.debug(f"Ignoring error after idle: {kind}")
            return

        logger.error(f"Speech recognition error: {kind}")
        notify = not self._manual_stop

        self._manual_stop = True
        self._abort_engine()
        self._enter_idle()

        if notify:
            self._notify(self._on_error, error_kind)

    def on_engine_end(self):
        self._handle_engine_termination('end')

    def on_engine_audioend(self):
        self._handle_engine_termination('audioend')

    def _handle_engine_termination(self, event: str):
        if self._state is SessionState.IDLE:
            logger.debug(f"Ignoring {event} while idle")
            return

        if self._manual_stop or self._state is SessionState.STOPPING:
            # audioend alone does not prove the engine has finished
            if event == 'end':
                self._complete_termination()
            return

        if self.config.continuous:
            self._schedule_restart(event)
        elif event == 'end':
            self._complete_termination()

    # ============================================
    # TIMERS
    # ============================================

    def _arm_inactivity(self):
        self._cancel_handle('_inactivity_handle')
        timeout_ms = self.config.inactivity_timeout_ms
        if timeout_ms > 0:
            self._inactivity_handle = self._get_loop().call_later(
                timeout_ms / 1000, self._on_timer_fired, self._generation, TimeoutReason.INACTIVITY
            )

    def _arm_ceiling(self):
        self._cancel_handle('_ceiling_handle')
        ceiling_ms = self.config.auto_stop_ms
        if ceiling_ms > 0:
            self._ceiling_handle = self._get_loop().call_later(
                ceiling_ms / 1000, self._on_timer_fired, self._generation, TimeoutReason.AUTO_STOP
            )

    def _on_timer_fired(self, generation: int, reason: TimeoutReason):
        if reason is TimeoutReason.INACTIVITY:
            self._inactivity_handle = None
        else:
            self._ceiling_handle = None

        if (
            generation != self._generation
            or self._state is not SessionState.LISTENING
            or self._manual_stop
        ):
            return

        logger.info(f"Session timed out ({reason.value})")
        self._set_state(SessionState.STOPPING)
        self._clear_timers()
        self._notify(self._on_timeout, reason)

        # on_timeout may already have called stop()
        if not self._terminating and self._state is not SessionState.IDLE:
            self._begin_termination()

    def _schedule_restart(self, event: str):
        if self._restart_handle is not None:
            return
        logger.debug(f"Engine sent {event} while listening, scheduling restart")
        self._restart_handle = self._get_loop().call_later(
            self.config.restart_delay_ms / 1000, self._restart, self._generation
        )

    def _restart(self, generation: int):
        self._restart_handle = None

        if (
            generation != self._generation
            or self._state is not SessionState.LISTENING
            or self._manual_stop
        ):
            logger.debug("Restart suppressed")
            return

        try:
            self.engine.start()
            logger.info("Recognition restarted")
        except Exception as e:
            logger.debug(f"Restart skipped: {e}")

    def _clear_timers(self):
        self._cancel_handle('_inactivity_handle')
        self._cancel_handle('_ceiling_handle')
        self._cancel_handle('_restart_handle')

    def _cancel_handle(self, attr: str):
        handle = getattr(self, attr)
        if handle is not None:
            handle.cancel()
            setattr(self, attr, None)

    # ============================================
    # TERMINATION
    # ============================================

    def _begin_termination(self):
        """Abort now and at every delay of the stop schedule"""
        self._terminating = True
        generation = self._generation
        loop = self._get_loop()

        self._termination_handles = []
        for delay_ms in self.config.stop_schedule_ms:
            if delay_ms == 0:
                self._termination_attempt(generation)
            else:
                self._termination_handles.append(
                    loop.call_later(delay_ms / 1000, self._termination_attempt, generation)
                )

        self._termination_handles.append(
            loop.call_later(
                self.config.stop_window_ms / 1000, self._finish_termination, generation
            )
        )

    def _termination_attempt(self, generation: int):
        if generation != self._generation:
            return
        logger.debug("Stop attempt")
        self._abort_engine()

    def _finish_termination(self, generation: int):
        if generation != self._generation:
            return

        self._termination_handles = []
        self._terminating = False

        if self._state is not SessionState.IDLE:
            logger.debug("Stop window elapsed without end event, forcing idle")
            self._complete_termination()

    def _complete_termination(self):
        was_manual = self._manual_stop
        # Remaining stop attempts keep aborting until the window closes;
        # start() cancels them and bumps the generation.
        self._terminating = False
        self._enter_idle()
        logger.info("Listening ended" + (" (stopped by caller)" if was_manual else ""))
        if not was_manual:
            self._notify(self._on_end)

    def _cancel_termination(self):
        for handle in self._termination_handles:
            handle.cancel()
        self._termination_handles = []
        self._terminating = False

    def _abort_engine(self):
        """abort() is preferred; stop() is the fallback"""
        try:
            self.engine.abort()
        except Exception as e:
            logger.debug(f"abort() failed ({e}), trying stop()")
            try:
                self.engine.stop()
            except Exception as stop_error:
                logger.warning(f"Failed to stop speech recognition: {stop_error}")

    # ============================================
    # HELPERS
    # ============================================

    def _enter_idle(self):
        self._clear_timers()
        self._manual_stop = False
        self._set_state(SessionState.IDLE)

    def _set_state(self, new_state: SessionState):
        if new_state is self._state:
            return
        logger.debug(f"State {self._state.value} -> {new_state.value}")
        self._state = new_state
        if new_state is SessionState.IDLE:
            self._idle_event.set()
        else:
            self._idle_event.clear()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _notify(self, callback: Optional[Callable], *args):
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Session callback {getattr(callback, '__name__', callback)} failed: {e}")
