"""
Speech Recognition Module - Base Interface

Abstracts the platform's continuous speech-recognition capability as an
event emitter: control primitives (start/stop/abort) plus result, error,
end and audioend events delivered to a single listener.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

DEFAULT_STOP_SCHEDULE_MS: Tuple[int, ...] = (0, 25, 50, 75, 100, 150, 200, 300)


class RecognitionErrorKind(Enum):
    """Error kinds reported by a recognition engine"""
    NO_SPEECH = "no-speech"
    ABORTED = "aborted"
    NETWORK = "network"
    NOT_ALLOWED = "not-allowed"
    NOT_SUPPORTED = "not-supported"
    START_FAILED = "start-failed"
    OTHER = "other"
    
    @classmethod
    def from_value(cls, value) -> "RecognitionErrorKind":
        """Map an engine error string (or kind) to a known kind, else OTHER"""
        if isinstance(value, cls):
            return value
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.OTHER
    
    @property
    def is_fatal(self) -> bool:
        """no-speech and aborted are expected during normal operation"""
        return self not in (RecognitionErrorKind.NO_SPEECH, RecognitionErrorKind.ABORTED)


@dataclass(frozen=True)
class RecognitionSessionConfig:
    """
    Immutable configuration for one recognition session.
    
    Changing behavior means creating a new session.
    """
    continuous: bool = True
    interim_results: bool = True
    language: str = "en-US"
    inactivity_timeout_ms: int = 3000   # 0 = disabled
    auto_stop_ms: int = 8000            # 0 = disabled
    restart_delay_ms: int = 100
    stop_schedule_ms: Tuple[int, ...] = field(default=DEFAULT_STOP_SCHEDULE_MS)
    
    def __post_init__(self):
        if self.inactivity_timeout_ms < 0:
            raise ValueError("inactivity_timeout_ms must be non-negative")
        if self.auto_stop_ms < 0:
            raise ValueError("auto_stop_ms must be non-negative")
        if self.restart_delay_ms < 0:
            raise ValueError("restart_delay_ms must be non-negative")
        schedule = tuple(sorted(int(d) for d in self.stop_schedule_ms))
        if not schedule:
            raise ValueError("stop_schedule_ms needs at least one attempt")
        if schedule[0] < 0:
            raise ValueError("stop_schedule_ms delays must be non-negative")
        object.__setattr__(self, 'stop_schedule_ms', schedule)
    
    @property
    def stop_window_ms(self) -> int:
        """Time after stop() by which the session is guaranteed Idle"""
        return self.stop_schedule_ms[-1]
    
    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "RecognitionSessionConfig":
        """Build from the 'recognition' config section"""
        return cls(
            continuous=config.get('continuous', True),
            interim_results=config.get('interim_results', True),
            language=config.get('language', 'en-US'),
            inactivity_timeout_ms=int(config.get('inactivity_timeout_ms', 3000)),
            auto_stop_ms=int(config.get('auto_stop_ms', 8000)),
            restart_delay_ms=int(config.get('restart_delay_ms', 100)),
            stop_schedule_ms=tuple(config.get('stop_schedule_ms', DEFAULT_STOP_SCHEDULE_MS))
        )


@dataclass(frozen=True)
class RecognitionAlternative:
    """One recognized chunk of a result event"""
    transcript: str
    is_final: bool
    confidence: float = 1.0


@dataclass(frozen=True)
class TranscriptFragment:
    """Transcript text emitted by a session"""
    text: str
    is_final: bool


class RecognitionListener(ABC):
    """Receiver of engine events (implemented by RecognitionSession)"""
    
    @abstractmethod
    def on_engine_result(self, alternatives: Sequence[RecognitionAlternative]):
        pass
    
    @abstractmethod
    def on_engine_error(self, kind: str):
        pass
    
    @abstractmethod
    def on_engine_end(self):
        pass
    
    @abstractmethod
    def on_engine_audioend(self):
        pass


class RecognitionEngine(ABC):
    """
    Base interface for platform speech-recognition engines.
    
    Engines make no promise of synchronous or single-shot termination:
    stop() may be ignored, end may arrive late or more than once. The
    session layer is responsible for guaranteeing termination.
    
    Events are delivered to the attached listener on the event loop.
    Engines that recognize on a worker thread must bind a loop so
    events are marshalled with call_soon_threadsafe.
    """
    
    def __init__(self, language: str = "en-US"):
        self.language = language
        self._listener: Optional[RecognitionListener] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
    
    @property
    @abstractmethod
    def is_supported(self) -> bool:
        """Whether recognition can run on this platform"""
        pass
    
    @abstractmethod
    def start(self):
        """Begin recognition. May raise if already started."""
        pass
    
    @abstractmethod
    def stop(self):
        """Ask recognition to end after the current phrase"""
        pass
    
    @abstractmethod
    def abort(self):
        """End recognition immediately, discarding pending audio"""
        pass
    
    def calibrate(self):
        """Prepare the input device before listening (blocking, optional)"""
        pass
    
    def attach(self, listener: Optional[RecognitionListener]):
        """Attach (or detach with None) the event listener"""
        self._listener = listener
    
    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]):
        """Deliver events on this loop (thread-safe)"""
        self._loop = loop
    
    # ============================================
    # EVENT EMISSION
    # ============================================
    
    def _emit(self, handler_name: str, *args):
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._deliver, handler_name, args)
        else:
            self._deliver(handler_name, args)
    
    def _deliver(self, handler_name: str, args: tuple):
        listener = self._listener
        if listener is not None:
            getattr(listener, handler_name)(*args)
    
    def emit_result(self, alternatives: Sequence[RecognitionAlternative]):
        self._emit('on_engine_result', list(alternatives))
    
    def emit_error(self, kind: str):
        self._emit('on_engine_error', kind)
    
    def emit_end(self):
        self._emit('on_engine_end')
    
    def emit_audioend(self):
        self._emit('on_engine_audioend')
