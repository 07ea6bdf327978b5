"""
Speech Recognition

Engine interface, session state machine and transcript accumulation.
The SpeechRecognition-backed engine lives in modules.stt.google.
"""

from voice_shopper.modules.stt.base import (
    DEFAULT_STOP_SCHEDULE_MS,
    RecognitionAlternative,
    RecognitionEngine,
    RecognitionErrorKind,
    RecognitionListener,
    RecognitionSessionConfig,
    TranscriptFragment,
)
from voice_shopper.modules.stt.session import RecognitionSession, SessionState, TimeoutReason
from voice_shopper.modules.stt.accumulator import TranscriptAccumulator

__all__ = [
    'DEFAULT_STOP_SCHEDULE_MS',
    'RecognitionAlternative',
    'RecognitionEngine',
    'RecognitionErrorKind',
    'RecognitionListener',
    'RecognitionSessionConfig',
    'TranscriptFragment',
    'RecognitionSession',
    'SessionState',
    'TimeoutReason',
    'TranscriptAccumulator'
]
