"""
Shared test helpers

FakeEngine stands in for the platform recognizer: it records every
control call and lets a test push result/error/end/audioend events.
"""

import pytest

from voice_shopper.modules.stt.base import RecognitionAlternative, RecognitionEngine


class FakeEngine(RecognitionEngine):
    """Recognition engine driven by the test"""

    def __init__(self, supported: bool = True):
        super().__init__()
        self.supported = supported
        self.calls = []
        self.start_error = None
        self.abort_error = None

    @property
    def is_supported(self) -> bool:
        return self.supported

    def start(self):
        self.calls.append('start')
        if self.start_error is not None:
            raise self.start_error

    def stop(self):
        self.calls.append('stop')

    def abort(self):
        self.calls.append('abort')
        if self.abort_error is not None:
            raise self.abort_error

    def count(self, call: str) -> int:
        return self.calls.count(call)

    def say(self, text: str, is_final: bool = True):
        self.emit_result([RecognitionAlternative(transcript=text, is_final=is_final)])


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def unsupported_engine():
    return FakeEngine(supported=False)
