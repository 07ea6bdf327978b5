"""
Text Input Abstraction

Abstract interface for typed utterance sources (keyboard, file, socket).
Spoken input goes through RecognitionSession instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class InputCapabilities:
    """Describes what an input source can do"""
    interactive: bool = False
    requires_network: bool = False
    input_type: str = "unknown"  # 'text', 'file', 'network'


@dataclass
class InputResult:
    """One utterance read from an input source"""
    text: str
    duration_ms: float = 0.0
    source: str = "unknown"
    closed: bool = False  # source is exhausted (EOF)

    def is_empty(self) -> bool:
        """Check if no input received"""
        return not self.text or self.text.strip() == ""


class TextInput(ABC):
    """Abstract interface for typed utterances"""

    @abstractmethod
    def read(self) -> InputResult:
        """
        Read one utterance (blocking).

        Returns:
            InputResult; closed=True once the source is exhausted
        """
        pass

    @abstractmethod
    def get_capabilities(self) -> InputCapabilities:
        pass

    def is_available(self) -> bool:
        return True
