"""
Keyboard Input - Typed utterances
"""

import time
from typing import Callable, Optional

from voice_shopper.core.io.text_input import InputCapabilities, InputResult, TextInput
from voice_shopper.utils.logger import get_logger

logger = get_logger('io.keyboard_input')


class KeyboardInput(TextInput):
    """Keyboard text input (no hardware needed)"""

    def __init__(self, prompt: str = "> ", reader: Optional[Callable[[str], str]] = None):
        """
        Initialize keyboard input.

        Args:
            prompt: Prompt to show user
            reader: line reader, input() when None
        """
        self.prompt = prompt
        self._reader = reader
        logger.info("KeyboardInput initialized")

    def read(self) -> InputResult:
        """Get one line from the keyboard"""
        start_time = time.time()

        try:
            text = (self._reader or input)(self.prompt)
            return InputResult(
                text=text.strip(),
                duration_ms=(time.time() - start_time) * 1000,
                source='keyboard'
            )

        except EOFError:
            # Ctrl+D pressed
            return InputResult(
                text="",
                duration_ms=(time.time() - start_time) * 1000,
                source='keyboard',
                closed=True
            )

    def get_capabilities(self) -> InputCapabilities:
        return InputCapabilities(
            interactive=True,
            requires_network=False,
            input_type='text'
        )
