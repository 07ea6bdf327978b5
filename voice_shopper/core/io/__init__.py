"""
I/O Abstraction Layer

Typed-text input sources.
"""

from voice_shopper.core.io.text_input import InputCapabilities, InputResult, TextInput
from voice_shopper.core.io.keyboard_input import KeyboardInput

__all__ = [
    'InputCapabilities',
    'InputResult',
    'TextInput',
    'KeyboardInput'
]
