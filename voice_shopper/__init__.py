"""Voice Shopper - speech and typed text to a deduplicated shopping list"""

__version__ = "1.0.0"
