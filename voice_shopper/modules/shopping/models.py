"""
Shopping Models

ShoppingItem plus id generation and display formatting.
"""

import random
import re
import string
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

_ID_ALPHABET = string.digits + string.ascii_lowercase
_LEADING_NUMBER = re.compile(r'^\s*(\d+(?:\.\d+)?|\.\d+)')


def generate_id() -> str:
    """Timestamp + random base36 suffix, unique within a list"""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def format_quantity(quantity: Optional[float]) -> str:
    """2.0 -> '2', 1.5 -> '1.5'"""
    if quantity is None:
        return ""
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def parse_quantity_text(text: Optional[str]) -> Optional[float]:
    """
    Parse a typed quantity from its leading number ('2', '1.5', '2 cups').

    Blank, non-numeric or non-positive -> None
    """
    if text is None:
        return None
    match = _LEADING_NUMBER.match(str(text))
    if not match:
        return None
    value = float(match.group(1))
    if value <= 0:
        return None
    return int(value) if value.is_integer() else value


def normalize_unit(unit: Optional[str]) -> Optional[str]:
    """'' and 'none' mean no unit"""
    if unit is None:
        return None
    unit = unit.strip()
    if not unit or unit.lower() == 'none':
        return None
    return unit


@dataclass
class ShoppingItem:
    """One entry of a shopping list"""
    id: str
    name: str
    completed: bool = False
    quantity: Optional[float] = None
    unit: Optional[str] = None
    
    def __post_init__(self):
        if self.quantity is not None and self.quantity <= 0:
            self.quantity = None
    
    @classmethod
    def create(
        cls,
        name: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None
    ) -> "ShoppingItem":
        """New, not completed item with a fresh id"""
        return cls(id=generate_id(), name=name, quantity=quantity, unit=normalize_unit(unit))
    
    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison used for deduplication"""
        return self.name.lower() == (name or "").lower()
    
    def describe(self) -> str:
        """
        Short display string.
        
        '1.5 lb Chicken', '2x Apples', 'Milk'
        """
        if self.quantity is None:
            return self.name
        if self.unit:
            return f"{format_quantity(self.quantity)} {self.unit} {self.name}"
        return f"{format_quantity(self.quantity)}x {self.name}"
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the persistence collaborator"""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShoppingItem":
        return cls(
            id=str(data.get('id') or generate_id()),
            name=str(data.get('name', '')),
            completed=bool(data.get('completed', False)),
            quantity=data.get('quantity'),
            unit=normalize_unit(data.get('unit'))
        )
