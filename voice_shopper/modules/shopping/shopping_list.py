"""
Shopping List

The live list: voice-parsed batches, manual entry, recipe ingredients,
completion toggling, edits, removal and clearing. Names are unique
case-insensitively across the list.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from voice_shopper.modules.catalog.matcher import FuzzyCatalogMatcher, capitalize_first
from voice_shopper.modules.shopping.models import (
    ShoppingItem,
    normalize_unit,
    parse_quantity_text,
)
from voice_shopper.utils.logger import get_logger

logger = get_logger('shopping.list')


@dataclass
class ListResult:
    """Outcome of a list operation, ready to show the user"""
    success: bool
    title: str
    message: str = ""
    item: Optional[ShoppingItem] = None


class ShoppingList:
    """
    Ordered, deduplicated list of ShoppingItem.
    
    Persistence is someone else's job: use to_dicts()/from_dicts().
    """
    
    def __init__(
        self,
        items: Optional[Iterable[ShoppingItem]] = None,
        matcher: Optional[FuzzyCatalogMatcher] = None
    ):
        self._items: List[ShoppingItem] = list(items or [])
        self.matcher = matcher or FuzzyCatalogMatcher()
    
    # ============================================
    # QUERIES
    # ============================================
    
    @property
    def items(self) -> List[ShoppingItem]:
        return list(self._items)
    
    def __len__(self) -> int:
        return len(self._items)
    
    def __iter__(self) -> Iterator[ShoppingItem]:
        return iter(list(self._items))
    
    def get(self, item_id: str) -> Optional[ShoppingItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None
    
    def contains_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            item.matches_name(name) and item.id != exclude_id
            for item in self._items
        )
    
    def all_completed(self) -> bool:
        return bool(self._items) and all(item.completed for item in self._items)
    
    # ============================================
    # ADDING
    # ============================================
    
    def add_items(self, items: Sequence[ShoppingItem]) -> Tuple[List[ShoppingItem], List[ShoppingItem]]:
        """
        Append items whose names are not on the list yet.
        
        Returns:
            (added, skipped_duplicates)
        """
        added, skipped = [], []
        for item in items:
            if self.contains_name(item.name):
                skipped.append(item)
                continue
            self._items.append(item)
            added.append(item)
        
        if added:
            logger.info(f"Added {len(added)} item(s): {', '.join(i.describe() for i in added)}")
        return added, skipped
    
    def add_raw(self, text: str) -> ListResult:
        """Add exact text (first letter capitalized), no parsing or matching"""
        trimmed = (text or "").strip()
        if not trimmed:
            return ListResult(False, "Cannot Add", "Item name cannot be empty.")
        
        display_name = capitalize_first(trimmed)
        if self.contains_name(display_name):
            return ListResult(False, "Item Already Exists", f'"{display_name}" is already in your list.')
        
        item = ShoppingItem.create(display_name)
        self._items.append(item)
        logger.info(f"Added raw item '{display_name}'")
        return ListResult(True, "Item Added", f'Added "{display_name}" to your list.', item)
    
    def add_manual(
        self,
        name: str,
        quantity: Optional[str] = None,
        unit: Optional[str] = None
    ) -> ListResult:
        """
        Add a typed item with optional quantity and unit.
        
        The name goes through the catalog matcher; quantity text that is
        not a positive number is ignored.
        """
        if not (name or "").strip():
            return ListResult(False, "Cannot Add", "Item name cannot be empty.")
        
        display_name = self.matcher.match(name)
        if self.contains_name(display_name):
            return ListResult(False, "Item Already Exists", f'"{display_name}" is already in your list.')
        
        item = ShoppingItem.create(display_name, parse_quantity_text(quantity), unit)
        self._items.append(item)
        logger.info(f"Added manual item '{item.describe()}'")
        return ListResult(True, "Item Added", item.describe(), item)
    
    def add_recipe_ingredients(self, ingredients: Iterable[dict]) -> ListResult:
        """
        Add recipe ingredients ({name, quantity, unit}) not already listed.
        """
        candidates = []
        for ingredient in ingredients:
            name = str(ingredient.get('name') or '').strip()
            if not name:
                continue
            quantity = ingredient.get('quantity')
            candidates.append(ShoppingItem.create(
                self.matcher.match(name),
                parse_quantity_text(None if quantity is None else str(quantity)),
                ingredient.get('unit')
            ))
        
        # Duplicates inside the recipe collapse too
        added, _ = self.add_items(candidates)
        if not added:
            return ListResult(False, "Nothing Added", "All ingredients are already in your list.")
        
        plural = "s" if len(added) > 1 else ""
        return ListResult(
            True,
            f"Added {len(added)} ingredient{plural}",
            ", ".join(item.describe() for item in added)
        )
    
    # ============================================
    # EDITING
    # ============================================
    
    def toggle(self, item_id: str) -> ListResult:
        item = self.get(item_id)
        if item is None:
            return ListResult(False, "Item Not Found", f"No item with id {item_id}.")
        item.completed = not item.completed
        return ListResult(True, "Item Updated", item.name, item)
    
    def remove(self, item_id: str) -> ListResult:
        item = self.get(item_id)
        if item is None:
            return ListResult(False, "Item Not Found", f"No item with id {item_id}.")
        self._items.remove(item)
        logger.info(f"Removed '{item.name}'")
        return ListResult(True, "Item Removed", item.name, item)
    
    def edit(
        self,
        item_id: str,
        name: str,
        quantity: Optional[str] = None,
        unit: Optional[str] = None
    ) -> ListResult:
        """Rename an item and replace its quantity/unit"""
        item = self.get(item_id)
        if item is None:
            return ListResult(False, "Item Not Found", f"No item with id {item_id}.")
        
        trimmed = (name or "").strip()
        if not trimmed:
            return ListResult(False, "Cannot Save", "Item name cannot be empty.")
        
        display_name = capitalize_first(trimmed)
        if self.contains_name(display_name, exclude_id=item_id):
            return ListResult(False, "Item Already Exists", f'"{display_name}" is already in your list.')
        
        item.name = display_name
        item.quantity = parse_quantity_text(quantity)
        item.unit = normalize_unit(unit)
        return ListResult(True, "Item Updated", f'Changed to "{display_name}".', item)
    
    def clear(self):
        self._items = []
        logger.info("List cleared")
    
    # ============================================
    # SERIALIZATION
    # ============================================
    
    def to_dicts(self) -> List[dict]:
        return [item.to_dict() for item in self._items]
    
    @classmethod
    def from_dicts(
        cls,
        data: Iterable[dict],
        matcher: Optional[FuzzyCatalogMatcher] = None
    ) -> "ShoppingList":
        return cls([ShoppingItem.from_dict(d) for d in data], matcher=matcher)
