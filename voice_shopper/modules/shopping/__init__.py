"""Shopping list and items"""
from voice_shopper.modules.shopping.models import ShoppingItem, generate_id
from voice_shopper.modules.shopping.shopping_list import ListResult, ShoppingList

__all__ = ['ShoppingItem', 'generate_id', 'ListResult', 'ShoppingList']
