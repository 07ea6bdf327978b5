"""Feature modules: speech, parsing, catalog, shopping list"""
