"""Menu domain module.

Catalog items plus the pure allergen matching and pricing services.
"""
