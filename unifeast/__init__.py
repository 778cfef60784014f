"""UniFeast profile core.

Reconciles a user's dietary/allergen profile across the primary GraphQL
data store and the secondary key-value store, flags menu items that may
conflict with the user's allergens, and resolves identity-tiered prices.
"""

__version__ = "0.1.0"
