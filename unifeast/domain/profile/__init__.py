"""Profile domain module.

Canonical dietary/allergen profile, its value objects, the store port and
the schema normalizer that maps both backend shapes onto one record.
"""
