"""
Family Logistics data-access package.

Households, members, shopping lists, wishlists, trips and packing
templates backed either by a live Supabase project or by a local
StorageAdapter ("mock mode").  Application code talks to the domain
repositories and services only; which backend sits underneath is decided
once at start-up (see :mod:`family_logistics.backend`).
"""

__version__ = "0.4.0"
