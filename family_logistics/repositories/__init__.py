"""
Repository Layer Package.

Two generic CRUD engines behind one contract, and the domain
repositories built on them:

- ``BaseRepository``: live Supabase tables.
- ``MockRepository``: tables held in a StorageAdapter (mock mode).

Services never talk to Supabase or the adapter directly.  Wiring lives
in :mod:`family_logistics.repositories.factory`:

    from family_logistics.repositories.factory import create_repositories
"""

from family_logistics.repositories.base_repository import BaseRepository
from family_logistics.repositories.compensation import run_with_compensation
from family_logistics.repositories.errors import to_api_error
from family_logistics.repositories.household_repository import (
    HouseholdRepository,
    InvitationRepository,
    MemberRepository,
)
from family_logistics.repositories.interface import Repository
from family_logistics.repositories.mock_query import MockQueryBuilder
from family_logistics.repositories.mock_repository import MockRepository, MockRpcRegistry
from family_logistics.repositories.shopping_repository import (
    ShoppingItemRepository,
    ShoppingListRepository,
)
from family_logistics.repositories.storage_adapter import (
    InMemoryStorageAdapter,
    SQLiteStorageAdapter,
    StorageAdapter,
)
from family_logistics.repositories.template_repository import (
    TemplateItemRepository,
    TemplateRepository,
)
from family_logistics.repositories.trip_repository import (
    BudgetEntryRepository,
    PackingItemRepository,
    TimelineEventRepository,
    TripDocumentRepository,
    TripMemberRepository,
    TripRepository,
)
from family_logistics.repositories.wishlist_repository import (
    WishlistItemRepository,
    WishlistRepository,
)

__all__ = [
    "BaseRepository",
    "BudgetEntryRepository",
    "HouseholdRepository",
    "InMemoryStorageAdapter",
    "InvitationRepository",
    "MemberRepository",
    "MockQueryBuilder",
    "MockRepository",
    "MockRpcRegistry",
    "PackingItemRepository",
    "Repository",
    "SQLiteStorageAdapter",
    "ShoppingItemRepository",
    "ShoppingListRepository",
    "StorageAdapter",
    "TemplateItemRepository",
    "TemplateRepository",
    "TimelineEventRepository",
    "TripDocumentRepository",
    "TripMemberRepository",
    "TripRepository",
    "WishlistItemRepository",
    "WishlistRepository",
    "run_with_compensation",
    "to_api_error",
]
