"""
Repository Factory.

Single composition root for the data-access layer.  The backend mode is
decided once by :func:`family_logistics.backend.resolve_backend_mode`
and passed in; every domain repository is then built on the matching
generic engine:

- ``LIVE``: one :class:`BaseRepository` per table over the shared
  ``AsyncClient``.
- ``MOCK``: one :class:`MockRepository` per table, all sharing a single
  StorageAdapter, a :class:`MockAuthStore` and the local procedures.
  Table keys use the live table names (``table:households``, ...).
"""

from __future__ import annotations

from typing import Any, Optional, TypedDict

from supabase import AsyncClient

from family_logistics.auth import MockAuthStore
from family_logistics.backend import BackendMode
from family_logistics.logger import StructuredLogger
from family_logistics.models import (
    BudgetEntry,
    Household,
    Invitation,
    Member,
    PackingItem,
    PackingTemplate,
    PackingTemplateItem,
    ShoppingItem,
    ShoppingList,
    TimelineEvent,
    Trip,
    TripDocument,
    TripMember,
    Wishlist,
    WishlistItem,
)
from family_logistics.repositories.base_repository import BaseRepository
from family_logistics.repositories.household_repository import (
    HouseholdRepository,
    InvitationRepository,
    MemberRepository,
)
from family_logistics.repositories.interface import Repository
from family_logistics.repositories.mock_repository import MockRepository, MockRpcRegistry
from family_logistics.repositories.mock_rpc import register_mock_procedures
from family_logistics.repositories.shopping_repository import (
    ShoppingItemRepository,
    ShoppingListRepository,
)
from family_logistics.repositories.storage_adapter import (
    InMemoryStorageAdapter,
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
from family_logistics.utils.timestamps import Clock


class RepositoryContainer(TypedDict):
    """Typed container for every domain repository.

    ``mock_auth`` is the local session store in mock mode and ``None``
    against the live backend.
    """

    households: HouseholdRepository
    members: MemberRepository
    invitations: InvitationRepository
    shopping_lists: ShoppingListRepository
    shopping_items: ShoppingItemRepository
    wishlists: WishlistRepository
    wishlist_items: WishlistItemRepository
    trips: TripRepository
    trip_members: TripMemberRepository
    packing_items: PackingItemRepository
    budget_entries: BudgetEntryRepository
    timeline_events: TimelineEventRepository
    trip_documents: TripDocumentRepository
    templates: TemplateRepository
    template_items: TemplateItemRepository
    mock_auth: Optional[MockAuthStore]


def create_repositories(
    mode: BackendMode,
    *,
    logger: StructuredLogger,
    supabase: Optional[AsyncClient] = None,
    storage: Optional[StorageAdapter] = None,
    clock: Optional[Clock] = None,
) -> RepositoryContainer:
    """Wire every domain repository onto the engines for *mode*.

    Args:
        mode: Backend decided at start-up.
        logger: Shared structured logger.
        supabase: Live client; required in ``LIVE`` mode.
        storage: Adapter for ``MOCK`` mode; defaults to a fresh in-memory one.
        clock: Time source for the local engine (tests).

    Raises:
        ValueError: ``LIVE`` mode without a Supabase client.
    """
    mock_auth: Optional[MockAuthStore] = None
    registry: Optional[MockRpcRegistry] = None

    if mode is BackendMode.LIVE:
        if supabase is None:
            raise ValueError("A Supabase client is required for the live backend.")
        client = supabase

        def engine(table: str, model: type[Any], owner_field: Optional[str] = None) -> Repository[Any]:
            return BaseRepository(client, table, model, logger, owner_field=owner_field)

    else:
        local_storage = storage if storage is not None else InMemoryStorageAdapter()
        mock_auth = MockAuthStore(storage=local_storage, logger=logger)
        registry = MockRpcRegistry()
        local_auth = mock_auth
        local_rpc = registry

        def engine(table: str, model: type[Any], owner_field: Optional[str] = None) -> Repository[Any]:
            return MockRepository(
                table,
                model,
                local_storage,
                logger,
                auth=local_auth,
                rpc=local_rpc,
                owner_field=owner_field,
                clock=clock,
            )

    household_engine = engine(HouseholdRepository.TABLE, Household)
    member_engine = engine(MemberRepository.TABLE, Member)
    wishlist_item_engine = engine(WishlistItemRepository.TABLE, WishlistItem)
    trip_member_engine = engine(TripMemberRepository.TABLE, TripMember)

    if registry is not None and mock_auth is not None:
        register_mock_procedures(
            registry,
            auth=mock_auth,
            households=household_engine,
            members=member_engine,
            wishlist_items=wishlist_item_engine,
            logger=logger,
        )

    template_items = TemplateItemRepository(
        engine(TemplateItemRepository.TABLE, PackingTemplateItem), logger
    )

    logger.info("Repositories wired for %s backend.", mode.value)
    return RepositoryContainer(
        households=HouseholdRepository(household_engine, member_engine, logger),
        members=MemberRepository(member_engine, logger),
        invitations=InvitationRepository(
            engine(InvitationRepository.TABLE, Invitation), logger
        ),
        shopping_lists=ShoppingListRepository(
            engine(
                ShoppingListRepository.TABLE,
                ShoppingList,
                ShoppingListRepository.OWNER_FIELD,
            ),
            logger,
        ),
        shopping_items=ShoppingItemRepository(
            engine(
                ShoppingItemRepository.TABLE,
                ShoppingItem,
                ShoppingItemRepository.OWNER_FIELD,
            ),
            logger,
        ),
        wishlists=WishlistRepository(
            engine(WishlistRepository.TABLE, Wishlist), member_engine, logger
        ),
        wishlist_items=WishlistItemRepository(wishlist_item_engine, logger),
        trips=TripRepository(
            engine(TripRepository.TABLE, Trip, TripRepository.OWNER_FIELD),
            trip_member_engine,
            logger,
        ),
        trip_members=TripMemberRepository(trip_member_engine, logger),
        packing_items=PackingItemRepository(
            engine(PackingItemRepository.TABLE, PackingItem), logger
        ),
        budget_entries=BudgetEntryRepository(
            engine(BudgetEntryRepository.TABLE, BudgetEntry), logger
        ),
        timeline_events=TimelineEventRepository(
            engine(TimelineEventRepository.TABLE, TimelineEvent), logger
        ),
        trip_documents=TripDocumentRepository(
            engine(TripDocumentRepository.TABLE, TripDocument), logger
        ),
        templates=TemplateRepository(
            engine(TemplateRepository.TABLE, PackingTemplate, TemplateRepository.OWNER_FIELD),
            template_items,
            logger,
        ),
        template_items=template_items,
        mock_auth=mock_auth,
    )
