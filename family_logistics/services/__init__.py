"""
Business Logic Services Package.

Thin orchestration over the domain repositories.  Services never pick a
backend: they receive repositories already wired by
:func:`family_logistics.repositories.factory.create_repositories`.

The ``create_services()`` factory wires every service together, returning
a typed dict the application layer can consume without knowing the
internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from family_logistics.logger import StructuredLogger
from family_logistics.repositories.factory import RepositoryContainer
from family_logistics.services.household_service import HouseholdService
from family_logistics.services.shopping_service import ShoppingService
from family_logistics.services.trip_service import TripService
from family_logistics.services.wishlist_service import WishlistService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    household_service: HouseholdService
    shopping_service: ShoppingService
    wishlist_service: WishlistService
    trip_service: TripService


def create_services(
    repositories: RepositoryContainer, logger: StructuredLogger
) -> ServiceContainer:
    """
    Wire all services onto the given repositories.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup.

    Args:
        repositories: Container returned by ``create_repositories``.
        logger: Shared structured logger.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    return ServiceContainer(
        household_service=HouseholdService(
            households=repositories["households"],
            members=repositories["members"],
            invitations=repositories["invitations"],
            logger=logger,
        ),
        shopping_service=ShoppingService(
            lists=repositories["shopping_lists"],
            items=repositories["shopping_items"],
            logger=logger,
        ),
        wishlist_service=WishlistService(
            wishlists=repositories["wishlists"],
            items=repositories["wishlist_items"],
            logger=logger,
        ),
        trip_service=TripService(
            trips=repositories["trips"],
            trip_members=repositories["trip_members"],
            packing_items=repositories["packing_items"],
            budget_entries=repositories["budget_entries"],
            timeline_events=repositories["timeline_events"],
            documents=repositories["trip_documents"],
            templates=repositories["templates"],
            logger=logger,
        ),
    )
